"""PrintFlow: print-shop task workflow service."""
