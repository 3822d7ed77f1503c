"""Presentation layer: HTTP routes and WebSocket endpoint."""
