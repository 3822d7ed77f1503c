"""Shared utilities and cross-cutting concerns (telemetry, request context)."""
