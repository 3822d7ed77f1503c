"""Application layer: use-case services, DTOs, and ports (interfaces)."""
