"""ASGI middleware applied in printflow.main."""

from printflow.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
