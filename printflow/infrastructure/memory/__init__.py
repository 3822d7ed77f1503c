"""In-process document store (development and tests)."""

from printflow.infrastructure.memory.document_store import InMemoryDocumentClient

__all__ = ["InMemoryDocumentClient"]
