"""Infrastructure: document-store clients, repositories, identity verification."""
