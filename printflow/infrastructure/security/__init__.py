"""Identity token verification."""

from printflow.infrastructure.security.jwt import actor_from_claims, authenticate, verify_token

__all__ = ["actor_from_claims", "authenticate", "verify_token"]
