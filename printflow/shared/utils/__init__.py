"""Shared utilities: datetime, generators."""

from printflow.shared.utils.datetime import ensure_utc, next_timestamp, utc_now
from printflow.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "next_timestamp",
]
