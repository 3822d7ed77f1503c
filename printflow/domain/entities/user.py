"""Actor and directory user entities.

Identity is issued by an external provider; the role it supplies is
authoritative and is never re-derived from task data.
"""

from dataclasses import dataclass

from printflow.domain.enums import Role


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of an operation."""

    uid: str
    role: Role
    display_name: str = ""
    email: str = ""


@dataclass(frozen=True)
class DirectoryUser:
    """A user known to the directory; only active users receive notifications."""

    uid: str
    role: Role
    display_name: str
    email: str
    active: bool = True
