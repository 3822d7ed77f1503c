"""Status transition table: which role may move a task from which status to which.

The table is an explicit mapping (role, current status) -> frozenset of
legal target statuses. It is built once at import and checked for
completeness by validate_transition_table() during application startup.

Management has an override: from any status other than review it may move a
task to any other status. From review the specific entries apply
(approved, rejected, design). A request for the current status is never
legal for any role.
"""

from __future__ import annotations

from collections.abc import Mapping

from printflow.domain.enums import Role, TaskStatus

TransitionTable = Mapping[tuple[Role, TaskStatus], frozenset[TaskStatus]]

_SPECIFIC_RULES: dict[Role, dict[TaskStatus, frozenset[TaskStatus]]] = {
    Role.INTAKE: {
        TaskStatus.NEW: frozenset({TaskStatus.DESIGN}),
        TaskStatus.REJECTED: frozenset({TaskStatus.DESIGN}),
    },
    Role.DESIGN: {
        TaskStatus.DESIGN: frozenset({TaskStatus.REVIEW, TaskStatus.REJECTED}),
    },
    Role.MANAGEMENT: {
        TaskStatus.REVIEW: frozenset(
            {TaskStatus.APPROVED, TaskStatus.REJECTED, TaskStatus.DESIGN}
        ),
    },
    Role.PRODUCTION: {
        TaskStatus.APPROVED: frozenset({TaskStatus.PRODUCTION}),
        TaskStatus.PRODUCTION: frozenset({TaskStatus.COMPLETED}),
    },
}

_OVERRIDE_ROLES: frozenset[Role] = frozenset({Role.MANAGEMENT})


def build_transition_table() -> dict[tuple[Role, TaskStatus], frozenset[TaskStatus]]:
    """Expand the rules into a complete (role, status) -> targets mapping."""
    table: dict[tuple[Role, TaskStatus], frozenset[TaskStatus]] = {}
    for role in Role:
        specific = _SPECIFIC_RULES.get(role, {})
        for status in TaskStatus:
            if status in specific:
                targets = specific[status]
            elif role in _OVERRIDE_ROLES:
                targets = frozenset(s for s in TaskStatus if s is not status)
            else:
                targets = frozenset()
            table[(role, status)] = targets
    return table


TRANSITIONS: dict[tuple[Role, TaskStatus], frozenset[TaskStatus]] = build_transition_table()


def validate_transition_table(table: TransitionTable = TRANSITIONS) -> None:
    """Raise ValueError unless every (role, status) pair has a well-formed entry.

    Checks: every role x status key is present, no unknown keys, every target
    is a TaskStatus, and no entry allows a transition to the same status.
    """
    expected = {(role, status) for role in Role for status in TaskStatus}
    missing = expected - set(table)
    if missing:
        pairs = ", ".join(sorted(f"{r.value}/{s.value}" for r, s in missing))
        raise ValueError(f"Transition table incomplete; missing: {pairs}")
    unknown = set(table) - expected
    if unknown:
        raise ValueError(f"Transition table has unknown keys: {sorted(map(str, unknown))}")
    for (role, status), targets in table.items():
        for target in targets:
            if not isinstance(target, TaskStatus):
                raise ValueError(
                    f"Transition table entry {role.value}/{status.value} has invalid target {target!r}"
                )
        if status in targets:
            raise ValueError(
                f"Transition table entry {role.value}/{status.value} allows a self-transition"
            )


def allowed_targets(
    role: Role, status: TaskStatus, table: TransitionTable = TRANSITIONS
) -> frozenset[TaskStatus]:
    """Return the statuses role may move a task to from status."""
    return table.get((role, status), frozenset())


def is_transition_allowed(
    role: Role,
    current: TaskStatus,
    requested: TaskStatus,
    table: TransitionTable = TRANSITIONS,
) -> bool:
    """Return whether role may move a task from current to requested."""
    return requested in allowed_targets(role, current, table)
