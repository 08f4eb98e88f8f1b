"""Application status workflow.

Applications start ``pending`` and only move forward. ``accepted`` and
``rejected`` are final.
"""

from enum import Enum

from jobmarket.errors import InvalidTransitionError, ValidationError


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


INITIAL_STATUS = ApplicationStatus.PENDING

TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset(
        {ApplicationStatus.REVIEWED, ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.REVIEWED: frozenset(
        {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.ACCEPTED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}

FINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def parse_status(value: str) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError("status", f"Invalid status. Must be one of: {allowed}") from None


def is_final(status: str) -> bool:
    return status in {s.value for s in FINAL_STATUSES}


def check_transition(current: str, target: str, enforce: bool = True) -> ApplicationStatus:
    """Validate moving from ``current`` to ``target`` and return the target.

    Re-applying the current status is allowed. With ``enforce`` off any known
    status is accepted, matching the permissive behaviour older clients expect.
    """
    target_status = parse_status(target)
    if not enforce:
        return target_status
    current_status = parse_status(current)
    if target_status == current_status:
        return target_status
    if target_status not in TRANSITIONS[current_status]:
        raise InvalidTransitionError(current_status.value, target_status.value)
    return target_status
