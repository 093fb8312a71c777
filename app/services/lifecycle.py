"""
Status lifecycles for posts and media files.
"""
from typing import Dict, FrozenSet

from app.core.exceptions import ValidationException

POST_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "draft": frozenset({"scheduled", "published", "failed"}),
    "scheduled": frozenset({"draft", "published", "failed"}),
    "failed": frozenset({"draft", "scheduled"}),
    "published": frozenset(),
}

MEDIA_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"processing", "failed"}),
    "processing": frozenset({"completed", "failed"}),
    "failed": frozenset({"pending"}),
    "completed": frozenset(),
}


def check_transition(transitions: Dict[str, FrozenSet[str]], current: str, target: str) -> bool:
    """Return True when the status actually changes; raise if the move is not allowed.

    Moving to the current status is a no-op rather than an error.
    """
    if current == target:
        return False
    if target not in transitions.get(current, frozenset()):
        raise ValidationException(
            f"Cannot change status from {current} to {target}",
            details={"current_status": current, "allowed": sorted(transitions.get(current, ()))},
        )
    return True
