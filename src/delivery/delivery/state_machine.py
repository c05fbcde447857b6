"""Delivery status state machine.

    PENDING → SHIPPED → DELIVERED
    {PENDING, SHIPPED} → CANCELLED

DELIVERED and CANCELLED are terminal. The functions here are pure and safe
to call from any thread.
"""

from enum import Enum

from shared.errors import InvalidTransition


class DeliveryStatus(Enum):
    PENDING = "PENDING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


_VALID_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.SHIPPED, DeliveryStatus.CANCELLED},
    DeliveryStatus.SHIPPED: {DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED},
    DeliveryStatus.DELIVERED: set(),  # terminal
    DeliveryStatus.CANCELLED: set(),  # terminal
}

_TERMINAL_MESSAGES = {
    DeliveryStatus.DELIVERED: "Delivery is already completed",
    DeliveryStatus.CANCELLED: "Delivery is cancelled",
}


class IllegalTransition(InvalidTransition):
    code = "illegal_transition"

    def __init__(self, current, requested, message: str):
        self.current = current
        self.requested = requested
        super().__init__(message)


def _coerce(status) -> DeliveryStatus | None:
    if isinstance(status, DeliveryStatus):
        return status
    try:
        return DeliveryStatus(str(status).upper())
    except ValueError:
        return None


def allowed_transitions(status) -> frozenset[DeliveryStatus]:
    """Statuses reachable from ``status`` in one step. Empty for terminal states."""
    current = _coerce(status)
    if current is None:
        raise IllegalTransition(status, None, f"Unknown delivery status: {status}")
    return frozenset(_VALID_TRANSITIONS[current])


def is_terminal(status) -> bool:
    return not allowed_transitions(status)


def transition(current, requested) -> DeliveryStatus:
    """Validate ``current → requested`` and return the new status.

    Raises IllegalTransition for any edge not in the table, including
    self-transitions and unknown status values.
    """
    source = _coerce(current)
    if source is None:
        raise IllegalTransition(current, requested, f"Unknown delivery status: {current}")
    target = _coerce(requested)
    if target is None:
        raise IllegalTransition(current, requested, f"Unknown delivery status: {requested}")

    allowed = _VALID_TRANSITIONS[source]
    if target in allowed:
        return target

    if not allowed:
        message = f"{_TERMINAL_MESSAGES[source]}; cannot change status to {target.value}"
    else:
        names = ", ".join(sorted(s.value for s in allowed))
        message = f"Cannot transition from {source.value} to {target.value}. Allowed: {names}"
    raise IllegalTransition(source, target, message)
