"""
Reservation lifecycle states

State transitions:
- (new) -> PENDING (create)
- PENDING -> CONFIRMED (confirm, product still available)
- PENDING -> CANCELLED (cancel)
- CONFIRMED -> CANCELLED (cancel)
- CONFIRMED -> COMPLETED (complete, end date reached)

CANCELLED and COMPLETED are terminal. Only CONFIRMED reservations block
the product's calendar.
"""

from enum import Enum


class StateName(str, Enum):
    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    CANCELLED = 'Cancelled'
    COMPLETED = 'Completed'

    def __str__(self):
        return self.value


BLOCKING_STATES = (StateName.CONFIRMED.value,)

# States in which a reservation still holds a claim on the user's time
ACTIVE_STATES = (StateName.PENDING.value, StateName.CONFIRMED.value)

TERMINAL_STATES = (StateName.CANCELLED.value, StateName.COMPLETED.value)

# target state -> states it may be entered from
ALLOWED_TRANSITIONS = {
    StateName.CONFIRMED.value: frozenset({StateName.PENDING.value}),
    StateName.CANCELLED.value: frozenset({StateName.PENDING.value, StateName.CONFIRMED.value}),
    StateName.COMPLETED.value: frozenset({StateName.CONFIRMED.value}),
}


def can_transition(current: str, target: str) -> bool:
    """Check whether a reservation in `current` may move to `target`"""
    return str(current) in ALLOWED_TRANSITIONS.get(str(target), frozenset())


def is_terminal(state_name: str) -> bool:
    return str(state_name) in TERMINAL_STATES
