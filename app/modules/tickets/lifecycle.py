"""Ticket transition rules.

Every guarded transition in the ticket service is checked here so the rules live in one
table instead of being spread across status comparisons.
"""
import enum
from app.modules.tickets.models import TicketStatus

class Action(str, enum.Enum):
    CALL = "call"
    CONFIRM = "confirm"
    START = "start"
    COMPLETE = "complete"

# action -> (statuses it may start from, resulting status)
TRANSITIONS: dict[Action, tuple[frozenset[TicketStatus], TicketStatus]] = {
    Action.CALL: (frozenset({TicketStatus.WAITING}), TicketStatus.INVITED),
    Action.CONFIRM: (
        frozenset({TicketStatus.WAITING, TicketStatus.INVITED, TicketStatus.COMPLETED}),
        TicketStatus.REGISTERED,
    ),
    Action.START: (frozenset({TicketStatus.REGISTERED}), TicketStatus.IN_PROGRESS),
    Action.COMPLETE: (frozenset({TicketStatus.IN_PROGRESS}), TicketStatus.COMPLETED),
}

# statuses that finish a visit and close its reception log
VISIT_FINAL = frozenset({TicketStatus.COMPLETED})

def can(action: Action, current: TicketStatus) -> bool:
    allowed, _ = TRANSITIONS[action]
    return current in allowed

def target(action: Action) -> TicketStatus:
    return TRANSITIONS[action][1]

def is_stale_completion(current: TicketStatus, requested: TicketStatus) -> bool:
    """A registrar "completed" that arrives after the ticket entered the doctor's queue."""
    return current == TicketStatus.REGISTERED and requested == TicketStatus.COMPLETED
