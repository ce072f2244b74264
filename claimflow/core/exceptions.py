"""
Claimflow Errors

Invalid input and illegal transitions subclass ValueError so callers that
already catch ValueError around the state machine keep working.
"""
from typing import List


class ClaimflowError(Exception):
    """Base class for all claimflow errors."""


class InvalidInputError(ClaimflowError, ValueError):
    """An amount, rate or enum value was rejected before any calculation ran."""


class IllegalTransitionError(ClaimflowError, ValueError):
    """A status change that is not in the workflow's adjacency table."""

    def __init__(self, current, requested, legal_next_states: List, message: str):
        super().__init__(message)
        self.current = current
        self.requested = requested
        self.legal_next_states = list(legal_next_states)


class NotFoundError(ClaimflowError, LookupError):
    """A claim, supplement or party referenced by id does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id
