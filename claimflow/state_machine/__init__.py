# State machine module
from .machine import ClaimStateMachine, state_machine, validate_transition

__all__ = ["ClaimStateMachine", "state_machine", "validate_transition"]
