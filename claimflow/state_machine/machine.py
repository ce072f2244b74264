"""
Claim State Machine

Validates and applies workflow status transitions for claims.
"""
import logging
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Union

from claimflow.core.exceptions import IllegalTransitionError, InvalidInputError
from claimflow.core.models import Claim, TransitionResult
from claimflow.core.states import ClaimStatus

logger = logging.getLogger(__name__)

S = ClaimStatus


def coerce_status(status: Union[ClaimStatus, str]) -> ClaimStatus:
    try:
        return ClaimStatus(status)
    except ValueError:
        raise InvalidInputError(f"Unknown claim status {status!r}")


class ClaimStateMachine:
    """
    State machine for managing claim status transitions.

    Every status may be suspended except money_released and completed.
    Resuming from work_suspended re-enters near the start of the pipeline
    rather than where the claim left off, so suspended claims are re-triaged.
    """

    INITIAL_STATUS = S.MISSING_INFO

    # Define valid transitions (from_status -> set of valid to_statuses)
    TRANSITIONS: Dict[ClaimStatus, FrozenSet[ClaimStatus]] = {
        S.MISSING_INFO: frozenset({S.CONTRACTOR_REVIEW, S.WORK_SUSPENDED}),
        S.CONTRACTOR_REVIEW: frozenset({S.SUPPLEMENT_SENT, S.MISSING_INFO, S.WORK_SUSPENDED}),
        S.SUPPLEMENT_SENT: frozenset({S.SUPPLEMENT_RECEIVED, S.WORK_SUSPENDED}),
        S.SUPPLEMENT_RECEIVED: frozenset({
            S.COUNTERARGUMENT_SUBMITTED, S.CONTRACTOR_ADVANCE, S.WAITING_ON_BUILD, S.WORK_SUSPENDED,
        }),
        S.COUNTERARGUMENT_SUBMITTED: frozenset({
            S.ESCALATED, S.SUPPLEMENT_RECEIVED, S.REBUTTAL_POSTED, S.WORK_SUSPENDED,
        }),
        S.ESCALATED: frozenset({S.SUPPLEMENT_RECEIVED, S.REBUTTAL_POSTED, S.WORK_SUSPENDED}),
        S.CONTRACTOR_ADVANCE: frozenset({S.WAITING_ON_BUILD, S.WORK_SUSPENDED}),
        S.WAITING_ON_BUILD: frozenset({S.LINE_ITEMS_CONFIRMED, S.WORK_SUSPENDED}),
        S.LINE_ITEMS_CONFIRMED: frozenset({S.FINAL_INVOICE_SENT, S.WORK_SUSPENDED}),
        S.REBUTTAL_POSTED: frozenset({S.SUPPLEMENT_RECEIVED, S.FINAL_INVOICE_SENT, S.WORK_SUSPENDED}),
        S.FINAL_INVOICE_SENT: frozenset({S.FINAL_INVOICE_RECEIVED, S.WORK_SUSPENDED}),
        S.FINAL_INVOICE_RECEIVED: frozenset({S.MONEY_RELEASED, S.WORK_SUSPENDED}),
        S.MONEY_RELEASED: frozenset({S.COMPLETED}),
        S.WORK_SUSPENDED: frozenset({S.MISSING_INFO, S.CONTRACTOR_REVIEW}),
        S.COMPLETED: frozenset(),  # Terminal state
    }

    def get_valid_transitions(self, status: Union[ClaimStatus, str]) -> List[ClaimStatus]:
        """
        Get list of valid next statuses, in workflow declaration order.
        """
        status = coerce_status(status)
        allowed = self.TRANSITIONS[status]
        return [s for s in ClaimStatus if s in allowed]

    def is_terminal(self, status: Union[ClaimStatus, str]) -> bool:
        return not self.TRANSITIONS[coerce_status(status)]

    def can_transition(self, status: Union[ClaimStatus, str], target: Union[ClaimStatus, str]) -> bool:
        """Check if a transition from status to target is valid."""
        return coerce_status(target) in self.TRANSITIONS[coerce_status(status)]

    def validate_transition(
        self,
        current: Union[ClaimStatus, str],
        requested: Union[ClaimStatus, str]
    ) -> TransitionResult:
        """
        Check a requested status change without applying it.

        Returns:
            TransitionResult; when rejected, reason names the attempted
            transition and legal_next_states lists the alternatives

        Raises:
            InvalidInputError: If either status is not a known status
        """
        current = coerce_status(current)
        requested = coerce_status(requested)
        valid = self.get_valid_transitions(current)

        if requested in valid:
            return TransitionResult(
                accepted=True,
                current=current,
                requested=requested,
                legal_next_states=valid,
            )

        if valid:
            options = ", ".join(s.value for s in valid)
            reason = (
                f"Invalid transition from {current.value} to {requested.value}. "
                f"Valid next states: {options}"
            )
        else:
            reason = (
                f"Invalid transition from {current.value} to {requested.value}: "
                f"{current.value} is a terminal state, no valid next states"
            )

        return TransitionResult(
            accepted=False,
            current=current,
            requested=requested,
            reason=reason,
            legal_next_states=valid,
        )

    def transition(
        self,
        claim: Claim,
        target_status: Union[ClaimStatus, str],
        now: Optional[datetime] = None
    ) -> Claim:
        """
        Execute a status transition.

        Args:
            claim: The claim to transition
            target_status: The desired next status
            now: Timestamp to stamp, defaults to the current time

        Returns:
            Updated claim with new status and timestamps

        Raises:
            IllegalTransitionError: If the transition is not valid; the
                claim is left unchanged
        """
        result = self.validate_transition(claim.status, target_status)

        if not result.accepted:
            logger.warning(f"Claim {claim.id}: {result.reason}")
            raise IllegalTransitionError(
                current=result.current,
                requested=result.requested,
                legal_next_states=result.legal_next_states,
                message=result.reason,
            )

        claim.record_status_change(result.requested, now or datetime.now())
        logger.info(f"Claim {claim.id} transitioned from {result.current.value} to {result.requested.value}")

        return claim


# Shared instance for callers that only need validation
state_machine = ClaimStateMachine()


def validate_transition(
    current: Union[ClaimStatus, str],
    requested: Union[ClaimStatus, str]
) -> TransitionResult:
    return state_machine.validate_transition(current, requested)
