"""
FastAPI Endpoints for Claim Processing

Provides REST API for parties, claims, supplements and workflow status.
"""
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from claimflow.config import settings
from claimflow.core.exceptions import ClaimflowError, IllegalTransitionError, NotFoundError
from claimflow.core.models import (
    AuditLogEntry,
    Claim,
    ClaimCreate,
    Party,
    PartyCreate,
    Supplement,
    SupplementCreate,
    SupplementStatusUpdate,
    SupplementUpdate,
)
from claimflow.core.states import STATUS_LABELS, ClaimStatus, ComplianceStatus
from claimflow.finance.compliance import claim_compliance, claims_requiring_action
from claimflow.monitors.process_monitor import ProcessMonitor
from claimflow.state_machine.machine import ClaimStateMachine
from claimflow.store import CONTRACTOR, ESTIMATOR, ClaimStore

logger = logging.getLogger(__name__)

# Initialize routers
router = APIRouter(prefix="/claims", tags=["claims"])
supplements_router = APIRouter(prefix="/supplements", tags=["supplements"])
parties_router = APIRouter(tags=["parties"])

# In-memory store (would be a database in production)
store = ClaimStore()

# Initialize state machine and monitor
state_machine = ClaimStateMachine()
process_monitor = ProcessMonitor(state_machine, store)


class ClaimResponse(BaseModel):
    """Response model for claim operations."""
    claim: Claim
    message: str
    next_valid_states: List[ClaimStatus]
    compliance: ComplianceStatus


class StatusChangeRequest(BaseModel):
    """Request model for changing a claim's status."""
    target_status: ClaimStatus


class TransitionsResponse(BaseModel):
    claim_id: str
    current_status: ClaimStatus
    status_history: List[ClaimStatus]
    next_valid_states: List[ClaimStatus]
    is_terminal: bool


def _http_error(exc: ClaimflowError) -> HTTPException:
    """Map a claimflow error onto an HTTP error response."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, IllegalTransitionError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": str(exc),
                "current": exc.current.value,
                "requested": exc.requested.value,
                "legal_next_states": [s.value for s in exc.legal_next_states],
            },
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _claim_response(claim: Claim, message: str) -> ClaimResponse:
    return ClaimResponse(
        claim=claim,
        message=message,
        next_valid_states=state_machine.get_valid_transitions(claim.status),
        compliance=claim_compliance(claim, datetime.now()),
    )


# ----------------------------------------------------------------------
# Parties
# ----------------------------------------------------------------------

@parties_router.post("/contractors", response_model=Party, status_code=status.HTTP_201_CREATED)
async def create_contractor(data: PartyCreate) -> Party:
    try:
        return await process_monitor.register_party(CONTRACTOR, data)
    except ClaimflowError as e:
        raise _http_error(e)


@parties_router.get("/contractors/{party_id}", response_model=Party)
async def get_contractor(party_id: str) -> Party:
    try:
        return store.get_party(CONTRACTOR, party_id)
    except ClaimflowError as e:
        raise _http_error(e)


@parties_router.post("/estimators", response_model=Party, status_code=status.HTTP_201_CREATED)
async def create_estimator(data: PartyCreate) -> Party:
    try:
        return await process_monitor.register_party(ESTIMATOR, data)
    except ClaimflowError as e:
        raise _http_error(e)


@parties_router.get("/estimators/{party_id}", response_model=Party)
async def get_estimator(party_id: str) -> Party:
    try:
        return store.get_party(ESTIMATOR, party_id)
    except ClaimflowError as e:
        raise _http_error(e)


# ----------------------------------------------------------------------
# Claims
# ----------------------------------------------------------------------

@router.post("/", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def create_claim(claim_data: ClaimCreate) -> ClaimResponse:
    """
    Create a new claim.

    The claim starts in missing_info with its current value equal to the
    initial value.
    """
    try:
        claim = await process_monitor.create_claim(claim_data)
    except ClaimflowError as e:
        raise _http_error(e)

    return _claim_response(claim, f"Claim created successfully with ID {claim.id}")


@router.get("/", response_model=List[Claim])
async def list_claims() -> List[Claim]:
    """
    List all claims in the system.
    """
    return store.list_claims()


@router.get("/requiring-action", response_model=List[Claim])
async def list_claims_requiring_action() -> List[Claim]:
    """
    Claims with no activity past the compliance warning threshold, longest idle first.
    """
    return claims_requiring_action(
        store.list_claims(),
        datetime.now(),
        limit=settings.requiring_action_limit,
    )


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(claim_id: str) -> ClaimResponse:
    """
    Get details of a specific claim.
    """
    try:
        claim = store.get_claim(claim_id)
    except ClaimflowError as e:
        raise _http_error(e)

    return _claim_response(claim, f"Claim {claim_id} retrieved")


@router.post("/{claim_id}/status", response_model=ClaimResponse)
async def change_claim_status(claim_id: str, request: StatusChangeRequest) -> ClaimResponse:
    """
    Move a claim to a new workflow status.

    Illegal transitions are rejected with the list of legal next statuses
    and leave the claim unchanged.
    """
    try:
        claim, previous_status = await process_monitor.change_status(claim_id, request.target_status)
    except ClaimflowError as e:
        raise _http_error(e)

    return _claim_response(
        claim,
        f"Claim moved from {STATUS_LABELS[previous_status]} to {STATUS_LABELS[request.target_status]}",
    )


@router.get("/{claim_id}/transitions", response_model=TransitionsResponse)
async def get_claim_transitions(claim_id: str) -> TransitionsResponse:
    """
    Get the legal next statuses and status history for a claim.
    """
    try:
        claim = store.get_claim(claim_id)
    except ClaimflowError as e:
        raise _http_error(e)

    return TransitionsResponse(
        claim_id=claim.id,
        current_status=claim.status,
        status_history=claim.status_history,
        next_valid_states=state_machine.get_valid_transitions(claim.status),
        is_terminal=state_machine.is_terminal(claim.status),
    )


@router.post("/{claim_id}/recalculate", response_model=ClaimResponse)
async def recalculate_claim(claim_id: str) -> ClaimResponse:
    """
    Rerun the financial recalculation from the claim's current supplements.
    """
    try:
        claim = await process_monitor.recalculate(claim_id)
    except ClaimflowError as e:
        raise _http_error(e)

    return _claim_response(claim, f"Claim {claim_id} recalculated")


@router.get("/{claim_id}/audit", response_model=List[AuditLogEntry])
async def get_claim_audit(claim_id: str) -> List[AuditLogEntry]:
    """
    Audit trail of a claim and its supplements.
    """
    try:
        store.get_claim(claim_id)
    except ClaimflowError as e:
        raise _http_error(e)

    return process_monitor.auditor.entries_for(claim_id)


@router.post("/{claim_id}/supplements", response_model=Supplement, status_code=status.HTTP_201_CREATED)
async def add_supplement(claim_id: str, data: SupplementCreate) -> Supplement:
    """
    Add a draft supplement to a claim.
    """
    try:
        return await process_monitor.add_supplement(claim_id, data)
    except ClaimflowError as e:
        raise _http_error(e)


@router.get("/{claim_id}/supplements", response_model=List[Supplement])
async def list_supplements(claim_id: str) -> List[Supplement]:
    try:
        store.get_claim(claim_id)
    except ClaimflowError as e:
        raise _http_error(e)

    return store.supplements_for(claim_id)


# ----------------------------------------------------------------------
# Supplements
# ----------------------------------------------------------------------

@supplements_router.post("/{supplement_id}/status", response_model=Supplement)
async def change_supplement_status(supplement_id: str, request: SupplementStatusUpdate) -> Supplement:
    """
    Submit, approve, partially approve or deny a supplement.

    Entering or leaving an approval recalculates the claim.
    """
    try:
        return await process_monitor.update_supplement_status(
            supplement_id, request.status, request.approved_amount
        )
    except ClaimflowError as e:
        raise _http_error(e)


@supplements_router.patch("/{supplement_id}", response_model=Supplement)
async def update_supplement(supplement_id: str, data: SupplementUpdate) -> Supplement:
    try:
        return await process_monitor.update_supplement(supplement_id, data)
    except ClaimflowError as e:
        raise _http_error(e)


@supplements_router.delete("/{supplement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplement(supplement_id: str) -> None:
    """
    Delete a draft supplement.
    """
    try:
        await process_monitor.delete_supplement(supplement_id)
    except ClaimflowError as e:
        raise _http_error(e)
