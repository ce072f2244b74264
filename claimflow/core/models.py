"""
Claim Pydantic Models

Defines the data models for claims, supplements, rate profiles and the
outputs of the commission engine.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

from .states import (
    ClaimStatus,
    CommissionType,
    JobType,
    PropertyType,
    SupplementStatus,
)


def _new_id() -> str:
    return str(uuid4())


class AuditLogEntry(BaseModel):
    """Entry in the audit trail, recorded after every accepted mutation."""
    entity_type: str = Field(..., description="claim, supplement, contractor or estimator")
    entity_id: str = Field(..., description="Id of the mutated entity")
    action: str = Field(..., description="create, update, status_change, delete or recalculate")
    field_name: Optional[str] = Field(default=None, description="Field that changed, if a single one")
    old_value: Optional[str] = Field(default=None, description="Value before the change")
    new_value: Optional[str] = Field(default=None, description="Value after the change")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the event occurred")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Extra context for reporting")


class PartyRateConfig(BaseModel):
    """
    Raw rate configuration stored on a contractor or estimator.

    Rates are fractions (0.125 means 12.5%). Every field is optional; a
    missing rate falls back to the party's legacy default rate.
    """
    billing_percentage: Optional[float] = Field(default=None, ge=0, description="Contractor legacy default rate")
    commission_percentage: Optional[float] = Field(default=None, ge=0, description="Estimator legacy default rate")
    residential_rate: Optional[float] = Field(default=None, ge=0)
    commercial_rate: Optional[float] = Field(default=None, ge=0)
    reinspection_rate: Optional[float] = Field(default=None, ge=0)
    estimate_flat_fee: Optional[float] = Field(default=None, ge=0, description="Flat fee for estimate-only jobs")


class PartyCreate(BaseModel):
    """Request model for registering a contractor or estimator."""
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(default=None)
    rates: PartyRateConfig = Field(default_factory=PartyRateConfig)


class Party(BaseModel):
    """A contractor (billed) or estimator (paid commission)."""
    id: str = Field(default_factory=_new_id)
    role: str = Field(..., description="contractor or estimator")
    name: str
    email: Optional[str] = None
    rates: PartyRateConfig
    created_at: datetime = Field(default_factory=datetime.now)


class RateProfile(BaseModel):
    """Normalized rates for one party. None means not configured, which is not the same as 0."""
    default_rate: float = 0.0
    residential_rate: Optional[float] = None
    commercial_rate: Optional[float] = None
    reinspection_rate: Optional[float] = None
    estimate_flat_fee: Optional[float] = None


class CommissionInput(BaseModel):
    # Unknown job types are rejected by the classifier as InvalidInputError
    job_type: Union[JobType, str]
    property_type: PropertyType = PropertyType.RESIDENTIAL
    previous_units: Optional[float] = None
    new_units: Optional[float] = None
    commissionable_amount: float
    contractor_rates: RateProfile
    estimator_rates: RateProfile


class PartyAmounts(BaseModel):
    contractor: float = 0.0
    estimator: float = 0.0


class CommissionBreakdown(BaseModel):
    base_amount: float
    flat_fees: PartyAmounts
    percentage_amounts: PartyAmounts


class CommissionResult(BaseModel):
    """Billing and commission for one commission event, with its provenance."""
    commission_type: CommissionType
    contractor_rate: float
    contractor_amount: float
    estimator_rate: float
    estimator_amount: float
    breakdown: CommissionBreakdown


class ClaimMetrics(BaseModel):
    current_total_value: float
    total_increase: float
    percentage_increase: float = Field(..., description="Fraction, 4 decimal places")
    unit_price: float = Field(..., description="Dollars per unit of work (roof square)")


class ClaimFinancials(ClaimMetrics):
    """Every derived financial field of a claim, written back in one step."""
    commission_type: CommissionType
    contractor_billing_amount: float
    estimator_commission: float
    commission: CommissionResult


class ClaimCreate(BaseModel):
    """Request model for creating a new claim."""
    policyholder_name: str = Field(..., min_length=1, max_length=200, description="Name of the policyholder")
    loss_address: Optional[str] = Field(default=None, max_length=200)
    claim_number: Optional[str] = Field(default=None, max_length=50)
    job_type: JobType = Field(default=JobType.SUPPLEMENT)
    property_type: PropertyType = Field(default=PropertyType.RESIDENTIAL)
    contractor_id: str = Field(..., min_length=1)
    estimator_id: str = Field(..., min_length=1)
    total_units: float = Field(..., gt=0, description="Total roof squares")
    base_unit_value: float = Field(..., ge=0, description="Roof RCV, divided by total units for the unit price")
    initial_value: float = Field(..., ge=0, description="Initial replacement-cost value")


class Claim(BaseModel):
    """
    Claim Model

    The aggregate root: financial facts, classification facts and workflow
    facts. Derived financial fields are only ever written from a full
    recalculation.
    """
    id: str = Field(default_factory=_new_id, description="Unique claim identifier")
    policyholder_name: str = Field(..., description="Name of the policyholder")
    loss_address: Optional[str] = None
    claim_number: Optional[str] = None
    contractor_id: str
    estimator_id: str

    job_type: JobType = JobType.SUPPLEMENT
    property_type: PropertyType = PropertyType.RESIDENTIAL

    # Initial facts
    total_units: float = Field(..., description="Total roof squares")
    base_unit_value: float = Field(..., description="Roof RCV")
    initial_value: float = Field(..., description="Initial replacement-cost value")

    # Derived facts
    current_total_value: float = 0.0
    total_increase: float = 0.0
    percentage_increase: float = 0.0
    unit_price: float = 0.0
    contractor_billing_amount: float = 0.0
    estimator_commission: float = 0.0
    commission_type: Optional[CommissionType] = None

    # Workflow facts
    status: ClaimStatus = Field(default=ClaimStatus.MISSING_INFO, description="Current workflow status")
    status_history: List[ClaimStatus] = Field(
        default_factory=list,
        description="Statuses the claim has left, oldest first"
    )
    status_changed_at: Optional[datetime] = None
    last_activity_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)

    def record_status_change(self, new_status: ClaimStatus, at: datetime) -> None:
        """Record a status transition and stamp the workflow timestamps."""
        self.status_history.append(self.status)
        self.status = new_status
        self.status_changed_at = at
        self.last_activity_at = at
        if new_status == ClaimStatus.COMPLETED:
            self.completed_at = at

    def apply_financials(self, financials: ClaimFinancials, at: datetime) -> None:
        """Write a full recalculation back onto the claim."""
        self.current_total_value = financials.current_total_value
        self.total_increase = financials.total_increase
        self.percentage_increase = financials.percentage_increase
        self.unit_price = financials.unit_price
        self.contractor_billing_amount = financials.contractor_billing_amount
        self.estimator_commission = financials.estimator_commission
        self.commission_type = financials.commission_type
        self.last_activity_at = at


class SupplementCreate(BaseModel):
    """Request model for adding a supplement to a claim."""
    amount: float = Field(..., gt=0, description="Requested dollar amount")
    description: str = Field(..., min_length=1, description="Line items being requested")
    previous_units: Optional[float] = Field(default=None, ge=0, description="Roof squares before reinspection")
    new_units: Optional[float] = Field(default=None, ge=0, description="Roof squares after reinspection")


class SupplementUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, gt=0)
    description: Optional[str] = Field(default=None, min_length=1)


class SupplementStatusUpdate(BaseModel):
    status: SupplementStatus
    approved_amount: Optional[float] = Field(default=None, ge=0, description="Required for partial approvals")


class Supplement(BaseModel):
    """A dollar request attached to a claim."""
    id: str = Field(default_factory=_new_id)
    claim_id: str
    sequence: int = Field(..., ge=1, description="Order within the claim")
    amount: float = Field(..., gt=0)
    approved_amount: Optional[float] = None
    status: SupplementStatus = SupplementStatus.DRAFT
    description: str
    previous_units: Optional[float] = None
    new_units: Optional[float] = None
    previous_value: float = Field(..., description="Claim value when the supplement was created")
    new_value: float = Field(..., description="Claim value if the supplement is approved in full")
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)


class TransitionResult(BaseModel):
    """Outcome of checking one requested status change."""
    accepted: bool
    current: ClaimStatus
    requested: ClaimStatus
    reason: Optional[str] = None
    legal_next_states: List[ClaimStatus] = Field(default_factory=list)
