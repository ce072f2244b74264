# Core module - states, models and errors
from .states import (
    ClaimStatus,
    SupplementStatus,
    JobType,
    PropertyType,
    CommissionType,
    ComplianceStatus,
    STATUS_LABELS,
)
from .models import (
    AuditLogEntry,
    Claim,
    ClaimCreate,
    ClaimFinancials,
    ClaimMetrics,
    CommissionInput,
    CommissionResult,
    Party,
    PartyCreate,
    PartyRateConfig,
    RateProfile,
    Supplement,
    SupplementCreate,
    TransitionResult,
)
from .exceptions import ClaimflowError, InvalidInputError, IllegalTransitionError, NotFoundError

__all__ = [
    "ClaimStatus",
    "SupplementStatus",
    "JobType",
    "PropertyType",
    "CommissionType",
    "ComplianceStatus",
    "STATUS_LABELS",
    "AuditLogEntry",
    "Claim",
    "ClaimCreate",
    "ClaimFinancials",
    "ClaimMetrics",
    "CommissionInput",
    "CommissionResult",
    "Party",
    "PartyCreate",
    "PartyRateConfig",
    "RateProfile",
    "Supplement",
    "SupplementCreate",
    "TransitionResult",
    "ClaimflowError",
    "InvalidInputError",
    "IllegalTransitionError",
    "NotFoundError",
]
