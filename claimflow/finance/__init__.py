# Finance module - rate profiles, commission and claim metrics
from .rates import build_rate_profile, select_rate, select_flat_fee, first_configured
from .classifier import classify_commission_type
from .commission import calculate_commission
from .metrics import (
    compute_claim_metrics,
    approved_supplement_amounts,
    initial_unit_price,
    supplement_impact,
    recalculate_claim,
)
from .compliance import compliance_status, claim_compliance, claims_requiring_action

__all__ = [
    "build_rate_profile",
    "select_rate",
    "select_flat_fee",
    "first_configured",
    "classify_commission_type",
    "calculate_commission",
    "compute_claim_metrics",
    "approved_supplement_amounts",
    "initial_unit_price",
    "supplement_impact",
    "recalculate_claim",
    "compliance_status",
    "claim_compliance",
    "claims_requiring_action",
]
