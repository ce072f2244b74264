"""
Commission Calculator

Computes contractor billing and estimator commission for one commission
event, keeping the flat-fee and percentage components apart so reports can
show where each dollar came from.
"""
import logging
from typing import Tuple

from claimflow.core.models import (
    CommissionBreakdown,
    CommissionInput,
    CommissionResult,
    PartyAmounts,
    RateProfile,
)
from claimflow.core.states import CommissionType, PropertyType
from claimflow.finance.classifier import classify_commission_type
from claimflow.finance.rates import select_flat_fee, select_rate
from claimflow.finance.rounding import multiply_money, require_amount, round_money

logger = logging.getLogger(__name__)


def _party_amounts(
    profile: RateProfile,
    commission_type: CommissionType,
    property_type: PropertyType,
    commissionable_amount: float
) -> Tuple[float, float, float, float]:
    """Return (rate, flat_fee, percentage_amount, total) for one party."""
    rate = select_rate(profile, commission_type, property_type)
    flat_fee = select_flat_fee(profile, commission_type)

    if commission_type == CommissionType.ESTIMATE:
        percentage_amount = 0.0
    else:
        percentage_amount = multiply_money(commissionable_amount, rate)

    total = round_money(flat_fee + percentage_amount)
    return rate, flat_fee, percentage_amount, total


def calculate_commission(data: CommissionInput) -> CommissionResult:
    """
    Calculate billing and commission for a claim event.

    Args:
        data: Job/property type, unit counts, commissionable amount and
            both parties' rate profiles

    Returns:
        CommissionResult with both totals, the rates used and a breakdown

    Raises:
        InvalidInputError: If the commissionable amount is negative or non-finite,
            or the job type is unknown
    """
    amount = require_amount(data.commissionable_amount, "commissionable_amount")

    commission_type = classify_commission_type(data.job_type, data.previous_units, data.new_units)

    contractor_rate, contractor_fee, contractor_pct, contractor_total = _party_amounts(
        data.contractor_rates, commission_type, data.property_type, amount
    )
    estimator_rate, estimator_fee, estimator_pct, estimator_total = _party_amounts(
        data.estimator_rates, commission_type, data.property_type, amount
    )

    logger.debug(
        f"Commission {commission_type.value} on {amount:.2f}: "
        f"contractor={contractor_total:.2f} ({contractor_rate}), "
        f"estimator={estimator_total:.2f} ({estimator_rate})"
    )

    return CommissionResult(
        commission_type=commission_type,
        contractor_rate=contractor_rate,
        contractor_amount=contractor_total,
        estimator_rate=estimator_rate,
        estimator_amount=estimator_total,
        breakdown=CommissionBreakdown(
            base_amount=amount,
            flat_fees=PartyAmounts(contractor=contractor_fee, estimator=estimator_fee),
            percentage_amounts=PartyAmounts(contractor=contractor_pct, estimator=estimator_pct),
        ),
    )
