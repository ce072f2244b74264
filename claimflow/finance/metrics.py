"""
Claim Metrics Calculator

Derives a claim's current value, increase, percentage increase and unit
price from its initial facts and the full set of supplements that currently
count. Always recomputed from scratch: a supplement can leave the approved
set again, and running totals would drift from it.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from claimflow.core.models import (
    Claim,
    ClaimFinancials,
    ClaimMetrics,
    CommissionInput,
    RateProfile,
    Supplement,
)
from claimflow.core.states import COUNTED_SUPPLEMENT_STATUSES, SupplementStatus
from claimflow.finance.commission import calculate_commission
from claimflow.finance.rounding import require_amount, round_fraction, round_money, to_decimal

logger = logging.getLogger(__name__)


def compute_claim_metrics(
    initial_value: float,
    base_unit_value: float,
    total_units: float,
    approved_amounts: Iterable[float]
) -> ClaimMetrics:
    """
    Compute a claim's derived metrics.

    Args:
        initial_value: Initial replacement-cost value
        base_unit_value: Value divided by the unit count (roof RCV)
        total_units: Units of work (roof squares)
        approved_amounts: Amounts of every supplement that currently counts

    Returns:
        ClaimMetrics; percentage_increase is a fraction rounded to 4 places

    Raises:
        InvalidInputError: If any input is negative or non-finite
    """
    initial = to_decimal(require_amount(initial_value, "initial_value"))
    base_value = to_decimal(require_amount(base_unit_value, "base_unit_value"))
    units = to_decimal(require_amount(total_units, "total_units"))

    supplements_total = sum(
        (to_decimal(require_amount(a, "approved supplement amount")) for a in approved_amounts),
        Decimal("0"),
    )

    current_total = initial + supplements_total
    total_increase = current_total - initial

    if initial > 0:
        percentage = round_fraction(total_increase / initial)
    else:
        percentage = 0.0

    unit_price = base_value / units if units > 0 else Decimal("0")

    return ClaimMetrics(
        current_total_value=round_money(current_total),
        total_increase=round_money(total_increase),
        percentage_increase=percentage,
        unit_price=round_money(unit_price),
    )


def counted_amount(supplement: Supplement) -> Optional[float]:
    """
    The amount a supplement contributes to its claim, or None if it does not count.

    Approved supplements count in full; partial ones count their approved amount.
    """
    if supplement.status not in COUNTED_SUPPLEMENT_STATUSES:
        return None
    if supplement.status == SupplementStatus.PARTIAL and supplement.approved_amount is not None:
        return supplement.approved_amount
    return supplement.amount


def approved_supplement_amounts(supplements: Iterable[Supplement]) -> List[float]:
    amounts = []
    for supplement in supplements:
        amount = counted_amount(supplement)
        if amount is not None:
            amounts.append(amount)
    return amounts


def initial_unit_price(base_unit_value: float, total_units: float) -> float:
    """Unit price stamped on a claim at creation."""
    if total_units <= 0:
        return 0.0
    return round_money(to_decimal(base_unit_value) / to_decimal(total_units))


def supplement_impact(current_value: float, amount: float) -> Tuple[float, float]:
    """Return (previous_value, new_value) for a supplement added to a claim at current_value."""
    previous = to_decimal(require_amount(current_value, "current_value"))
    return round_money(previous), round_money(previous + to_decimal(require_amount(amount, "amount")))


def latest_unit_counts(supplements: Sequence[Supplement]) -> Tuple[Optional[float], Optional[float]]:
    """Unit counts from the most recent counted supplement that recorded both."""
    counted = [
        s for s in supplements
        if s.status in COUNTED_SUPPLEMENT_STATUSES
        and s.previous_units is not None
        and s.new_units is not None
    ]
    if not counted:
        return None, None
    latest = max(counted, key=lambda s: s.sequence)
    return latest.previous_units, latest.new_units


def recalculate_claim(
    claim: Claim,
    supplements: Sequence[Supplement],
    contractor_rates: RateProfile,
    estimator_rates: RateProfile
) -> ClaimFinancials:
    """
    Recompute every derived financial field of a claim.

    Runs the metrics over the full supplement set, then the commission on
    the resulting total increase. Nothing is written to the claim here; the
    caller applies the returned values in one step.
    """
    metrics = compute_claim_metrics(
        initial_value=claim.initial_value,
        base_unit_value=claim.base_unit_value,
        total_units=claim.total_units,
        approved_amounts=approved_supplement_amounts(supplements),
    )

    previous_units, new_units = latest_unit_counts(supplements)

    commission = calculate_commission(
        CommissionInput(
            job_type=claim.job_type,
            property_type=claim.property_type,
            previous_units=previous_units,
            new_units=new_units,
            commissionable_amount=metrics.total_increase,
            contractor_rates=contractor_rates,
            estimator_rates=estimator_rates,
        )
    )

    logger.info(
        f"Recalculated claim {claim.id}: total={metrics.current_total_value:.2f}, "
        f"increase={metrics.total_increase:.2f}, type={commission.commission_type.value}"
    )

    return ClaimFinancials(
        **metrics.model_dump(),
        commission_type=commission.commission_type,
        contractor_billing_amount=commission.contractor_amount,
        estimator_commission=commission.estimator_amount,
        commission=commission,
    )
