"""Unit tests for claim metrics and full claim recalculation."""

import math

import pytest

from claimflow.core.exceptions import InvalidInputError
from claimflow.core.models import Supplement
from claimflow.core.states import CommissionType, SupplementStatus
from claimflow.finance.metrics import (
    approved_supplement_amounts,
    compute_claim_metrics,
    initial_unit_price,
    latest_unit_counts,
    recalculate_claim,
    supplement_impact,
)


def _supplement(sequence, amount, status, approved_amount=None, previous_units=None, new_units=None):
    return Supplement(
        claim_id="claim-1",
        sequence=sequence,
        amount=amount,
        approved_amount=approved_amount,
        status=status,
        description=f"Supplement {sequence}",
        previous_units=previous_units,
        new_units=new_units,
        previous_value=18500,
        new_value=18500 + amount,
    )


class TestComputeClaimMetrics:

    def test_single_approved_supplement(self):
        metrics = compute_claim_metrics(18500, 12000, 30, [4200])

        assert metrics.current_total_value == 22700.00
        assert metrics.total_increase == 4200.00
        assert metrics.percentage_increase == 0.2270
        assert metrics.unit_price == 400.00

    def test_no_supplements(self):
        metrics = compute_claim_metrics(18500, 12000, 30, [])

        assert metrics.current_total_value == 18500.00
        assert metrics.total_increase == 0.0
        assert metrics.percentage_increase == 0.0

    def test_is_idempotent(self):
        first = compute_claim_metrics(18500, 12000, 30, [4200, 815.35])
        second = compute_claim_metrics(18500, 12000, 30, [4200, 815.35])
        assert first == second

    def test_zero_initial_value_gives_zero_percentage(self):
        metrics = compute_claim_metrics(0, 12000, 30, [500])

        assert metrics.current_total_value == 500.00
        assert metrics.percentage_increase == 0.0
        assert math.isfinite(metrics.percentage_increase)

    def test_zero_units_gives_zero_unit_price(self):
        assert compute_claim_metrics(18500, 12000, 0, []).unit_price == 0.0

    def test_sums_without_float_drift(self):
        metrics = compute_claim_metrics(1000, 0, 1, [0.1, 0.2])
        assert metrics.total_increase == 0.3

    def test_percentage_rounds_to_four_places(self):
        # 1000 / 30000 = 0.033333...
        assert compute_claim_metrics(30000, 0, 1, [1000]).percentage_increase == 0.0333

    @pytest.mark.parametrize("args", [
        (-1, 12000, 30, []),
        (18500, 12000, float("nan"), []),
        (18500, 12000, 30, [-50]),
        (18500, float("inf"), 30, []),
    ])
    def test_rejects_invalid_inputs(self, args):
        with pytest.raises(InvalidInputError):
            compute_claim_metrics(*args)


class TestApprovedSupplementAmounts:

    def test_only_approved_and_partial_count(self):
        supplements = [
            _supplement(1, 4200, SupplementStatus.APPROVED, approved_amount=4200),
            _supplement(2, 1000, SupplementStatus.PARTIAL, approved_amount=600),
            _supplement(3, 700, SupplementStatus.DENIED),
            _supplement(4, 300, SupplementStatus.DRAFT),
            _supplement(5, 900, SupplementStatus.SUBMITTED),
            _supplement(6, 250, SupplementStatus.PENDING),
        ]

        assert approved_supplement_amounts(supplements) == [4200, 600]

    def test_partial_without_approved_amount_counts_requested(self):
        supplements = [_supplement(1, 1000, SupplementStatus.PARTIAL)]
        assert approved_supplement_amounts(supplements) == [1000]

    def test_partial_approved_at_zero_counts_zero(self):
        supplements = [_supplement(1, 1000, SupplementStatus.PARTIAL, approved_amount=0)]
        assert approved_supplement_amounts(supplements) == [0]


class TestHelpers:

    def test_initial_unit_price(self):
        assert initial_unit_price(12000, 30) == 400.0
        assert initial_unit_price(12000, 0) == 0.0

    def test_supplement_impact(self):
        assert supplement_impact(18500, 4200) == (18500.0, 22700.0)

    def test_latest_unit_counts_uses_most_recent_counted(self):
        supplements = [
            _supplement(1, 100, SupplementStatus.APPROVED, previous_units=20, new_units=22),
            _supplement(2, 100, SupplementStatus.APPROVED, previous_units=22, new_units=22),
            _supplement(3, 100, SupplementStatus.DRAFT, previous_units=22, new_units=40),
        ]

        assert latest_unit_counts(supplements) == (22, 22)

    def test_latest_unit_counts_without_data(self):
        assert latest_unit_counts([_supplement(1, 100, SupplementStatus.APPROVED)]) == (None, None)


class TestRecalculateClaim:

    def test_end_to_end(self, claim, contractor_rates, estimator_rates):
        supplements = [_supplement(1, 4200, SupplementStatus.APPROVED, approved_amount=4200)]

        financials = recalculate_claim(claim, supplements, contractor_rates, estimator_rates)

        assert financials.current_total_value == 22700.00
        assert financials.total_increase == 4200.00
        assert financials.percentage_increase == 0.2270
        assert financials.unit_price == 400.00
        assert financials.commission_type == CommissionType.SUPPLEMENT
        assert financials.contractor_billing_amount == 525.00
        assert financials.estimator_commission == 210.00

    def test_does_not_modify_claim(self, claim, contractor_rates, estimator_rates):
        before = claim.model_copy(deep=True)
        recalculate_claim(
            claim,
            [_supplement(1, 4200, SupplementStatus.APPROVED, approved_amount=4200)],
            contractor_rates,
            estimator_rates,
        )
        assert claim == before

    def test_unit_growth_makes_reinspection(self, claim, contractor_rates, estimator_rates):
        supplements = [
            _supplement(1, 2000, SupplementStatus.APPROVED, approved_amount=2000, previous_units=30, new_units=34),
        ]

        financials = recalculate_claim(claim, supplements, contractor_rates, estimator_rates)

        assert financials.commission_type == CommissionType.REINSPECTION
        assert financials.contractor_billing_amount == 100.00
        assert financials.estimator_commission == 20.00
