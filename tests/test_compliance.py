"""Unit tests for 48-hour activity compliance."""

from datetime import timedelta

from claimflow.core.states import ClaimStatus, ComplianceStatus
from claimflow.finance.compliance import claim_compliance, claims_requiring_action, compliance_status


class TestComplianceStatus:

    def test_recent_activity_is_ok(self, now):
        assert compliance_status(now - timedelta(hours=10), now) == ComplianceStatus.OK

    def test_exactly_at_warning_threshold_is_ok(self, now):
        assert compliance_status(now - timedelta(hours=36), now) == ComplianceStatus.OK

    def test_past_warning_threshold(self, now):
        assert compliance_status(now - timedelta(hours=40), now) == ComplianceStatus.WARNING

    def test_past_overdue_threshold(self, now):
        assert compliance_status(now - timedelta(hours=49), now) == ComplianceStatus.OVERDUE

    def test_custom_thresholds(self, now):
        status = compliance_status(now - timedelta(hours=5), now, warning_hours=2, overdue_hours=4)
        assert status == ComplianceStatus.OVERDUE


class TestClaimsRequiringAction:

    def _claim(self, claim, hours_idle, now, status=ClaimStatus.CONTRACTOR_REVIEW):
        return claim.model_copy(update={
            "last_activity_at": now - timedelta(hours=hours_idle),
            "status": status,
        })

    def test_suspended_and_completed_claims_are_not_tracked(self, claim, now):
        suspended = self._claim(claim, 100, now, ClaimStatus.WORK_SUSPENDED)
        completed = self._claim(claim, 100, now, ClaimStatus.COMPLETED)

        assert claim_compliance(suspended, now) == ComplianceStatus.OK
        assert claims_requiring_action([suspended, completed], now) == []

    def test_longest_idle_first(self, claim, now):
        fresh = self._claim(claim, 2, now)
        warning = self._claim(claim, 40, now)
        overdue = self._claim(claim, 72, now)

        flagged = claims_requiring_action([fresh, warning, overdue], now)

        assert flagged == [overdue, warning]

    def test_limit(self, claim, now):
        claims = [self._claim(claim, hours, now) for hours in (40, 50, 60)]
        assert len(claims_requiring_action(claims, now, limit=2)) == 2
