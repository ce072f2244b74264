"""
Activity Compliance

Claims are expected to see activity at least every 48 hours. This module
grades a claim's last activity against the warning and overdue thresholds.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from claimflow.config import settings
from claimflow.core.models import Claim
from claimflow.core.states import ClaimStatus, ComplianceStatus

# Claims in these statuses are not waiting on anyone
UNTRACKED_STATUSES = frozenset({ClaimStatus.COMPLETED, ClaimStatus.WORK_SUSPENDED})


def compliance_status(
    last_activity_at: datetime,
    now: datetime,
    warning_hours: Optional[float] = None,
    overdue_hours: Optional[float] = None
) -> ComplianceStatus:
    """Grade the time since last activity."""
    warning_hours = settings.compliance_warning_hours if warning_hours is None else warning_hours
    overdue_hours = settings.compliance_overdue_hours if overdue_hours is None else overdue_hours

    idle = now - last_activity_at
    if idle > timedelta(hours=overdue_hours):
        return ComplianceStatus.OVERDUE
    if idle > timedelta(hours=warning_hours):
        return ComplianceStatus.WARNING
    return ComplianceStatus.OK


def claim_compliance(claim: Claim, now: datetime) -> ComplianceStatus:
    if claim.status in UNTRACKED_STATUSES:
        return ComplianceStatus.OK
    return compliance_status(claim.last_activity_at, now)


def claims_requiring_action(
    claims: Iterable[Claim],
    now: datetime,
    limit: Optional[int] = None
) -> List[Claim]:
    """Tracked claims past the warning threshold, longest idle first."""
    flagged = [c for c in claims if claim_compliance(c, now) != ComplianceStatus.OK]
    flagged.sort(key=lambda c: c.last_activity_at)
    if limit is not None:
        flagged = flagged[:limit]
    return flagged
