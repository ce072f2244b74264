"""
Post-commit Hooks

Notification and audit collaborators invoked by the process monitor after a
mutation has been applied. Neither may affect the mutation itself.
"""
import logging
from typing import Dict, List, Optional

from claimflow.core.models import AuditLogEntry, Claim, Supplement
from claimflow.core.states import STATUS_LABELS, ClaimStatus

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Sends claim notifications to the contractor.

    This implementation only logs the message it would send; a mail-backed
    dispatcher overrides `send`.
    """

    def __init__(self):
        self.sent: List[Dict[str, str]] = []

    async def send(self, recipient: str, subject: str, body: str) -> None:
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})
        logger.info(f"Notification to {recipient}: {subject}")

    async def status_changed(
        self,
        claim: Claim,
        old_status: ClaimStatus,
        new_status: ClaimStatus,
        recipient: Optional[str] = None
    ) -> None:
        subject = f"Claim update: {claim.policyholder_name} is now {STATUS_LABELS[new_status]}"
        body = (
            f"The claim for {claim.policyholder_name} moved from "
            f"\"{STATUS_LABELS[old_status]}\" to \"{STATUS_LABELS[new_status]}\"."
        )
        await self.send(recipient or claim.contractor_id, subject, body)

    async def supplement_approved(
        self,
        claim: Claim,
        supplement: Supplement,
        recipient: Optional[str] = None
    ) -> None:
        approved = supplement.approved_amount if supplement.approved_amount is not None else supplement.amount
        subject = f"Supplement {supplement.status.value} for {claim.policyholder_name}"
        body = (
            f"Supplement #{supplement.sequence} ({supplement.description}) was {supplement.status.value}: "
            f"${approved:,.2f} of ${supplement.amount:,.2f} requested. "
            f"Current claim value: ${claim.current_total_value:,.2f}."
        )
        await self.send(recipient or claim.contractor_id, subject, body)


class AuditRecorder:
    """Keeps the audit trail in memory, newest last."""

    def __init__(self):
        self.entries: List[AuditLogEntry] = []

    async def record(self, entry: AuditLogEntry) -> None:
        self.entries.append(entry)
        logger.debug(f"Audit {entry.action} on {entry.entity_type} {entry.entity_id}")

    def entries_for(self, entity_id: str) -> List[AuditLogEntry]:
        return [
            e for e in self.entries
            if e.entity_id == entity_id or e.metadata.get("claim_id") == entity_id
        ]
