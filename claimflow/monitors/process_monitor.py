"""
Process Monitor

Applies status changes and supplement updates to claims, reruns the
financial recalculation, and triggers post-commit hooks.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

from claimflow.config import settings
from claimflow.core.exceptions import InvalidInputError
from claimflow.core.models import (
    AuditLogEntry,
    Claim,
    ClaimCreate,
    ClaimFinancials,
    Party,
    PartyCreate,
    Supplement,
    SupplementCreate,
    SupplementUpdate,
)
from claimflow.core.states import COUNTED_SUPPLEMENT_STATUSES, ClaimStatus, SupplementStatus
from claimflow.finance.metrics import initial_unit_price, recalculate_claim, supplement_impact
from claimflow.finance.rates import build_rate_profile
from claimflow.finance.rounding import require_amount, same_cents
from claimflow.monitors.hooks import AuditRecorder, NotificationDispatcher
from claimflow.state_machine.machine import ClaimStateMachine
from claimflow.store import CONTRACTOR, ESTIMATOR, ClaimStore

logger = logging.getLogger(__name__)

StatusHandler = Callable[[Claim, ClaimStatus, ClaimStatus], Awaitable[None]]

# Supplement statuses whose entry triggers a recalculation
RECALCULATING_STATUSES = COUNTED_SUPPLEMENT_STATUSES | {SupplementStatus.DENIED}


class ProcessMonitor:
    """
    Coordinates every mutation of a claim.

    Each mutation is validated and computed in full before anything is
    assigned, so a rejected request leaves the stored claim as it was.
    Mutations of one claim are serialized with a per-claim lock. Handlers
    registered for a status run after the claim has entered it; their
    failures are logged and never undo the change.
    """

    def __init__(
        self,
        state_machine: ClaimStateMachine,
        store: ClaimStore,
        notifier: Optional[NotificationDispatcher] = None,
        auditor: Optional[AuditRecorder] = None
    ):
        """
        Initialize the process monitor.

        Args:
            state_machine: The state machine to use for transitions
            store: Where claims, supplements and parties live
            notifier: Notification dispatcher for status changes and approvals
            auditor: Audit recorder for accepted mutations
        """
        self.state_machine = state_machine
        self.store = store
        self.notifier = notifier or NotificationDispatcher()
        self.auditor = auditor or AuditRecorder()
        self._event_handlers: Dict[ClaimStatus, List[StatusHandler]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

        # Register default handlers
        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        """Every status change notifies the contractor."""
        for status in ClaimStatus:
            self.register_handler(status, self._notify_status_change)

    def register_handler(self, status: ClaimStatus, handler: StatusHandler) -> None:
        """
        Register an async handler to be called when a claim enters a status.

        Args:
            status: The status that triggers the handler
            handler: Async function called with (claim, old_status, new_status)
        """
        self._event_handlers.setdefault(status, []).append(handler)
        logger.debug(f"Registered handler for status {status.value}")

    async def _notify_status_change(self, claim: Claim, old_status: ClaimStatus, new_status: ClaimStatus) -> None:
        contractor = self.store.get_party(CONTRACTOR, claim.contractor_id)
        await self.notifier.status_changed(claim, old_status, new_status, recipient=contractor.email)

    async def _fire(self, description: str, hook: Awaitable[None]) -> None:
        try:
            await hook
        except Exception:
            logger.exception(f"Post-commit hook failed: {description}")

    async def _audit(self, **fields) -> None:
        await self._fire(f"audit {fields.get('action')}", self.auditor.record(AuditLogEntry(**fields)))

    def _lock_for(self, claim_id: str) -> asyncio.Lock:
        """The lock serializing mutations of a claim. Only call it for a claim that exists."""
        return self._locks.setdefault(claim_id, asyncio.Lock())

    # ------------------------------------------------------------------
    # Parties
    # ------------------------------------------------------------------

    async def register_party(self, role: str, data: PartyCreate) -> Party:
        """Register a contractor or estimator, applying the default rate when none is configured."""
        rates = data.rates
        if all(v is None for v in rates.model_dump().values()):
            if role == CONTRACTOR:
                rates = rates.model_copy(update={
                    "billing_percentage": settings.default_contractor_billing_percentage
                })
            else:
                rates = rates.model_copy(update={
                    "commission_percentage": settings.default_estimator_commission_percentage
                })

        # Reject configurations the rate builder cannot read before storing them
        build_rate_profile(rates)

        party = Party(role=role, name=data.name, email=data.email, rates=rates)
        self.store.parties[role][party.id] = party
        logger.info(f"Registered {role} {party.id} ({party.name})")

        await self._audit(entity_type=role, entity_id=party.id, action="create", new_value=party.name)
        return party

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    async def create_claim(self, data: ClaimCreate, now: Optional[datetime] = None) -> Claim:
        """
        Create a new claim in missing_info with its initial financial facts.
        """
        self.store.get_party(CONTRACTOR, data.contractor_id)
        self.store.get_party(ESTIMATOR, data.estimator_id)

        now = now or datetime.now()
        claim = Claim(
            **data.model_dump(),
            status=self.state_machine.INITIAL_STATUS,
            current_total_value=require_amount(data.initial_value, "initial_value"),
            unit_price=initial_unit_price(data.base_unit_value, data.total_units),
            last_activity_at=now,
            created_at=now,
        )
        self.store.claims[claim.id] = claim

        logger.info(f"Created new claim {claim.id} for {claim.policyholder_name}")

        await self._audit(
            entity_type="claim",
            entity_id=claim.id,
            action="create",
            new_value=f"Claim created for {claim.policyholder_name}",
            metadata={"initial_value": claim.initial_value},
        )
        return claim

    async def change_status(
        self,
        claim_id: str,
        target_status: Union[ClaimStatus, str],
        now: Optional[datetime] = None
    ) -> Tuple[Claim, ClaimStatus]:
        """
        Move a claim to a new workflow status and trigger handlers.

        Returns:
            The claim and the status it left

        Raises:
            NotFoundError: If the claim does not exist
            IllegalTransitionError: If the workflow does not allow the change
        """
        self.store.get_claim(claim_id)

        async with self._lock_for(claim_id):
            claim = self.store.get_claim(claim_id)
            old_status = claim.status

            claim = self.state_machine.transition(claim, target_status, now=now)
            new_status = claim.status

        await self._audit(
            entity_type="claim",
            entity_id=claim.id,
            action="status_change",
            field_name="status",
            old_value=old_status.value,
            new_value=new_status.value,
        )

        for handler in self._event_handlers.get(new_status, []):
            await self._fire(
                f"status handler for claim {claim.id} entering {new_status.value}",
                handler(claim, old_status, new_status),
            )

        return claim, old_status

    def _recalculate(self, claim: Claim, supplements: List[Supplement]) -> ClaimFinancials:
        contractor = self.store.get_party(CONTRACTOR, claim.contractor_id)
        estimator = self.store.get_party(ESTIMATOR, claim.estimator_id)
        return recalculate_claim(
            claim,
            supplements,
            build_rate_profile(contractor.rates),
            build_rate_profile(estimator.rates),
        )

    async def recalculate(self, claim_id: str, now: Optional[datetime] = None) -> Claim:
        """Rerun the full recalculation for a claim from its stored supplements."""
        self.store.get_claim(claim_id)

        async with self._lock_for(claim_id):
            claim = self.store.get_claim(claim_id)
            old_total = claim.current_total_value
            financials = self._recalculate(claim, self.store.supplements_for(claim_id))
            claim.apply_financials(financials, now or datetime.now())

        await self._audit_recalculation(claim, old_total)
        return claim

    async def _audit_recalculation(self, claim: Claim, old_total: float) -> None:
        await self._audit(
            entity_type="claim",
            entity_id=claim.id,
            action="recalculate",
            field_name="current_total_value",
            old_value=f"{old_total:.2f}",
            new_value=f"{claim.current_total_value:.2f}",
            metadata={
                "total_increase": claim.total_increase,
                "contractor_billing_amount": claim.contractor_billing_amount,
                "estimator_commission": claim.estimator_commission,
            },
        )

    # ------------------------------------------------------------------
    # Supplements
    # ------------------------------------------------------------------

    async def add_supplement(
        self,
        claim_id: str,
        data: SupplementCreate,
        now: Optional[datetime] = None
    ) -> Supplement:
        """Attach a new draft supplement to a claim."""
        self.store.get_claim(claim_id)

        async with self._lock_for(claim_id):
            claim = self.store.get_claim(claim_id)
            now = now or datetime.now()

            previous_value, new_value = supplement_impact(claim.current_total_value, data.amount)
            supplement = Supplement(
                claim_id=claim_id,
                sequence=self.store.next_sequence(claim_id),
                amount=data.amount,
                description=data.description,
                previous_units=data.previous_units,
                new_units=data.new_units,
                previous_value=previous_value,
                new_value=new_value,
                created_at=now,
            )
            self.store.supplements[supplement.id] = supplement
            claim.last_activity_at = now

        logger.info(f"Supplement #{supplement.sequence} added to claim {claim_id} (${data.amount:,.2f})")

        await self._audit(
            entity_type="supplement",
            entity_id=supplement.id,
            action="create",
            new_value=f"{supplement.amount:.2f}",
            metadata={"claim_id": claim_id, "description": supplement.description},
        )
        return supplement

    async def update_supplement(
        self,
        supplement_id: str,
        data: SupplementUpdate,
        now: Optional[datetime] = None
    ) -> Supplement:
        """Edit a supplement's amount or description, recalculating if it currently counts."""
        existing = self.store.get_supplement(supplement_id)

        async with self._lock_for(existing.claim_id):
            existing = self.store.get_supplement(supplement_id)
            claim = self.store.get_claim(existing.claim_id)
            now = now or datetime.now()

            changes = data.model_dump(exclude_none=True)
            if "amount" in changes:
                _, changes["new_value"] = supplement_impact(existing.previous_value, changes["amount"])
                if (
                    existing.status == SupplementStatus.APPROVED
                    or (existing.status == SupplementStatus.PARTIAL and existing.approved_amount is None)
                ):
                    changes["approved_amount"] = changes["amount"]
                elif existing.status == SupplementStatus.PARTIAL and same_cents(existing.approved_amount, changes["amount"]):
                    # The partial now covers the full request
                    changes["status"] = SupplementStatus.APPROVED
                    changes["approved_amount"] = changes["amount"]
                elif existing.status == SupplementStatus.PARTIAL and existing.approved_amount > changes["amount"]:
                    raise InvalidInputError(
                        f"Amount {changes['amount']:.2f} is below the approved amount "
                        f"{existing.approved_amount:.2f} of a partially approved supplement"
                    )
            updated = existing.model_copy(update=changes)

            financials = None
            if existing.status in COUNTED_SUPPLEMENT_STATUSES and "amount" in changes:
                financials = self._recalculate(claim, self._with(claim.id, updated))

            old_total = claim.current_total_value
            self.store.supplements[supplement_id] = updated
            if financials is not None:
                claim.apply_financials(financials, now)
            else:
                claim.last_activity_at = now

        await self._audit(
            entity_type="supplement",
            entity_id=supplement_id,
            action="update",
            field_name="amount" if "amount" in changes else None,
            old_value=f"{existing.amount:.2f}",
            new_value=f"{updated.amount:.2f}",
            metadata={"claim_id": claim.id},
        )
        if financials is not None:
            await self._audit_recalculation(claim, old_total)
        return updated

    async def update_supplement_status(
        self,
        supplement_id: str,
        status: Union[SupplementStatus, str],
        approved_amount: Optional[float] = None,
        now: Optional[datetime] = None
    ) -> Supplement:
        """
        Move a supplement to a new status (submit, approve, partially approve, deny).

        The claim is recalculated when the supplement enters approved,
        partial or denied, or leaves approved or partial.

        Raises:
            InvalidInputError: For unknown statuses or an invalid partial amount
        """
        try:
            status = SupplementStatus(status)
        except ValueError:
            raise InvalidInputError(f"Unknown supplement status {status!r}")

        existing = self.store.get_supplement(supplement_id)

        async with self._lock_for(existing.claim_id):
            existing = self.store.get_supplement(supplement_id)
            claim = self.store.get_claim(existing.claim_id)
            now = now or datetime.now()
            old_status = existing.status

            changes = self._status_changes(existing, status, approved_amount, now)
            updated = existing.model_copy(update=changes)

            financials = None
            if updated.status in RECALCULATING_STATUSES or old_status in COUNTED_SUPPLEMENT_STATUSES:
                financials = self._recalculate(claim, self._with(claim.id, updated))

            old_total = claim.current_total_value
            self.store.supplements[supplement_id] = updated
            if financials is not None:
                claim.apply_financials(financials, now)
            else:
                claim.last_activity_at = now

        logger.info(
            f"Supplement #{updated.sequence} on claim {claim.id} "
            f"changed from {old_status.value} to {updated.status.value}"
        )

        await self._audit(
            entity_type="supplement",
            entity_id=supplement_id,
            action="status_change",
            field_name="status",
            old_value=old_status.value,
            new_value=updated.status.value,
            metadata={"claim_id": claim.id, "approved_amount": updated.approved_amount},
        )
        if financials is not None:
            await self._audit_recalculation(claim, old_total)

        if updated.status in COUNTED_SUPPLEMENT_STATUSES:
            contractor = self.store.get_party(CONTRACTOR, claim.contractor_id)
            await self._fire(
                f"approval notification for supplement {supplement_id}",
                self.notifier.supplement_approved(claim, updated, recipient=contractor.email),
            )

        return updated

    def _status_changes(
        self,
        supplement: Supplement,
        status: SupplementStatus,
        approved_amount: Optional[float],
        now: datetime
    ) -> dict:
        changes: dict = {"status": status}

        if status == SupplementStatus.SUBMITTED:
            changes["submitted_at"] = now

        if status == SupplementStatus.APPROVED:
            changes["approved_amount"] = supplement.amount
            changes["approved_at"] = now

        elif status == SupplementStatus.PARTIAL:
            if approved_amount is None:
                raise InvalidInputError("A partial approval requires an approved amount")
            approved_amount = require_amount(approved_amount, "approved_amount")
            if same_cents(approved_amount, supplement.amount):
                # Approving the full request at cent precision is a full approval
                changes["status"] = SupplementStatus.APPROVED
                approved_amount = supplement.amount
            elif approved_amount > supplement.amount:
                raise InvalidInputError(
                    f"Approved amount {approved_amount:.2f} exceeds the requested {supplement.amount:.2f}"
                )
            changes["approved_amount"] = approved_amount
            changes["approved_at"] = now

        else:
            # Leaving an approval clears it
            changes["approved_amount"] = None
            changes["approved_at"] = None

        return changes

    def _with(self, claim_id: str, replacement: Supplement) -> List[Supplement]:
        """The claim's supplements with one of them replaced by its pending version."""
        return [
            replacement if s.id == replacement.id else s
            for s in self.store.supplements_for(claim_id)
        ]

    async def delete_supplement(self, supplement_id: str) -> None:
        """
        Delete a supplement. Only drafts may be deleted.

        Raises:
            InvalidInputError: If the supplement is not a draft
        """
        existing = self.store.get_supplement(supplement_id)

        async with self._lock_for(existing.claim_id):
            existing = self.store.get_supplement(supplement_id)
            if existing.status != SupplementStatus.DRAFT:
                raise InvalidInputError(
                    f"Only draft supplements can be deleted; supplement {supplement_id} is {existing.status.value}"
                )
            del self.store.supplements[supplement_id]

        logger.info(f"Deleted draft supplement {supplement_id} from claim {existing.claim_id}")

        await self._audit(
            entity_type="supplement",
            entity_id=supplement_id,
            action="delete",
            old_value=existing.description,
            metadata={"claim_id": existing.claim_id},
        )
