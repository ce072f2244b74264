"""
Claim State Definitions

Defines the workflow statuses of a claim and the enumerations used by the
commission engine.
"""
from enum import Enum
from typing import Dict


class ClaimStatus(str, Enum):
    """
    Enum representing the possible workflow statuses of a claim.

    Standard Flow: MISSING_INFO -> CONTRACTOR_REVIEW -> SUPPLEMENT_SENT -> SUPPLEMENT_RECEIVED
        -> ... -> FINAL_INVOICE_SENT -> FINAL_INVOICE_RECEIVED -> MONEY_RELEASED -> COMPLETED
    Any active status may drop into WORK_SUSPENDED, which resumes near the start.
    """
    MISSING_INFO = "missing_info"
    CONTRACTOR_REVIEW = "contractor_review"
    SUPPLEMENT_SENT = "supplement_sent"
    SUPPLEMENT_RECEIVED = "supplement_received"
    COUNTERARGUMENT_SUBMITTED = "counterargument_submitted"
    ESCALATED = "escalated"
    CONTRACTOR_ADVANCE = "contractor_advance"
    WAITING_ON_BUILD = "waiting_on_build"
    LINE_ITEMS_CONFIRMED = "line_items_confirmed"
    REBUTTAL_POSTED = "rebuttal_posted"
    FINAL_INVOICE_SENT = "final_invoice_sent"
    FINAL_INVOICE_RECEIVED = "final_invoice_received"
    MONEY_RELEASED = "money_released"
    WORK_SUSPENDED = "work_suspended"
    COMPLETED = "completed"  # Terminal state


class SupplementStatus(str, Enum):
    """Status of a single supplement request sent to the carrier."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    PARTIAL = "partial"


class JobType(str, Enum):
    SUPPLEMENT = "supplement"
    REINSPECTION = "reinspection"
    ESTIMATE = "estimate"
    FINAL_INVOICE = "final_invoice"


class PropertyType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


class CommissionType(str, Enum):
    """Kind of commission event a claim change represents."""
    REINSPECTION = "reinspection"
    SUPPLEMENT = "supplement"
    ESTIMATE = "estimate"
    FINAL_INVOICE = "final_invoice"


class ComplianceStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    OVERDUE = "overdue"


# Supplements in these statuses count towards the claim's current value
COUNTED_SUPPLEMENT_STATUSES = frozenset({SupplementStatus.APPROVED, SupplementStatus.PARTIAL})

STATUS_LABELS: Dict[ClaimStatus, str] = {
    ClaimStatus.MISSING_INFO: "Missing Info",
    ClaimStatus.CONTRACTOR_REVIEW: "Contractor Review",
    ClaimStatus.SUPPLEMENT_SENT: "Supplement Sent",
    ClaimStatus.SUPPLEMENT_RECEIVED: "Supplement Received",
    ClaimStatus.COUNTERARGUMENT_SUBMITTED: "Counterargument Submitted",
    ClaimStatus.ESCALATED: "Escalated",
    ClaimStatus.CONTRACTOR_ADVANCE: "Contractor Advance",
    ClaimStatus.WAITING_ON_BUILD: "Waiting on Build",
    ClaimStatus.LINE_ITEMS_CONFIRMED: "Line Items Confirmed",
    ClaimStatus.REBUTTAL_POSTED: "Rebuttal Posted",
    ClaimStatus.FINAL_INVOICE_SENT: "Final Invoice Sent",
    ClaimStatus.FINAL_INVOICE_RECEIVED: "Final Invoice Received",
    ClaimStatus.MONEY_RELEASED: "Money Released",
    ClaimStatus.WORK_SUSPENDED: "Work Suspended",
    ClaimStatus.COMPLETED: "Completed",
}
