"""
Commission Type Classifier

Decides which kind of commission event a claim change is.
"""
from typing import Optional, Union

from claimflow.core.exceptions import InvalidInputError
from claimflow.core.states import CommissionType, JobType


def coerce_job_type(job_type: Union[JobType, str]) -> JobType:
    try:
        return JobType(job_type)
    except ValueError:
        valid = ", ".join(j.value for j in JobType)
        raise InvalidInputError(f"Unknown job type {job_type!r}. Expected one of: {valid}")


def classify_commission_type(
    job_type: Union[JobType, str],
    previous_units: Optional[float],
    new_units: Optional[float]
) -> CommissionType:
    """
    Classify a commission event.

    An explicitly declared estimate or final invoice always wins. Otherwise
    growth in the measured unit count (roof squares) between inspections
    marks a reinspection, and anything else is a supplement.

    Args:
        job_type: The claim's declared job type
        previous_units: Units measured before the change, if known
        new_units: Units measured after the change, if known

    Returns:
        The CommissionType for the event
    """
    job_type = coerce_job_type(job_type)

    if job_type == JobType.ESTIMATE:
        return CommissionType.ESTIMATE

    if job_type == JobType.FINAL_INVOICE:
        return CommissionType.FINAL_INVOICE

    if previous_units is not None and new_units is not None and new_units > previous_units:
        return CommissionType.REINSPECTION

    return CommissionType.SUPPLEMENT
