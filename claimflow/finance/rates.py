"""
Rate Profiles

Builds a normalized RateProfile from a contractor's or estimator's stored
configuration and selects the rate and flat fee that apply to a commission
event.
"""
from typing import Any, Mapping, Optional, Union

from claimflow.core.models import PartyRateConfig, RateProfile
from claimflow.core.states import CommissionType, PropertyType
from claimflow.finance.rounding import to_float_or_none


RawRateConfig = Union[PartyRateConfig, Mapping[str, Any]]


def build_rate_profile(raw: RawRateConfig) -> RateProfile:
    """
    Normalize a party's raw rate configuration.

    The default rate comes from billing_percentage (contractors), then
    commission_percentage (estimators), then 0. Specialized rates and the
    flat fee stay None when absent, since 0 is a legitimate configured value.

    Args:
        raw: PartyRateConfig or a plain mapping with the same keys

    Returns:
        RateProfile with all configured values as floats

    Raises:
        InvalidInputError: If any configured value is unparsable, negative or non-finite
    """
    if isinstance(raw, PartyRateConfig):
        raw = raw.model_dump()

    default_rate = first_configured(
        to_float_or_none(raw.get("billing_percentage"), "billing_percentage"),
        to_float_or_none(raw.get("commission_percentage"), "commission_percentage"),
    )

    return RateProfile(
        default_rate=default_rate if default_rate is not None else 0.0,
        residential_rate=to_float_or_none(raw.get("residential_rate"), "residential_rate"),
        commercial_rate=to_float_or_none(raw.get("commercial_rate"), "commercial_rate"),
        reinspection_rate=to_float_or_none(raw.get("reinspection_rate"), "reinspection_rate"),
        estimate_flat_fee=to_float_or_none(raw.get("estimate_flat_fee"), "estimate_flat_fee"),
    )


def first_configured(*candidates: Optional[float]) -> Optional[float]:
    """Return the first candidate that is not None, in precedence order."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def select_rate(
    profile: RateProfile,
    commission_type: CommissionType,
    property_type: PropertyType
) -> float:
    """
    Pick the percentage rate for a commission event.

    Precedence:
        reinspection            -> reinspection rate, default rate
        supplement/final invoice -> commercial or residential rate, default rate
        estimate                -> 0 (flat fee only)
    """
    if commission_type == CommissionType.ESTIMATE:
        return 0.0

    if commission_type == CommissionType.REINSPECTION:
        specific = profile.reinspection_rate
    elif property_type == PropertyType.COMMERCIAL:
        specific = profile.commercial_rate
    else:
        specific = profile.residential_rate

    return first_configured(specific, profile.default_rate)


def select_flat_fee(profile: RateProfile, commission_type: CommissionType) -> float:
    """Estimates and final invoices draw on the configured flat fee; nothing else does."""
    if commission_type in (CommissionType.ESTIMATE, CommissionType.FINAL_INVOICE):
        return first_configured(profile.estimate_flat_fee, 0.0)
    return 0.0
