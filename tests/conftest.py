"""Shared fixtures for claimflow tests."""

from datetime import datetime

import pytest

from claimflow.core.models import Claim, ClaimCreate, PartyCreate, PartyRateConfig, RateProfile
from claimflow.monitors.process_monitor import ProcessMonitor
from claimflow.state_machine.machine import ClaimStateMachine
from claimflow.store import CONTRACTOR, ESTIMATOR, ClaimStore


@pytest.fixture
def now():
    return datetime(2026, 3, 2, 9, 30, 0)


@pytest.fixture
def claim():
    """A claim fresh from creation: $18,500 initial value, 30 squares."""
    return Claim(
        policyholder_name="Dana Whitfield",
        contractor_id="contractor-1",
        estimator_id="estimator-1",
        total_units=30,
        base_unit_value=12000,
        initial_value=18500,
        current_total_value=18500,
        unit_price=400.0,
    )


@pytest.fixture
def contractor_rates():
    return RateProfile(
        default_rate=0.125,
        residential_rate=0.125,
        commercial_rate=0.10,
        reinspection_rate=0.05,
        estimate_flat_fee=250.0,
    )


@pytest.fixture
def estimator_rates():
    return RateProfile(
        default_rate=0.05,
        reinspection_rate=0.01,
        estimate_flat_fee=75.0,
    )


@pytest.fixture
def monitor():
    return ProcessMonitor(ClaimStateMachine(), ClaimStore())


async def seed_claim(monitor: ProcessMonitor, contractor_rates=None, estimator_rates=None, **overrides) -> Claim:
    """Register a contractor and estimator and open a claim against them."""
    contractor = await monitor.register_party(
        CONTRACTOR,
        PartyCreate(
            name="Rise Roofing",
            email="office@riseroofing.example",
            rates=contractor_rates or PartyRateConfig(billing_percentage=0.125),
        ),
    )
    estimator = await monitor.register_party(
        ESTIMATOR,
        PartyCreate(
            name="Marco Ruiz",
            rates=estimator_rates or PartyRateConfig(commission_percentage=0.05),
        ),
    )
    data = {
        "policyholder_name": "Dana Whitfield",
        "loss_address": "118 Cedar Ln",
        "contractor_id": contractor.id,
        "estimator_id": estimator.id,
        "total_units": 30,
        "base_unit_value": 12000,
        "initial_value": 18500,
    }
    data.update(overrides)
    return await monitor.create_claim(ClaimCreate(**data))


@pytest.fixture
def seed():
    return seed_claim
