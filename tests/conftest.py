"""Pytest fixtures for mausim tests."""

from datetime import date
from typing import Dict, Optional

import numpy as np
import pytest

from mausim.core.context import SimulationContext
from mausim.core.entities import INTERCEPT, MONTH_TERMS, WEEKDAY_TERMS, CoefficientRow
from mausim.core.tables import CapacityTable, CoefficientStore


DAY_ZERO = date(2016, 12, 31)


def make_store(
    rates: Dict[int, float],
    discharge_log_odds: Dict[int, float],
    variant: str = "log_wkdy",
    weekday_effect: float = 0.0,
    month_effect: float = 0.0,
    discharge_weekday_effect: float = 0.0,
    discharge_month_effect: Optional[float] = None,
) -> CoefficientStore:
    """Coefficient store with the same effect for every weekday and month.

    Args:
        rates: Admission intercept per unit.
        discharge_log_odds: Discharge intercept per unit.
        variant: Discharge model variant name.
        weekday_effect: Admission coefficient of every non-reference weekday.
        month_effect: Admission coefficient of every non-reference month.
        discharge_weekday_effect: Discharge coefficient of every weekday term.
        discharge_month_effect: Discharge month coefficient; omitted if None.
    """
    admission = []
    for unit, rate in rates.items():
        admission.append(CoefficientRow(unit, INTERCEPT, rate))
        admission += [CoefficientRow(unit, t, weekday_effect) for t in WEEKDAY_TERMS]
        admission += [CoefficientRow(unit, t, month_effect) for t in MONTH_TERMS]

    discharge = []
    for unit, log_odds in discharge_log_odds.items():
        discharge.append(CoefficientRow(unit, INTERCEPT, log_odds, variant))
        discharge += [
            CoefficientRow(unit, t, discharge_weekday_effect, variant) for t in WEEKDAY_TERMS
        ]
        if discharge_month_effect is not None:
            discharge += [
                CoefficientRow(unit, t, discharge_month_effect, variant) for t in MONTH_TERMS
            ]

    return CoefficientStore(admission, discharge)


@pytest.fixture
def default_seed() -> int:
    """Default random seed for reproducible tests."""
    return 42


@pytest.fixture
def day_zero() -> date:
    """Calendar date of simulation day 0 (day 1 is Sunday 1 January 2017)."""
    return DAY_ZERO


@pytest.fixture
def mau_store() -> CoefficientStore:
    """Realistic single-MAU coefficients: ~20 admissions/day, ~25% daily discharge."""
    return make_store(
        rates={3: 20.0},
        discharge_log_odds={3: -1.1},
        weekday_effect=1.5,
        month_effect=-0.5,
        discharge_weekday_effect=0.2,
    )


@pytest.fixture
def capacity() -> CapacityTable:
    """Bed counts of the four MAUs."""
    return CapacityTable.from_dict({3: 72, 1: 14, 2: 6, 4: 15})


@pytest.fixture
def rng(default_seed) -> np.random.Generator:
    return np.random.default_rng(default_seed)


@pytest.fixture
def make_context(default_seed):
    """Factory for a SimulationContext over given tables."""

    def _make(store: CoefficientStore, capacity: CapacityTable, replication: int = 0):
        return SimulationContext.create(store, capacity, default_seed, replication)

    return _make


@pytest.fixture
def store_factory():
    """The make_store helper, for tests that need their own coefficients."""
    return make_store
