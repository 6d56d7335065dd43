"""Poisson admission generator driven by the admission regression."""

import logging
from datetime import date
from typing import Iterable, List

import numpy as np

from mausim.core.entities import INTERCEPT, Stay, calendar_day, month_term, weekday_term
from mausim.core.tables import CoefficientStore


logger = logging.getLogger(__name__)


class AdmissionGenerator:
    """Generate each day's new stays from the fitted admission model.

    The expected number of admissions for a unit on a day is the linear
    predictor ``intercept + weekday effect + month effect``, used directly
    as the Poisson rate. Negative fitted values are clamped to
    ``rate_floor`` so they mean "almost no arrivals".

    The batch returned by :meth:`generate` is shuffled across units. When
    capacity binds, the stepper keeps the head of the collection, so the
    shuffle is what keeps turn-aways from falling on whichever unit
    happens to be generated last.

    Attributes:
        coefficients: Admission regression coefficients.
        day_zero: Calendar date of simulation day 0.
        rng: Generator for Poisson counts and the batch permutation.
        rate_floor: Smallest rate passed to the Poisson draw.
    """

    def __init__(
        self,
        coefficients: CoefficientStore,
        day_zero: date,
        rng: np.random.Generator,
        rate_floor: float = 0.0001,
    ) -> None:
        self.coefficients = coefficients
        self.day_zero = day_zero
        self.rng = rng
        self.rate_floor = rate_floor

    def expected_admissions(self, unit: int, sim_date: int) -> float:
        """Poisson rate for one unit on one day, after clamping."""
        cal = calendar_day(sim_date, self.day_zero)
        expected = (
            self.coefficients.admission_coefficient(unit, INTERCEPT)
            + self.coefficients.admission_coefficient(unit, weekday_term(cal.weekday))
            + self.coefficients.admission_coefficient(unit, month_term(cal.month))
        )
        if expected < self.rate_floor:
            logger.debug(
                "Unit %s day %s: expected admissions %.4f clamped to %s",
                unit, sim_date, expected, self.rate_floor,
            )
            return self.rate_floor
        return expected

    def generate(self, sim_date: int, units: Iterable[int]) -> List[Stay]:
        """Randomly ordered batch of stays admitted on ``sim_date``.

        Args:
            sim_date: Simulation day (negative during warm-up).
            units: Units simulated jointly.

        Returns:
            New stays, possibly empty, in random order.
        """
        batch: List[Stay] = []
        for unit in units:
            arrivals = int(self.rng.poisson(self.expected_admissions(unit, sim_date)))
            batch.extend(Stay(unit, sim_date) for _ in range(arrivals))

        if len(batch) > 1:
            order = self.rng.permutation(len(batch))
            batch = [batch[i] for i in order]
        return batch
