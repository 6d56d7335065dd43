"""
Discharge evaluator for mausim.

Decides day by day whether each stay ends, using the fitted logistic
discharge regression. The decision depends only on the unit and the
calendar, not on how long the patient has already been in.
"""

from datetime import date
from typing import Dict, Tuple

import numpy as np
from scipy.special import expit

from mausim.core.entities import INTERCEPT, Stay, calendar_day, month_term, weekday_term
from mausim.core.tables import CoefficientStore


class DischargeEvaluator:
    """
    Stochastic daily discharge decision.

    The linear predictor ``y = intercept + weekday effect`` is mapped to a
    probability with ``p = exp(y) / (1 + exp(y))``; a stay is discharged
    when a uniform draw on [0, 1) is strictly below ``p``.

    The month term exists in the fitted model family but is left out of
    the selected variant. ``include_month_effect`` adds it back; it is a
    switch on the same predictor, not a second model.
    """

    def __init__(
        self,
        coefficients: CoefficientStore,
        day_zero: date,
        rng: np.random.Generator,
        model_variant: str = "log_wkdy",
        include_month_effect: bool = False,
    ):
        """
        Initialize the evaluator.

        Args:
            coefficients: Discharge regression coefficients.
            day_zero: Calendar date of simulation day 0.
            rng: Generator for the uniform draws.
            model_variant: Discharge model fixed for the whole run.
            include_month_effect: Add the month term to the predictor.
        """
        self.coefficients = coefficients
        self.day_zero = day_zero
        self.rng = rng
        self.model_variant = model_variant
        self.include_month_effect = include_month_effect

        # (unit, date) -> probability; one entry per unit per simulated day
        self._p_cache: Dict[Tuple[int, int], float] = {}

    def linear_predictor(self, unit: int, sim_date: int) -> float:
        """Log-odds of discharge for a unit on a day."""
        cal = calendar_day(sim_date, self.day_zero)
        y = (
            self.coefficients.discharge_coefficient(unit, self.model_variant, INTERCEPT)
            + self.coefficients.discharge_coefficient(
                unit, self.model_variant, weekday_term(cal.weekday)
            )
        )
        if self.include_month_effect:
            y += self.coefficients.discharge_coefficient(
                unit, self.model_variant, month_term(cal.month)
            )
        return y

    def discharge_probability(self, unit: int, sim_date: int) -> float:
        """Probability that a stay in ``unit`` ends on ``sim_date``."""
        key = (unit, sim_date)
        if key not in self._p_cache:
            # expit is exp(y) / (1 + exp(y)) without overflow for large y
            self._p_cache[key] = float(expit(self.linear_predictor(unit, sim_date)))
        return self._p_cache[key]

    def is_discharged(self, sim_date: int, stay: Stay) -> bool:
        """
        Single discharge decision for one stay.

        Args:
            sim_date: Current simulation day.
            stay: Active stay.

        Returns:
            True if the stay ends today.
        """
        return bool(self.rng.random() < self.discharge_probability(stay.unit_id, sim_date))

