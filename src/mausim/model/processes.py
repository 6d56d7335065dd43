"""Single replication of the yearlong day-stepped model."""

import logging
from typing import Any, Dict, Optional

from mausim.core.context import SimulationContext
from mausim.core.scenario import Scenario
from mausim.model.admissions import AdmissionGenerator
from mausim.model.discharge import DischargeEvaluator
from mausim.model.stepper import DailyStepper
from mausim.results.collector import RunState


logger = logging.getLogger(__name__)


def total_beds(scenario: Scenario, context: SimulationContext) -> int:
    """Combined capacity of the scenario's units, after adjustment.

    Raises:
        MissingCapacityError: If a unit has no capacity entry.
    """
    return max(0, context.capacity.total_beds(scenario.units) + scenario.bed_adjustment)


def build_stepper(scenario: Scenario, context: SimulationContext) -> DailyStepper:
    """Wire the admission and discharge models into a DailyStepper.

    Args:
        scenario: Scenario configuration.
        context: Tables and RNG streams of this replication.

    Returns:
        DailyStepper ready to process days.
    """
    admissions = AdmissionGenerator(
        context.coefficients,
        scenario.day_zero,
        context.rng_admissions,
        rate_floor=scenario.rate_floor,
    )
    discharge = DischargeEvaluator(
        context.coefficients,
        scenario.day_zero,
        context.rng_discharge,
        model_variant=scenario.discharge_model,
        include_month_effect=scenario.include_discharge_month,
    )
    return DailyStepper(
        admissions,
        discharge,
        scenario.units,
        total_beds(scenario, context),
        context.rng_release,
        release_probability=scenario.release_probability,
    )


def run_simulation(
    scenario: Scenario,
    context: SimulationContext,
    stepper: Optional[DailyStepper] = None,
) -> Dict[str, Any]:
    """Execute a single replication.

    Steps every day from the start of the warm-up through the end of the
    cool-down on a fresh RunState.

    Args:
        scenario: Scenario configuration with horizon settings.
        context: Tables and RNG streams of this replication.
        stepper: Pre-built stepper; built from ``scenario`` if None.

    Returns:
        Dictionary containing simulation results:
        - annual_mean_occupancy: Mean occupancy over days 1..365
        - peak_occupancy, mean_los, median_los, n_los
        - total_discharges, total_model_arrivals, total_arrivals, turned_away
        - total_beds: Capacity of the merged unit
        - state: The RunState with daily series and LOS samples
    """
    if stepper is None:
        stepper = build_stepper(scenario, context)

    state = RunState(duration=scenario.duration, measurement_days=scenario.measurement_days)

    for day in scenario.days:
        stepper.step(day, state)

    results = state.compute_metrics()
    logger.debug(
        "Units %s: annual mean occupancy %.2f, %d turned away",
        scenario.label, results["annual_mean_occupancy"], results["turned_away"],
    )
    results["total_beds"] = stepper.total_beds
    results["state"] = state
    return results
