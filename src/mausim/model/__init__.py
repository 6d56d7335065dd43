"""Model layer: admissions, discharges, daily stepping, single runs."""

from mausim.model.admissions import AdmissionGenerator
from mausim.model.discharge import DischargeEvaluator
from mausim.model.stepper import DailyStepper, DayOutcome
from mausim.model.processes import run_simulation, build_stepper

__all__ = [
    "AdmissionGenerator",
    "DischargeEvaluator",
    "DailyStepper",
    "DayOutcome",
    "run_simulation",
    "build_stepper",
]
