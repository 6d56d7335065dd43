"""
mausim - MAU occupancy simulation.

A day-stepped Monte-Carlo model of inpatient unit occupancy driven by
regression-fitted admission and discharge models under finite bed
capacity.
"""

__version__ = "0.1.0"

from mausim.core.scenario import Scenario
from mausim.model.processes import run_simulation
from mausim.experiment.runner import multiple_replications, run_experiment

__all__ = ["Scenario", "run_simulation", "multiple_replications", "run_experiment", "__version__"]
