"""Core foundation layer: scenario configuration, tables, entities."""

from mausim.core.context import SimulationContext
from mausim.core.entities import Stay, CoefficientRow, CapacityEntry
from mausim.core.errors import MausimError, MissingCoefficientError, MissingCapacityError
from mausim.core.scenario import Scenario, load_scenario, save_scenario
from mausim.core.tables import (
    CoefficientStore,
    CapacityTable,
    read_coefficient_tables,
    read_capacity_table,
)

__all__ = [
    "SimulationContext",
    "Stay",
    "CoefficientRow",
    "CapacityEntry",
    "MausimError",
    "MissingCoefficientError",
    "MissingCapacityError",
    "Scenario",
    "load_scenario",
    "save_scenario",
    "CoefficientStore",
    "CapacityTable",
    "read_coefficient_tables",
    "read_capacity_table",
]
