"""Scenario configuration dataclass."""

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Tuple, Union

import yaml


logger = logging.getLogger(__name__)


@dataclass
class Scenario:
    """Configuration for a yearlong MAU occupancy experiment.

    Holds the simulated unit set, calendar anchor, discharge model
    selection, horizon settings and random seed. Coefficient and capacity
    tables are passed separately since they are shared by many scenarios.

    Attributes:
        name: Experiment label used in result tables (e.g. "baseline").
        units: Unit identifiers simulated jointly as one merged unit.
        discharge_model: Discharge regression variant to use.
        include_discharge_month: Add the month term to the discharge model.
        day_zero: Calendar date of simulation day 0 (day before the year).
        runs: Number of Monte-Carlo replications.
        warm_up_days: Days simulated before day 1 to fill the beds.
        duration: Last simulated day (365 plus the cool-down).
        measurement_days: Days averaged into annual mean occupancy.
        random_seed: Master seed for reproducibility.
        release_probability: Chance a bed vacated this morning can take a
            new admission the same day.
        rate_floor: Smallest Poisson rate used for admissions.
        bed_adjustment: Beds added to (or removed from) the summed
            capacity of a merged unit.
    """

    name: str = "baseline"
    units: Tuple[int, ...] = (3,)
    discharge_model: str = "log_wkdy"
    include_discharge_month: bool = False

    # Calendar
    day_zero: date = field(default_factory=lambda: date(2016, 12, 31))

    # Horizon settings (days)
    runs: int = 100
    warm_up_days: int = 14
    duration: int = 372
    measurement_days: int = 365

    # Reproducibility
    random_seed: int = 123

    # Capacity heuristics
    release_probability: float = 0.5
    rate_floor: float = 0.0001
    bed_adjustment: int = 0

    def __post_init__(self) -> None:
        """Normalise field types and validate ranges."""
        if isinstance(self.day_zero, str):
            self.day_zero = date.fromisoformat(self.day_zero)
        if isinstance(self.units, int):
            self.units = (self.units,)
        self.units = tuple(int(u) for u in self.units)

        if not self.units:
            raise ValueError("units must contain at least one unit")
        if len(set(self.units)) != len(self.units):
            raise ValueError(f"units must be unique, got {self.units}")
        if self.runs < 1:
            raise ValueError(f"runs must be at least 1, got {self.runs}")
        if self.warm_up_days < 0:
            raise ValueError(f"warm_up_days must be non-negative, got {self.warm_up_days}")
        if self.measurement_days < 1:
            raise ValueError("measurement_days must be at least 1")
        if self.duration < self.measurement_days:
            raise ValueError(
                f"duration ({self.duration}) must cover measurement_days "
                f"({self.measurement_days})"
            )
        if not 0.0 <= self.release_probability <= 1.0:
            raise ValueError(
                f"release_probability must be in [0, 1], got {self.release_probability}"
            )
        if self.rate_floor <= 0:
            raise ValueError(f"rate_floor must be positive, got {self.rate_floor}")

        if self.duration == self.measurement_days:
            logger.warning(
                "Scenario %s has no cool-down; stays admitted late in the "
                "year will not be discharged before the run ends", self.name
            )

    @property
    def first_day(self) -> int:
        """First simulated day (negative when there is a warm-up)."""
        return 1 - self.warm_up_days

    @property
    def days(self) -> range:
        """All simulated days, warm-up through cool-down."""
        return range(self.first_day, self.duration + 1)

    @property
    def label(self) -> str:
        """Unit set as shown in result tables, e.g. '4, 1'."""
        return ", ".join(str(u) for u in self.units)

    def clone_with_seed(self, new_seed: int) -> "Scenario":
        """Create a copy of this scenario with a different seed.

        Args:
            new_seed: The new random seed to use.

        Returns:
            A new Scenario instance with updated seed.
        """
        return replace(self, random_seed=new_seed)

    def to_dict(self) -> dict:
        """Plain-data form suitable for YAML/JSON."""
        data = asdict(self)
        data["units"] = list(self.units)
        data["day_zero"] = self.day_zero.isoformat()
        return data


def load_scenario(config_path: Path) -> Scenario:
    """Load a scenario from a YAML or JSON file.

    Args:
        config_path: Path to configuration file (.yaml, .yml, or .json)

    Returns:
        Scenario instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        if config_path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif config_path.suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config format: {config_path.suffix}. "
                "Use .yaml, .yml, or .json"
            )

    return Scenario(**data)


def save_scenario(scenario: Scenario, config_path: Union[Path, str]) -> None:
    """Save a scenario to a YAML or JSON file.

    Raises:
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    data = scenario.to_dict()

    # Ensure parent directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        if config_path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        elif config_path.suffix == ".json":
            json.dump(data, f, indent=2)
        else:
            raise ValueError(
                f"Unsupported config format: {config_path.suffix}. "
                "Use .yaml, .yml, or .json"
            )
