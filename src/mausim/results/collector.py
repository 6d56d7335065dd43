"""Per-replication state and daily series."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from mausim.core.entities import Stay


@dataclass
class RunState:
    """Mutable state of one replication.

    Daily series cover the observed days 1..duration and are stored in
    fixed-size arrays at index ``day - 1``; warm-up days (day < 1) are
    simulated but never recorded. Annual figures use days
    1..measurement_days only.

    Attributes:
        duration: Last simulated day.
        measurement_days: Length of the measurement window starting at day 1.
        active: Stays currently occupying a bed.
        occupancy: Beds occupied at the start of each day.
        discharges: Stays discharged each day.
        model_arrivals: Admissions generated by the model each day.
        arrivals: Admissions accepted after the capacity constraint.
        removed: Stays cut by the capacity constraint each day.
        los: Lengths of stay of stays admitted and discharged in the window.
    """

    duration: int = 372
    measurement_days: int = 365
    active: List[Stay] = field(default_factory=list)
    occupancy: np.ndarray = field(init=False)
    discharges: np.ndarray = field(init=False)
    model_arrivals: np.ndarray = field(init=False)
    arrivals: np.ndarray = field(init=False)
    removed: np.ndarray = field(init=False)
    los: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Allocate the daily series."""
        if self.measurement_days > self.duration:
            raise ValueError("measurement_days cannot exceed duration")
        self.occupancy = np.zeros(self.duration, dtype=np.int64)
        self.discharges = np.zeros(self.duration, dtype=np.int64)
        self.model_arrivals = np.zeros(self.duration, dtype=np.int64)
        self.arrivals = np.zeros(self.duration, dtype=np.int64)
        self.removed = np.zeros(self.duration, dtype=np.int64)

    def is_observed(self, day: int) -> bool:
        """True for days past the warm-up that have a slot in the series."""
        return 1 <= day <= self.duration

    def in_measurement_window(self, day: int) -> bool:
        return 1 <= day <= self.measurement_days

    def index(self, day: int) -> int:
        """Array position of an observed day."""
        if not self.is_observed(day):
            raise IndexError(f"Day {day} is outside the observed range 1..{self.duration}")
        return day - 1

    def record_occupancy(self, day: int, n: int) -> None:
        if self.is_observed(day):
            self.occupancy[self.index(day)] = n

    def record_discharges(self, day: int, n: int) -> None:
        if self.is_observed(day):
            self.discharges[self.index(day)] = n

    def record_model_arrivals(self, day: int, n: int) -> None:
        if self.is_observed(day):
            self.model_arrivals[self.index(day)] = n

    def record_arrivals(self, day: int, accepted: int, removed: int) -> None:
        """Record admissions accepted and stays cut by the capacity limit."""
        if self.is_observed(day):
            self.arrivals[self.index(day)] = accepted
            self.removed[self.index(day)] = removed

    def record_los(self, los: int) -> None:
        self.los.append(los)

    def annual_mean_occupancy(self) -> float:
        """Mean start-of-day occupancy over the measurement window."""
        return float(np.mean(self.occupancy[: self.measurement_days]))

    def compute_metrics(self) -> Dict[str, Any]:
        """Summary metrics of this replication.

        Returns:
            Dictionary containing annual mean occupancy, LOS summary and
            totals over the measurement window.
        """
        window = slice(0, self.measurement_days)
        los = np.array(self.los, dtype=float)

        return {
            "annual_mean_occupancy": self.annual_mean_occupancy(),
            "peak_occupancy": int(np.max(self.occupancy[window])),
            "mean_los": float(np.mean(los)) if len(los) else 0.0,
            "median_los": float(np.median(los)) if len(los) else 0.0,
            "n_los": len(self.los),
            "total_discharges": int(np.sum(self.discharges[window])),
            "total_model_arrivals": int(np.sum(self.model_arrivals[window])),
            "total_arrivals": int(np.sum(self.arrivals[window])),
            "turned_away": int(np.sum(self.removed[window])),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Daily series over the measurement window, one row per day."""
        window = slice(0, self.measurement_days)
        return pd.DataFrame({
            "date": np.arange(1, self.measurement_days + 1),
            "occupancy": self.occupancy[window],
            "discharges": self.discharges[window],
            "model_arrivals": self.model_arrivals[window],
            "arrivals": self.arrivals[window],
        })
