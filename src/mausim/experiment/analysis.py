"""Confidence intervals and result records across replications."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from mausim.core.scenario import Scenario


# Normal critical value used for the reported 95% interval
Z_95 = 1.96


def compute_ci(
    values: Sequence[float],
    confidence: float = 0.95,
    z: Optional[float] = None,
) -> Dict:
    """Compute confidence interval for a metric.

    Args:
        values: List of metric values from replications.
        confidence: Confidence level (default 0.95 for 95% CI). Ignored
            when ``z`` is given.
        z: Fixed critical value. If None, the Student-t critical value
            for ``confidence`` and n - 1 degrees of freedom is used.

    Returns:
        Dictionary containing:
        - mean: Sample mean
        - std: Sample standard deviation
        - se: Standard error
        - ci_lower: Lower bound of CI (mean - half width)
        - ci_upper: Upper bound of CI (mean + half width)
        - ci_half_width: Half-width of CI
        - n: Sample size
    """
    n = len(values)
    if n < 2:
        mean = float(values[0]) if n == 1 else 0.0
        return {
            "mean": mean,
            "std": 0.0,
            "se": 0.0,
            "ci_lower": mean,
            "ci_upper": mean,
            "ci_half_width": 0.0,
            "n": n,
        }

    arr = np.asarray(values, dtype=float)
    mean = float(np.mean(arr))
    std = float(np.std(arr, ddof=1))
    se = std / np.sqrt(n)

    if z is None:
        z = float(stats.t.ppf((1 + confidence) / 2, df=n - 1))
    half_width = z * se

    return {
        "mean": mean,
        "std": std,
        "se": float(se),
        "ci_lower": mean - half_width,
        "ci_upper": mean + half_width,
        "ci_half_width": float(half_width),
        "n": n,
    }


def format_estimate(mean: float, lower: float, upper: float) -> str:
    """Point estimate with its interval, e.g. '71.53 (70.98 - 72.08)'."""
    return f"{mean:.2f} ({lower:.2f} - {upper:.2f})"


@dataclass
class ExperimentResult:
    """Summary of one replicated scenario.

    Attributes:
        simulation: Scenario label (e.g. "baseline").
        model: Discharge model variant.
        units: Units simulated jointly.
        stats: Ordered (stat name, formatted value) pairs.
        mean: Mean annual occupancy across replications.
        sd: Standard deviation across replications.
        ci_lower: Lower bound of the 95% interval.
        ci_upper: Upper bound of the 95% interval.
        n_reps: Number of replications.
    """
    simulation: str
    model: str
    units: Tuple[int, ...]
    stats: List[Tuple[str, str]] = field(default_factory=list)
    mean: float = 0.0
    sd: float = 0.0
    ci_lower: float = 0.0
    ci_upper: float = 0.0
    n_reps: int = 0

    @property
    def unit_label(self) -> str:
        return ", ".join(str(u) for u in self.units)

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format result table with columns simulation, model, stat, value, MAU."""
        return pd.DataFrame(
            [
                {
                    "simulation": self.simulation,
                    "model": self.model,
                    "stat": stat,
                    "value": value,
                    "MAU": self.unit_label,
                }
                for stat, value in self.stats
            ],
            columns=["simulation", "model", "stat", "value", "MAU"],
        )


def summarise_replications(
    values: Sequence[float],
    scenario: Scenario,
    z: float = Z_95,
) -> ExperimentResult:
    """Summarise per-replication annual mean occupancies.

    Computes the mean ``e``, sample standard deviation ``sd`` and half
    width ``d = z * sd / sqrt(runs)``; the interval is ``[e - d, e + d]``.

    Args:
        values: Annual mean occupancy of each replication.
        scenario: Scenario that produced the values.
        z: Critical value (1.96 for a 95% interval).

    Returns:
        ExperimentResult tagged with the scenario name, model and units.
    """
    ci = compute_ci(values, z=z)

    return ExperimentResult(
        simulation=scenario.name,
        model=scenario.discharge_model,
        units=scenario.units,
        stats=[
            ("mean_occupancy", format_estimate(ci["mean"], ci["ci_lower"], ci["ci_upper"])),
            ("sd", f"{ci['std']:.2f}"),
        ],
        mean=ci["mean"],
        sd=ci["std"],
        ci_lower=ci["ci_lower"],
        ci_upper=ci["ci_upper"],
        n_reps=ci["n"],
    )


def combine_results(results: Iterable[ExperimentResult]) -> pd.DataFrame:
    """Stack several result tables into one."""
    frames = [r.to_dataframe() for r in results]
    if not frames:
        return pd.DataFrame(columns=["simulation", "model", "stat", "value", "MAU"])
    return pd.concat(frames, ignore_index=True)
