"""Results layer: per-replication state and daily series."""

from mausim.results.collector import RunState

__all__ = ["RunState"]
