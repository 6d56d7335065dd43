"""Per-replication simulation context.

Bundles the shared read-only tables with the random streams of a single
replication. A new context is made for every replication; nothing in it
is shared between replications except the tables, which are never
written after construction.
"""

from dataclasses import dataclass

import numpy as np

from mausim.core.tables import CapacityTable, CoefficientStore


@dataclass
class SimulationContext:
    """Tables and RNG streams used by one replication.

    Each stochastic element draws from its own stream so that changing
    one part of the model (e.g. the release heuristic) does not shift the
    random numbers seen by the others.

    Attributes:
        coefficients: Admission and discharge regression coefficients.
        capacity: Bed counts per unit.
        rng_admissions: Poisson counts and batch permutation.
        rng_discharge: Uniform draws for discharge decisions.
        rng_release: Binomial draws for same-day bed release.
    """

    coefficients: CoefficientStore
    capacity: CapacityTable
    rng_admissions: np.random.Generator
    rng_discharge: np.random.Generator
    rng_release: np.random.Generator

    @classmethod
    def create(
        cls,
        coefficients: CoefficientStore,
        capacity: CapacityTable,
        seed: int,
        replication: int = 0,
    ) -> "SimulationContext":
        """Create a context with streams derived from (seed, replication).

        The same pair always gives the same streams, whichever process
        the replication runs in, and different replication indices give
        statistically independent streams.

        Args:
            coefficients: Shared coefficient store.
            capacity: Shared capacity table.
            seed: Master seed of the experiment.
            replication: Zero-based replication index.

        Returns:
            SimulationContext with fresh generators.
        """
        seq = np.random.SeedSequence([seed, replication])
        adm_seq, dis_seq, rel_seq = seq.spawn(3)
        return cls(
            coefficients=coefficients,
            capacity=capacity,
            rng_admissions=np.random.default_rng(adm_seq),
            rng_discharge=np.random.default_rng(dis_seq),
            rng_release=np.random.default_rng(rel_seq),
        )
