"""One simulated day: discharges, admissions and the bed limit."""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from mausim.model.admissions import AdmissionGenerator
from mausim.model.discharge import DischargeEvaluator
from mausim.results.collector import RunState


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayOutcome:
    """Quantities of one processed day.

    Attributes:
        day: Simulation day.
        occupancy: Beds occupied at the start of the day.
        discharges: Stays discharged today.
        generated: Admissions generated by the model.
        released: Vacated beds reusable for today's admissions.
        ceiling: Total beds minus released beds (may be <= 0).
        removed: Stays cut by the bed limit.
        adjusted_arrivals: Generated admissions minus stays cut.
        occupied_after: Collection size at the end of the day.
    """
    day: int
    occupancy: int
    discharges: int
    generated: int
    released: int
    ceiling: int
    removed: int
    adjusted_arrivals: int
    occupied_after: int


class DailyStepper:
    """Advance a replication by one day.

    The order of operations within a day is fixed:

    1. record start-of-day occupancy;
    2. decide discharges for every active stay, recording LOS;
    3. record the discharge count;
    4. remove discharged stays;
    5. generate and record the model's admissions;
    6. append them to the active collection;
    7. draw the beds vacated this morning that can be reused today;
    8. cut the collection to ``total_beds - released`` entries;
    9. record admissions actually accepted.

    The cut in step 8 keeps the head of the collection. Surviving stays
    come first and the shuffled new batch last, so new admissions are
    turned away first, but a ceiling below the number of surviving stays
    also evicts existing stays from the tail.

    Attributes:
        admissions: Admission generator.
        discharge: Discharge evaluator.
        units: Units simulated jointly.
        total_beds: Combined capacity of ``units``.
        release_probability: Chance a vacated bed is reused the same day.
        rng: Generator for the bed release draw.
    """

    def __init__(
        self,
        admissions: AdmissionGenerator,
        discharge: DischargeEvaluator,
        units: Sequence[int],
        total_beds: int,
        rng: np.random.Generator,
        release_probability: float = 0.5,
    ) -> None:
        self.admissions = admissions
        self.discharge = discharge
        self.units = tuple(units)
        self.total_beds = total_beds
        self.rng = rng
        self.release_probability = release_probability

    def step(self, day: int, state: RunState) -> DayOutcome:
        """Process one day, mutating ``state``.

        Args:
            day: Simulation day (negative during warm-up).
            state: Replication state.

        Returns:
            DayOutcome with the day's quantities.
        """
        occupancy = len(state.active)
        state.record_occupancy(day, occupancy)

        discharges = 0
        if occupancy > 0:
            for stay in state.active:
                if not self.discharge.is_discharged(day, stay):
                    continue
                stay.discharge(day)
                discharges += 1
                if (state.in_measurement_window(stay.admission_day)
                        and state.in_measurement_window(day)):
                    state.record_los(stay.length_of_stay)
            state.active = [s for s in state.active if not s.is_discharged]
        state.record_discharges(day, discharges)

        new_stays = self.admissions.generate(day, self.units)
        generated = len(new_stays)
        state.record_model_arrivals(day, generated)
        state.active.extend(new_stays)

        # Beds freed this morning only count once past the warm-up
        released = 0
        if state.is_observed(day):
            released = int(self.rng.binomial(discharges, self.release_probability))

        ceiling = self.total_beds - released
        limit = max(0, ceiling)
        pre_cut = len(state.active)
        if pre_cut > limit:
            state.active = state.active[:limit]
            if ceiling <= 0:
                logger.debug("Day %s: no beds available (ceiling %s)", day, ceiling)
        removed = pre_cut - len(state.active)
        if removed > generated:
            logger.debug(
                "Day %s: %s existing stays evicted by the bed limit",
                day, removed - generated,
            )

        adjusted = generated - removed
        state.record_arrivals(day, adjusted, removed)

        return DayOutcome(
            day=day,
            occupancy=occupancy,
            discharges=discharges,
            generated=generated,
            released=released,
            ceiling=ceiling,
            removed=removed,
            adjusted_arrivals=adjusted,
            occupied_after=len(state.active),
        )
