"""Core entity definitions for the simulation.

This module contains the stay record, coefficient and capacity rows,
regression term names and the calendar mapping shared by the admission
and discharge models, placed here to avoid circular imports.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import IntEnum
from functools import lru_cache
from typing import Optional


INTERCEPT = "(Intercept)"


class Weekday(IntEnum):
    """Day-of-week codes used by the regression terms (Sunday first)."""
    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7


# Weekday and month numbering of the fitted regressions; the first
# category of each is the reference level folded into the intercept.
REFERENCE_WEEKDAY = Weekday.SUNDAY
REFERENCE_MONTH = 1


def weekday_term(weekday: int) -> Optional[str]:
    """Regression term name for a day of week, e.g. 'Weekday3'.

    Returns None for the reference weekday, which has no term of its own.
    """
    try:
        weekday = Weekday(weekday)
    except ValueError:
        raise ValueError(f"weekday must be in 1..7, got {weekday}") from None
    if weekday == REFERENCE_WEEKDAY:
        return None
    return f"Weekday{weekday.value}"


def month_term(month: int) -> Optional[str]:
    """Regression term name for a month of year, e.g. 'Month11'.

    Returns None for the reference month.
    """
    if not REFERENCE_MONTH <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    if month == REFERENCE_MONTH:
        return None
    return f"Month{month}"


WEEKDAY_TERMS = [weekday_term(w) for w in Weekday if w != REFERENCE_WEEKDAY]
MONTH_TERMS = [month_term(m) for m in range(REFERENCE_MONTH + 1, 13)]


@dataclass(frozen=True)
class CalendarDay:
    """Calendar covariates of one simulation day."""
    weekday: Weekday
    month: int  # 1..12


@lru_cache(maxsize=4096)
def calendar_day(sim_date: int, day_zero: date) -> CalendarDay:
    """Map a simulation day index to its weekday and month.

    Args:
        sim_date: Simulation day (may be negative during warm-up).
        day_zero: Calendar date of simulation day 0.

    Returns:
        CalendarDay for ``day_zero + sim_date`` days.
    """
    d = day_zero + timedelta(days=sim_date)
    # isoweekday: Monday=1 .. Sunday=7
    return CalendarDay(weekday=Weekday(d.isoweekday() % 7 + 1), month=d.month)


@dataclass
class Stay:
    """One patient's continuous occupation of a bed.

    Attributes:
        unit_id: Unit the patient was admitted to.
        admission_day: Simulation day of admission.
        discharge_day: Simulation day of discharge, None while in a bed.
    """
    unit_id: int
    admission_day: int
    discharge_day: Optional[int] = None

    @property
    def is_discharged(self) -> bool:
        return self.discharge_day is not None

    @property
    def length_of_stay(self) -> Optional[int]:
        """Whole days between admission and discharge."""
        if self.discharge_day is None:
            return None
        return self.discharge_day - self.admission_day

    def discharge(self, day: int) -> None:
        """Set the discharge day. A stay can only be discharged once."""
        if self.discharge_day is not None:
            raise ValueError(
                f"Stay admitted on day {self.admission_day} already "
                f"discharged on day {self.discharge_day}"
            )
        if day < self.admission_day:
            raise ValueError(
                f"Discharge day {day} precedes admission day {self.admission_day}"
            )
        self.discharge_day = day


@dataclass(frozen=True)
class CoefficientRow:
    """One fitted regression coefficient.

    ``model_variant`` is only set for discharge models, where several
    alternative fits are stored side by side.
    """
    unit_id: int
    term: str
    coefficient: float
    model_variant: Optional[str] = None


@dataclass(frozen=True)
class CapacityEntry:
    """Bed count of one unit."""
    unit_id: int
    beds: int

    def __post_init__(self):
        if self.beds < 0:
            raise ValueError(
                f"Bed count must be non-negative, got {self.beds} for unit {self.unit_id}"
            )
