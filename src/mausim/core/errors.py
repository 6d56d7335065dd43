"""Exceptions raised for missing or malformed model input data.

Modelling-policy cases (a negative expected admission rate, a day on
which no bed is free) are part of normal behaviour and never raise.
"""

from typing import Optional


class MausimError(Exception):
    """Base class for all mausim errors."""


class MissingCoefficientError(MausimError, KeyError):
    """A regression coefficient the model needs is absent from the table.

    Reference categories (Sunday, January) are folded into the intercept
    and never raise this error.

    Attributes:
        unit: Unit identifier the lookup was made for.
        term: Model term name, e.g. "Weekday3".
        variant: Discharge model variant, or None for admissions.
    """

    def __init__(self, unit: int, term: str, variant: Optional[str] = None):
        self.unit = unit
        self.term = term
        self.variant = variant
        table = "admission" if variant is None else f"discharge ({variant})"
        super().__init__(
            f"No {table} coefficient for unit {unit}, term '{term}'"
        )

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class MissingCapacityError(MausimError, KeyError):
    """A simulated unit has no row in the capacity table."""

    def __init__(self, unit: int):
        self.unit = unit
        super().__init__(f"No bed capacity recorded for unit {unit}")

    def __str__(self) -> str:
        return str(self.args[0])
