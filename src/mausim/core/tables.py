"""Read-only coefficient and capacity tables.

Both tables are built once before any replication and then only queried.
Rows are indexed into dictionaries keyed by (unit, term) or
(unit, variant, term) so each lookup is a single dict access, and an
absent key raises instead of quietly matching nothing.

Example usage:
    from mausim.core.tables import read_coefficient_tables, read_capacity_table

    coefficients = read_coefficient_tables(
        Path("adm_coefficients.csv"), Path("dis_coefficients.csv")
    )
    capacity = read_capacity_table(Path("capacity.csv"))
"""

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pandas as pd

from mausim.core.entities import (
    INTERCEPT, MONTH_TERMS, WEEKDAY_TERMS,
    CapacityEntry, CoefficientRow,
)
from mausim.core.errors import MissingCapacityError, MissingCoefficientError


# Column names of the regression output files
UNIT_COLUMN = "MAU_name"
TERM_COLUMN = "Term"
VALUE_COLUMN = "Coefficient"
MODEL_COLUMN = "model"
BEDS_COLUMN = "beds"


def _require_columns(frame: pd.DataFrame, columns: Sequence[str], table: str) -> None:
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise ValueError(f"{table} table is missing columns: {', '.join(missing)}")


class CoefficientStore:
    """Admission and discharge regression coefficients.

    Admission coefficients are keyed by (unit, term); discharge
    coefficients by (unit, model variant, term). A term of None stands for
    a reference category (Sunday, January) and contributes 0.0.

    Attributes:
        admission: Read-only mapping (unit, term) -> coefficient.
        discharge: Read-only mapping (unit, variant, term) -> coefficient.
    """

    def __init__(
        self,
        admission_rows: Iterable[CoefficientRow],
        discharge_rows: Iterable[CoefficientRow],
    ) -> None:
        admission: Dict[Tuple[int, str], float] = {}
        for row in admission_rows:
            key = (row.unit_id, row.term)
            if key in admission:
                raise ValueError(f"Duplicate admission coefficient for {key}")
            admission[key] = float(row.coefficient)

        discharge: Dict[Tuple[int, str, str], float] = {}
        for row in discharge_rows:
            if row.model_variant is None:
                raise ValueError(
                    f"Discharge coefficient for unit {row.unit_id}, term "
                    f"'{row.term}' has no model variant"
                )
            key = (row.unit_id, row.model_variant, row.term)
            if key in discharge:
                raise ValueError(f"Duplicate discharge coefficient for {key}")
            discharge[key] = float(row.coefficient)

        self._admission = admission
        self._discharge = discharge

    @property
    def admission(self) -> Mapping[Tuple[int, str], float]:
        return MappingProxyType(self._admission)

    @property
    def discharge(self) -> Mapping[Tuple[int, str, str], float]:
        return MappingProxyType(self._discharge)

    @classmethod
    def from_frames(
        cls,
        admission: pd.DataFrame,
        discharge: pd.DataFrame,
    ) -> "CoefficientStore":
        """Build a store from regression output tables.

        Args:
            admission: Columns MAU_name, Term, Coefficient.
            discharge: Columns MAU_name, model, Term, Coefficient.

        Returns:
            CoefficientStore indexing both tables.

        Raises:
            ValueError: If a required column is missing.
        """
        _require_columns(admission, [UNIT_COLUMN, TERM_COLUMN, VALUE_COLUMN], "Admission")
        _require_columns(
            discharge, [UNIT_COLUMN, MODEL_COLUMN, TERM_COLUMN, VALUE_COLUMN], "Discharge"
        )
        admission_rows = [
            CoefficientRow(int(unit), str(term), float(value))
            for unit, term, value in admission[
                [UNIT_COLUMN, TERM_COLUMN, VALUE_COLUMN]
            ].itertuples(index=False)
        ]
        discharge_rows = [
            CoefficientRow(int(unit), str(term), float(value), str(model))
            for unit, model, term, value in discharge[
                [UNIT_COLUMN, MODEL_COLUMN, TERM_COLUMN, VALUE_COLUMN]
            ].itertuples(index=False)
        ]
        return cls(admission_rows, discharge_rows)

    def admission_coefficient(self, unit: int, term: Optional[str]) -> float:
        """Admission coefficient for a unit and term.

        Raises:
            MissingCoefficientError: If a non-reference term is absent.
        """
        if term is None:
            return 0.0
        try:
            return self._admission[(unit, term)]
        except KeyError:
            raise MissingCoefficientError(unit, term) from None

    def discharge_coefficient(self, unit: int, variant: str, term: Optional[str]) -> float:
        """Discharge coefficient for a unit, model variant and term.

        Raises:
            MissingCoefficientError: If a non-reference term is absent.
        """
        if term is None:
            return 0.0
        try:
            return self._discharge[(unit, variant, term)]
        except KeyError:
            raise MissingCoefficientError(unit, term, variant) from None

    def validate(
        self,
        units: Iterable[int],
        variant: str,
        include_discharge_month: bool = False,
    ) -> None:
        """Check every coefficient a run over ``units`` can ask for.

        Called before the first simulated day so incomplete tables abort
        the experiment instead of failing part way through a replication.

        Raises:
            MissingCoefficientError: For the first absent coefficient.
        """
        discharge_terms = [INTERCEPT] + WEEKDAY_TERMS
        if include_discharge_month:
            discharge_terms += MONTH_TERMS

        for unit in units:
            for term in [INTERCEPT] + WEEKDAY_TERMS + MONTH_TERMS:
                self.admission_coefficient(unit, term)
            for term in discharge_terms:
                self.discharge_coefficient(unit, variant, term)


class CapacityTable:
    """Bed count per unit.

    Attributes:
        beds_by_unit: Read-only mapping unit -> bed count.
    """

    def __init__(self, entries: Iterable[CapacityEntry]) -> None:
        beds: Dict[int, int] = {}
        for entry in entries:
            if entry.unit_id in beds:
                raise ValueError(f"Duplicate capacity entry for unit {entry.unit_id}")
            beds[entry.unit_id] = int(entry.beds)
        self._beds = beds

    @property
    def beds_by_unit(self) -> Mapping[int, int]:
        return MappingProxyType(self._beds)

    @classmethod
    def from_dict(cls, beds: Mapping[int, int]) -> "CapacityTable":
        """Build a table from a {unit: beds} mapping."""
        return cls(CapacityEntry(int(unit), int(n)) for unit, n in beds.items())

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "CapacityTable":
        """Build a table from a frame with columns MAU_name, beds."""
        _require_columns(frame, [UNIT_COLUMN, BEDS_COLUMN], "Capacity")
        return cls(
            CapacityEntry(int(unit), int(beds))
            for unit, beds in frame[[UNIT_COLUMN, BEDS_COLUMN]].itertuples(index=False)
        )

    def beds(self, unit: int) -> int:
        """Bed count of one unit.

        Raises:
            MissingCapacityError: If the unit is not in the table.
        """
        try:
            return self._beds[unit]
        except KeyError:
            raise MissingCapacityError(unit) from None

    def total_beds(self, units: Iterable[int]) -> int:
        """Combined bed count of a merged group of units."""
        return sum(self.beds(unit) for unit in units)


def read_coefficient_tables(admission_path: Path, discharge_path: Path) -> CoefficientStore:
    """Load admission and discharge coefficient CSV files.

    Raises:
        FileNotFoundError: If either file doesn't exist.
    """
    for path in (admission_path, discharge_path):
        if not Path(path).exists():
            raise FileNotFoundError(f"Coefficient file not found: {path}")
    return CoefficientStore.from_frames(
        pd.read_csv(admission_path), pd.read_csv(discharge_path)
    )


def read_capacity_table(path: Path) -> CapacityTable:
    """Load a capacity CSV file with columns MAU_name, beds."""
    if not Path(path).exists():
        raise FileNotFoundError(f"Capacity file not found: {path}")
    return CapacityTable.from_frame(pd.read_csv(path))
