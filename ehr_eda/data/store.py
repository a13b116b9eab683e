"""
DataStore: the loaded table set, held in memory for the whole run.

Loaded once, then read by every analytics function. Derived columns are added
at load time; the raw columns are never modified afterwards.
"""
from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional

import pandas as pd

from ehr_eda.config import DATA_FOLDER
from ehr_eda.data.loader import load_all_tables
from ehr_eda.data.normalize import add_encounter_columns, add_patient_columns
from ehr_eda.data.schemas import DESCRIPTION_TABLES, TABLE_SPECS, TableName


class DataStore:
    """In-memory EHR tables with per-table accessors."""

    def __init__(self) -> None:
        self.tables: dict[str, pd.DataFrame] = {}
        self.data_dir: Optional[Path] = None
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, data_dir: Path = DATA_FOLDER, as_of: dt.date | None = None) -> "DataStore":
        """Load all seven tables and add derived columns."""
        print("Loading EHR tables...")
        tables = load_all_tables(data_dir)
        tables[TableName.PATIENTS.value] = add_patient_columns(tables[TableName.PATIENTS.value], as_of)
        tables[TableName.ENCOUNTERS.value] = add_encounter_columns(tables[TableName.ENCOUNTERS.value])
        return self.load_frames(tables, data_dir)

    def load_frames(self, tables: dict[str, pd.DataFrame], data_dir: Path | None = None) -> "DataStore":
        """Adopt already-built frames (used by load() and by tests)."""
        self.tables = dict(tables)
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self._loaded = True
        return self

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def table(self, name: str) -> pd.DataFrame:
        """Table by name. Raises KeyError listing the valid names."""
        key = name.value if isinstance(name, TableName) else str(name).lower()
        if key not in self.tables:
            raise KeyError(f"Unknown table '{name}'. Valid: {sorted(self.tables)}")
        return self.tables[key]

    @property
    def patients(self) -> pd.DataFrame:
        return self.table(TableName.PATIENTS)

    @property
    def encounters(self) -> pd.DataFrame:
        return self.table(TableName.ENCOUNTERS)

    @property
    def conditions(self) -> pd.DataFrame:
        return self.table(TableName.CONDITIONS)

    @property
    def medications(self) -> pd.DataFrame:
        return self.table(TableName.MEDICATIONS)

    @property
    def procedures(self) -> pd.DataFrame:
        return self.table(TableName.PROCEDURES)

    @property
    def careplans(self) -> pd.DataFrame:
        return self.table(TableName.CAREPLANS)

    @property
    def observations(self) -> pd.DataFrame:
        return self.table(TableName.OBSERVATIONS)

    def description_tables(self) -> dict[str, pd.DataFrame]:
        """Event tables that carry a DESCRIPTION column, in catalogue order."""
        return {name: self.tables[name] for name in DESCRIPTION_TABLES if name in self.tables}

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def row_counts(self) -> dict[str, int]:
        return {name: len(df) for name, df in self.tables.items()}

    def patient_count(self) -> int:
        if TableName.PATIENTS.value not in self.tables:
            return 0
        return int(self.patients["Id"].nunique())

    def date_range(self, name: str = TableName.ENCOUNTERS.value) -> str:
        """Human-readable span of a table's primary date column."""
        df = self.table(name)
        col = TABLE_SPECS[name].primary_date
        if col is None or col not in df.columns:
            return "N/A"
        dates = df[col].dropna()
        if dates.empty:
            return "N/A"
        return f"{dates.min():%Y-%m-%d} to {dates.max():%Y-%m-%d}"
