"""
Table catalogue for the Synthea CSV export.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TableName(str, Enum):
    PATIENTS = "patients"
    ENCOUNTERS = "encounters"
    CONDITIONS = "conditions"
    MEDICATIONS = "medications"
    PROCEDURES = "procedures"
    CAREPLANS = "careplans"
    OBSERVATIONS = "observations"


@dataclass(frozen=True)
class TableSpec:
    """Typed columns of one CSV table."""
    name: str
    date_cols: tuple[str, ...] = field(default_factory=tuple)
    numeric_cols: tuple[str, ...] = field(default_factory=tuple)
    primary_date: Optional[str] = None   # used for earliest/latest date ranges

    @property
    def filename(self) -> str:
        return f"{self.name}.csv"

    @property
    def has_description(self) -> bool:
        return self.name != TableName.PATIENTS.value


TABLE_SPECS: dict[str, TableSpec] = {
    spec.name: spec
    for spec in [
        TableSpec(
            TableName.PATIENTS.value,
            date_cols=("BIRTHDATE", "DEATHDATE"),
            numeric_cols=("HEALTHCARE_EXPENSES", "HEALTHCARE_COVERAGE", "LAT", "LON"),
            primary_date="BIRTHDATE",
        ),
        TableSpec(
            TableName.ENCOUNTERS.value,
            date_cols=("START", "STOP"),
            numeric_cols=("BASE_ENCOUNTER_COST", "TOTAL_CLAIM_COST", "PAYER_COVERAGE"),
            primary_date="START",
        ),
        TableSpec(
            TableName.CONDITIONS.value,
            date_cols=("START", "STOP"),
            primary_date="START",
        ),
        TableSpec(
            TableName.MEDICATIONS.value,
            date_cols=("START", "STOP"),
            numeric_cols=("BASE_COST", "PAYER_COVERAGE", "DISPENSES", "TOTALCOST"),
            primary_date="START",
        ),
        TableSpec(
            TableName.PROCEDURES.value,
            date_cols=("DATE", "START", "STOP"),
            numeric_cols=("BASE_COST",),
            primary_date="DATE",
        ),
        TableSpec(
            TableName.CAREPLANS.value,
            date_cols=("START", "STOP"),
            primary_date="START",
        ),
        TableSpec(
            TableName.OBSERVATIONS.value,
            date_cols=("DATE",),
            primary_date="DATE",
        ),
    ]
}

DESCRIPTION_TABLES: list[str] = [name for name, spec in TABLE_SPECS.items() if spec.has_description]
