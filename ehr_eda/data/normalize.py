"""
Column typing and derived columns (age, age group, coverage ratios).
"""
from __future__ import annotations

import datetime as dt

import numpy as np
import pandas as pd

from ehr_eda.config import AGE_AS_OF, AGE_BINS, AGE_LABELS
from ehr_eda.data.schemas import TableSpec


# ---------------------------------------------------------------------------
# Column normalisation
# ---------------------------------------------------------------------------

def _parse_dates(s: pd.Series) -> pd.Series:
    """Parse date or timestamp strings; bad values become NaT.

    Synthea mixes plain dates (BIRTHDATE) with UTC timestamps (START), so
    everything is read as UTC and then made naive.
    """
    if s.isna().all():
        return pd.Series(pd.NaT, index=s.index, dtype="datetime64[ns]")
    parsed = pd.to_datetime(s, errors="coerce", utc=True, format="ISO8601")
    return parsed.dt.tz_localize(None)


def normalize_columns(df: pd.DataFrame, spec: TableSpec) -> pd.DataFrame:
    """Strip header whitespace, parse date columns, coerce numeric columns."""
    df = df.rename(columns=lambda c: str(c).strip())

    for col in spec.date_cols:
        if col in df.columns:
            df[col] = _parse_dates(df[col])

    for col in spec.numeric_cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    return df


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

def age_in_years(birth: pd.Series, end: pd.Series) -> pd.Series:
    """Whole years between two datetime Series (nullable Int64)."""
    years = end.dt.year - birth.dt.year
    before_birthday = (end.dt.month < birth.dt.month) | (
        (end.dt.month == birth.dt.month) & (end.dt.day < birth.dt.day)
    )
    return (years - before_birthday.astype(int)).astype("Int64")


def add_patient_columns(patients: pd.DataFrame, as_of: dt.date | None = None) -> pd.DataFrame:
    """Add is_deceased, AGE, AGE_GROUP and COVERAGE_RATIO to the patients table.

    Deceased patients are aged at DEATHDATE, living ones at ``as_of``
    (config AGE_AS_OF, else today).
    """
    df = patients.copy()
    as_of = as_of or AGE_AS_OF or dt.date.today()

    death = df["DEATHDATE"] if "DEATHDATE" in df.columns else pd.Series(pd.NaT, index=df.index)
    death = pd.to_datetime(death)
    df["is_deceased"] = death.notna()

    end = death.fillna(pd.Timestamp(as_of))
    df["AGE"] = age_in_years(df["BIRTHDATE"], end)
    df["AGE_GROUP"] = pd.cut(
        df["AGE"].astype(float), bins=AGE_BINS, labels=AGE_LABELS, right=False,
    )

    # Lifetime ratio: payer coverage over HEALTHCARE_EXPENSES, read as the lifetime
    # total cost. Above 1 the payer covered more than was spent. Zero expenses give inf/NaN.
    df["COVERAGE_RATIO"] = df["HEALTHCARE_COVERAGE"] / df["HEALTHCARE_EXPENSES"]
    return df


# ---------------------------------------------------------------------------
# Encounters
# ---------------------------------------------------------------------------

def add_encounter_columns(encounters: pd.DataFrame) -> pd.DataFrame:
    """Add COVERAGE_RATIO and DURATION_MINUTES to the encounters table."""
    df = encounters.copy()
    df["COVERAGE_RATIO"] = df["PAYER_COVERAGE"] / df["TOTAL_CLAIM_COST"]
    if "START" in df.columns and "STOP" in df.columns:
        df["DURATION_MINUTES"] = (df["STOP"] - df["START"]).dt.total_seconds() / 60.0
    else:
        df["DURATION_MINUTES"] = np.nan
    return df
