"""
Utilisation and data-quality views: table sizes, encounter classes, numeric observations, orphan references.
"""
from __future__ import annotations

import pandas as pd

from ehr_eda.config import DESCRIPTION_COL, ENCOUNTER_COL, PATIENT_COL, TOP_N
from ehr_eda.analytics.common import safe_series_divide
from ehr_eda.data.schemas import TABLE_SPECS, TableName


def _primary_date_col(name: str, df: pd.DataFrame) -> str | None:
    """Catalogue primary date, or the first typed date column the file actually has."""
    spec = TABLE_SPECS.get(name)
    if spec is None:
        return None
    if spec.primary_date in df.columns:
        return spec.primary_date
    return next((c for c in spec.date_cols if c in df.columns), None)


def table_overview(tables: dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Rows, distinct patients and date span per table."""
    rows = []
    for name, df in tables.items():
        id_col = "Id" if name == TableName.PATIENTS.value else PATIENT_COL
        date_col = _primary_date_col(name, df)
        dates = df[date_col].dropna() if date_col else pd.Series(dtype="datetime64[ns]")
        rows.append({
            "table": name,
            "rows": len(df),
            "columns": len(df.columns),
            "patients": int(df[id_col].nunique()) if id_col in df.columns else 0,
            "date_column": date_col or "",
            "earliest": dates.min().strftime("%Y-%m-%d") if not dates.empty else "",
            "latest": dates.max().strftime("%Y-%m-%d") if not dates.empty else "",
        })
    return pd.DataFrame(rows)


def encounter_class_summary(encounters: pd.DataFrame) -> pd.DataFrame:
    """Volume and cost per ENCOUNTERCLASS, largest first."""
    g = encounters.groupby("ENCOUNTERCLASS", observed=True).agg(
        encounters=("Id", "nunique"),
        patients=(PATIENT_COL, "nunique"),
        total_claim_cost=("TOTAL_CLAIM_COST", "sum"),
        payer_coverage=("PAYER_COVERAGE", "sum"),
    )
    g["coverage_ratio"] = safe_series_divide(g["payer_coverage"], g["total_claim_cost"]).round(4)
    g["mean_claim_cost"] = safe_series_divide(g["total_claim_cost"], g["encounters"]).round(2)
    return g.rename_axis("name").reset_index().sort_values("encounters", ascending=False)


def observation_value_summary(observations: pd.DataFrame, n: int = TOP_N) -> pd.DataFrame:
    """Statistics of numeric VALUEs for the n most-recorded (DESCRIPTION, UNITS) pairs."""
    obs = observations.copy()
    if "TYPE" in obs.columns:
        obs = obs[obs["TYPE"].astype(str).str.lower() == "numeric"]
    obs["value_num"] = pd.to_numeric(obs["VALUE"], errors="coerce")
    obs = obs.dropna(subset=["value_num"])
    obs["UNITS"] = obs["UNITS"].fillna("") if "UNITS" in obs.columns else ""

    g = obs.groupby([DESCRIPTION_COL, "UNITS"], observed=True)["value_num"].agg(
        ["count", "mean", "median", "min", "max"]
    )
    g = g.sort_values("count", ascending=False).head(n)
    g[["mean", "median", "min", "max"]] = g[["mean", "median", "min", "max"]].round(2)
    return g.reset_index().rename(columns={DESCRIPTION_COL: "description", "UNITS": "units"})


def referential_integrity(tables: dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Orphan PATIENT / ENCOUNTER references per event table. Reported, never repaired."""
    patient_ids = set(tables[TableName.PATIENTS.value]["Id"].dropna())
    encounter_ids = set(tables[TableName.ENCOUNTERS.value]["Id"].dropna())

    rows = []
    for name, df in tables.items():
        if name == TableName.PATIENTS.value or PATIENT_COL not in df.columns:
            continue
        orphan_patients = int((~df[PATIENT_COL].isin(patient_ids)).sum())
        if name == TableName.ENCOUNTERS.value or ENCOUNTER_COL not in df.columns:
            orphan_encounters = 0
        else:
            orphan_encounters = int((~df[ENCOUNTER_COL].isin(encounter_ids)).sum())
        rows.append({
            "table": name,
            "rows": len(df),
            "orphan_patient_rows": orphan_patients,
            "orphan_encounter_rows": orphan_encounters,
        })
    return pd.DataFrame(rows, columns=["table", "rows", "orphan_patient_rows", "orphan_encounter_rows"])
