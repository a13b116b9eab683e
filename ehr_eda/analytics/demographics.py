"""
Patient demographics: age distribution, category counts, race x ethnicity, lifetime expense coverage.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from ehr_eda.config import AGE_LABELS, COVERAGE_OUTLIER_THRESHOLD
from ehr_eda.analytics.common import finite, safe_divide, safe_series_divide


def age_summary(patients: pd.DataFrame) -> dict:
    """Headline age and vital-status figures."""
    ages = patients["AGE"].dropna().astype(float)
    deceased = int(patients["is_deceased"].sum())
    has = not ages.empty
    return {
        "patients": int(len(patients)),
        "living": int(len(patients) - deceased),
        "deceased": deceased,
        "mean_age": round(float(ages.mean()), 1) if has else 0.0,
        "median_age": float(ages.median()) if has else 0.0,
        "min_age": int(ages.min()) if has else 0,
        "max_age": int(ages.max()) if has else 0,
    }


def age_distribution(patients: pd.DataFrame, by: str | None = None) -> pd.DataFrame:
    """Patients per AGE_GROUP, every group present (zero-filled).

    With ``by`` (e.g. "GENDER"), one count column per value of that column.
    """
    if by is None:
        counts = patients["AGE_GROUP"].value_counts().reindex(AGE_LABELS, fill_value=0)
        total = counts.sum()
        out = pd.DataFrame({
            "age_group": AGE_LABELS,
            "patients": counts.to_numpy(),
        })
        out["pct"] = (out["patients"] / total * 100).round(1) if total else 0.0
        return out

    table = pd.crosstab(patients["AGE_GROUP"], patients[by], dropna=True)
    table = table.reindex(AGE_LABELS, fill_value=0)
    table.columns = [str(c) for c in table.columns]
    table["total"] = table.sum(axis=1)
    return table.rename_axis("age_group").reset_index()


def category_counts(patients: pd.DataFrame, col: str) -> pd.DataFrame:
    """Value counts of a demographic column, with percentages."""
    counts = patients[col].fillna("unknown").value_counts()
    total = counts.sum()
    out = counts.rename_axis(col.lower()).reset_index(name="patients")
    out["pct"] = (out["patients"] / total * 100).round(1) if total else 0.0
    return out


def race_ethnicity_crosstab(patients: pd.DataFrame, normalize: bool = False) -> pd.DataFrame:
    """RACE x ETHNICITY patient counts with a Total margin.

    normalize=True gives row percentages (each race sums to 100).
    """
    if normalize:
        table = pd.crosstab(patients["RACE"], patients["ETHNICITY"], normalize="index") * 100
        return table.round(1)
    return pd.crosstab(
        patients["RACE"], patients["ETHNICITY"], margins=True, margins_name="Total",
    )


def expense_coverage_summary(
    patients: pd.DataFrame,
    threshold: float = COVERAGE_OUTLIER_THRESHOLD,
) -> dict:
    """Lifetime expense vs payer coverage across all patients."""
    expenses = patients["HEALTHCARE_EXPENSES"].sum()
    coverage = patients["HEALTHCARE_COVERAGE"].sum()
    ratios = finite(patients["COVERAGE_RATIO"])
    return {
        "total_expenses": float(expenses),
        "total_coverage": float(coverage),
        "coverage_ratio": round(safe_divide(coverage, expenses), 4),
        "mean_expenses": round(safe_divide(expenses, len(patients)), 2),
        "mean_coverage": round(safe_divide(coverage, len(patients)), 2),
        "median_patient_ratio": round(float(ratios.median()), 4) if not ratios.empty else 0.0,
        "patients_over_threshold": int((ratios > threshold).sum()),
        "patients_undefined_ratio": int(len(patients) - len(ratios)),
    }


def expense_coverage_by_group(patients: pd.DataFrame, group_col: str) -> pd.DataFrame:
    """Lifetime expenses, coverage and group-level ratio per demographic group."""
    g = patients.groupby(group_col, observed=True).agg(
        patients=("Id", "nunique"),
        total_expenses=("HEALTHCARE_EXPENSES", "sum"),
        total_coverage=("HEALTHCARE_COVERAGE", "sum"),
        median_ratio=("COVERAGE_RATIO", lambda s: finite(s).median()),
    )
    g["coverage_ratio"] = safe_series_divide(g["total_coverage"], g["total_expenses"]).round(4)
    g["mean_expenses"] = (g["total_expenses"] / g["patients"]).round(2)
    g["median_ratio"] = g["median_ratio"].astype(float).round(4)
    g = g.replace([np.inf, -np.inf], np.nan)
    return g.rename_axis("name").reset_index().sort_values("total_expenses", ascending=False)
