"""
Care-plan cost coverage: join care plans to their encounter's claim cost and payer coverage.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from ehr_eda.config import (
    COVERAGE_OUTLIER_THRESHOLD, DESCRIPTION_COL, ENCOUNTER_COL, PATIENT_COL, TOP_N,
)
from ehr_eda.analytics.common import finite
from ehr_eda.analytics.frequency import description_frequency


COVERAGE_COLUMNS = [
    PATIENT_COL, DESCRIPTION_COL, "rank", "encounters",
    "TOTAL_CLAIM_COST", "PAYER_COVERAGE", "coverage_ratio",
]


def careplan_cost_coverage(
    careplans: pd.DataFrame,
    encounters: pd.DataFrame,
    top_n: int = TOP_N,
    seed: int | None = None,
    freq: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """One coverage-ratio observation per (patient, care plan) for the top_n care plans.

    Care plans are ranked by distinct patients (random tie-break). Each care
    plan row is matched to its encounter on ENCOUNTER = encounters.Id and
    PATIENT = PATIENT; rows without a matching encounter drop out. A patient
    with the same plan on several encounters gets the summed claim cost and
    coverage of those encounters.

    coverage_ratio = PAYER_COVERAGE / TOTAL_CLAIM_COST, unguarded: a zero or
    missing cost yields inf or NaN.

    Pass ``freq`` (description_frequency of careplans) to reuse an existing
    ranking instead of drawing a new tie-break.
    """
    if freq is None:
        freq = description_frequency(careplans, seed=seed)
    top = freq.nsmallest(top_n, "rank")
    plan_rank = dict(zip(top[DESCRIPTION_COL], top["rank"]))

    costs = encounters[["Id", PATIENT_COL, "TOTAL_CLAIM_COST", "PAYER_COVERAGE"]].rename(
        columns={"Id": ENCOUNTER_COL}
    )
    plans = careplans.loc[
        careplans[DESCRIPTION_COL].isin(plan_rank),
        [PATIENT_COL, ENCOUNTER_COL, DESCRIPTION_COL],
    ].drop_duplicates()

    joined = plans.merge(costs, on=[ENCOUNTER_COL, PATIENT_COL], how="inner")
    if joined.empty:
        return pd.DataFrame(columns=COVERAGE_COLUMNS)

    grouped = joined.groupby([PATIENT_COL, DESCRIPTION_COL], observed=True)
    result = grouped[["TOTAL_CLAIM_COST", "PAYER_COVERAGE"]].sum(min_count=1)
    result["encounters"] = grouped[ENCOUNTER_COL].nunique()
    result = result.reset_index()

    result["coverage_ratio"] = result["PAYER_COVERAGE"] / result["TOTAL_CLAIM_COST"]
    result["rank"] = result[DESCRIPTION_COL].map(plan_rank).astype(int)

    return result.sort_values(["rank", PATIENT_COL]).reset_index(drop=True)[COVERAGE_COLUMNS]


def coverage_outliers(
    df: pd.DataFrame,
    ratio_col: str = "coverage_ratio",
    threshold: float = COVERAGE_OUTLIER_THRESHOLD,
) -> pd.DataFrame:
    """Rows whose finite ratio exceeds threshold (payer covered more than was claimed)."""
    ratio = df[ratio_col].astype(float)
    mask = np.isfinite(ratio) & (ratio > threshold)
    return df[mask].sort_values(ratio_col, ascending=False)


def undefined_ratios(df: pd.DataFrame, ratio_col: str = "coverage_ratio") -> pd.DataFrame:
    """Rows whose ratio is NaN or infinite (zero or missing denominator)."""
    ratio = df[ratio_col].astype(float)
    return df[~np.isfinite(ratio)]


def coverage_summary(
    coverage_df: pd.DataFrame,
    threshold: float = COVERAGE_OUTLIER_THRESHOLD,
) -> pd.DataFrame:
    """Box-plot statistics of the finite coverage ratios, per care plan."""
    columns = [
        DESCRIPTION_COL, "rank", "patients", "mean_ratio", "median_ratio",
        "q1_ratio", "q3_ratio", "min_ratio", "max_ratio", "outliers", "undefined",
    ]
    if coverage_df.empty:
        return pd.DataFrame(columns=columns)

    rows = []
    for (desc, rank), grp in coverage_df.groupby([DESCRIPTION_COL, "rank"], observed=True):
        ratios = finite(grp["coverage_ratio"])
        has = not ratios.empty
        rows.append({
            DESCRIPTION_COL: desc,
            "rank": int(rank),
            "patients": int(grp[PATIENT_COL].nunique()),
            "mean_ratio": round(float(ratios.mean()), 4) if has else np.nan,
            "median_ratio": round(float(ratios.median()), 4) if has else np.nan,
            "q1_ratio": round(float(ratios.quantile(0.25)), 4) if has else np.nan,
            "q3_ratio": round(float(ratios.quantile(0.75)), 4) if has else np.nan,
            "min_ratio": round(float(ratios.min()), 4) if has else np.nan,
            "max_ratio": round(float(ratios.max()), 4) if has else np.nan,
            "outliers": int((ratios > threshold).sum()),
            "undefined": int(len(grp) - len(ratios)),
        })
    return pd.DataFrame(rows, columns=columns).sort_values("rank").reset_index(drop=True)


def coverage_distribution(coverage_df: pd.DataFrame) -> list[dict]:
    """Per-observation points for a ratio distribution plot, grouped by care plan.

    Undefined ratios are left out; undefined_ratios() lists them.
    """
    return [
        {"description": d, "rank": int(r), "patient": p, "coverage_ratio": float(c)}
        for d, r, p, c in zip(
            coverage_df[DESCRIPTION_COL], coverage_df["rank"],
            coverage_df[PATIENT_COL], coverage_df["coverage_ratio"],
        )
        if np.isfinite(float(c))
    ]
