"""
Description frequency: distinct patients per DESCRIPTION, ranked with a random tie-break.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from ehr_eda.config import DESCRIPTION_COL, PATIENT_COL, TOP_N


def description_frequency(
    df: pd.DataFrame,
    category_col: str = DESCRIPTION_COL,
    id_col: str = PATIENT_COL,
    seed: int | None = None,
) -> pd.DataFrame:
    """Count distinct patients per category label, most common first.

    Every label is kept, including those seen for a single patient. ``rank``
    runs 1..n without gaps; labels with equal counts are ordered by a random
    permutation, so their relative ranks change between runs unless ``seed``
    is given.

    Returns columns: category_col, patients, pct_of_patients, rank.
    """
    pairs = df[[id_col, category_col]].dropna().drop_duplicates()
    total_patients = pairs[id_col].nunique()

    freq = (
        pairs.groupby(category_col, observed=True)
        .size()
        .rename("patients")
        .reset_index()
    )

    rng = np.random.default_rng(seed)
    freq["_tiebreak"] = rng.permutation(len(freq))
    freq = (
        freq.sort_values(["patients", "_tiebreak"], ascending=[False, True])
        .drop(columns="_tiebreak")
        .reset_index(drop=True)
    )

    freq["pct_of_patients"] = (freq["patients"] / total_patients * 100).round(1) if total_patients else 0.0
    freq["rank"] = np.arange(1, len(freq) + 1)
    return freq[[category_col, "patients", "pct_of_patients", "rank"]]


def frequency_scatter(freq: pd.DataFrame, category_col: str = DESCRIPTION_COL) -> list[dict]:
    """Rank-vs-count points for a scatter plot of a frequency table."""
    return [
        {"rank": int(r), "patients": int(p), "description": d}
        for r, p, d in zip(freq["rank"], freq["patients"], freq[category_col])
    ]


def top_descriptions(freq: pd.DataFrame, n: int = TOP_N, category_col: str = DESCRIPTION_COL) -> list[str]:
    """The n best-ranked labels."""
    return freq.nsmallest(n, "rank")[category_col].tolist()


def frequency_by_table(tables: dict[str, pd.DataFrame], seed: int | None = None) -> dict[str, pd.DataFrame]:
    """description_frequency for every table that has a DESCRIPTION column."""
    return {
        name: description_frequency(df, seed=seed)
        for name, df in tables.items()
        if DESCRIPTION_COL in df.columns and PATIENT_COL in df.columns
    }


def description_overview(
    tables: dict[str, pd.DataFrame],
    seed: int | None = None,
    freqs: dict[str, pd.DataFrame] | None = None,
) -> pd.DataFrame:
    """One row per event table: size, patient reach, and description spread.

    ``freqs`` (from frequency_by_table) reuses an existing ranking.
    """
    if freqs is None:
        freqs = frequency_by_table(tables, seed)
    rows = []
    for name, freq in freqs.items():
        df = tables[name]
        rows.append({
            "table": name,
            "rows": len(df),
            "patients": int(df[PATIENT_COL].nunique()),
            "descriptions": len(freq),
            "singleton_descriptions": int((freq["patients"] == 1).sum()),
            "top_description": freq[DESCRIPTION_COL].iloc[0] if len(freq) else "",
            "top_description_patients": int(freq["patients"].iloc[0]) if len(freq) else 0,
        })
    return pd.DataFrame(rows, columns=[
        "table", "rows", "patients", "descriptions", "singleton_descriptions",
        "top_description", "top_description_patients",
    ])
