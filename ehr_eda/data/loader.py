"""
CSV discovery and loading for the Synthea table set.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from ehr_eda.config import DATA_FOLDER
from ehr_eda.data.normalize import normalize_columns
from ehr_eda.data.schemas import TABLE_SPECS, TableSpec


# ---------------------------------------------------------------------------
# CSV discovery
# ---------------------------------------------------------------------------

def discover_csvs(data_dir: Path = DATA_FOLDER, tables: list[str] | None = None) -> dict[str, Path]:
    """Map each table name to its CSV in data_dir (stem matched case-insensitively).

    Raises FileNotFoundError naming every table without a file.
    """
    if tables is None:
        tables = list(TABLE_SPECS)

    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found: {data_dir}")

    by_stem = {p.stem.lower(): p for p in sorted(data_dir.glob("*")) if p.suffix.lower() == ".csv"}

    found: dict[str, Path] = {}
    missing: list[str] = []
    for name in tables:
        path = by_stem.get(name.lower())
        if path is None:
            missing.append(name)
        else:
            found[name] = path

    if missing:
        raise FileNotFoundError(
            f"Missing table CSVs in {data_dir}: {', '.join(missing)} "
            f"(expected {', '.join(TABLE_SPECS[m].filename for m in missing)})"
        )
    return found


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_table(filepath: Path, spec: TableSpec) -> pd.DataFrame:
    """Load one CSV and type its date/numeric columns."""
    df = pd.read_csv(filepath, low_memory=False)
    return normalize_columns(df, spec)


def load_all_tables(data_dir: Path = DATA_FOLDER, tables: list[str] | None = None) -> dict[str, pd.DataFrame]:
    """Discover and load every table. Any missing or unreadable file ends the run."""
    files = discover_csvs(data_dir, tables)

    loaded: dict[str, pd.DataFrame] = {}
    for i, (name, path) in enumerate(files.items(), 1):
        df = load_table(path, TABLE_SPECS[name])
        loaded[name] = df
        print(f"  [{i}/{len(files)}] {name}: {len(df):,} rows from {path.name}")

    total = sum(len(df) for df in loaded.values())
    print(f"  Total: {total:,} rows across {len(loaded)} tables")
    return loaded
