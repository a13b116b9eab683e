"""
EHR EDA configuration: paths, constants, table legend.
"""
import datetime as dt
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths; override with EHR_EDA_DATA_DIR to point at another Synthea export
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("EHR_EDA_DATA_DIR", str(Path.home() / "synthea" / "output" / "csv")))
DATA_FOLDER = _data_dir
REPORTS_FOLDER = _data_dir / "reports"

# ---------------------------------------------------------------------------
# Run-level knobs
# ---------------------------------------------------------------------------
# Age of living patients is measured on this date (None = today)
_as_of = os.environ.get("EHR_EDA_AS_OF")
AGE_AS_OF = dt.date.fromisoformat(_as_of) if _as_of else None

# Seed for the random tie-break between equal counts (None = fresh randomness)
_seed = os.environ.get("EHR_EDA_SEED")
TIEBREAK_SEED = int(_seed) if _seed else None

TOP_N = 10
COVERAGE_OUTLIER_THRESHOLD = 1.0

# ---------------------------------------------------------------------------
# Shared column names
# ---------------------------------------------------------------------------
PATIENT_COL = "PATIENT"
ENCOUNTER_COL = "ENCOUNTER"
DESCRIPTION_COL = "DESCRIPTION"

# ---------------------------------------------------------------------------
# Age groups (left-closed bins)
# ---------------------------------------------------------------------------
AGE_BINS = [0, 18, 35, 50, 65, 80, float("inf")]
AGE_LABELS = ["0-17", "18-34", "35-49", "50-64", "65-79", "80+"]

# ---------------------------------------------------------------------------
# Table legend for the workbook overview sheet
# ---------------------------------------------------------------------------
TABLE_LEGEND = [
    ("patients", "One row per patient: demographics, birth/death dates, lifetime expenses and payer coverage"),
    ("encounters", "Visits with class (ambulatory, inpatient, ...), total claim cost and payer coverage"),
    ("conditions", "Diagnoses recorded at an encounter, with onset and resolution dates"),
    ("medications", "Prescriptions with dispenses, base cost and payer coverage"),
    ("procedures", "Procedures performed at an encounter, with base cost"),
    ("careplans", "Care plans started at an encounter, with reason"),
    ("observations", "Vitals, labs and survey answers with value and units"),
]
