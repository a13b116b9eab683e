"""
EHR EDA Report: demographics, description frequency, care-plan cost coverage, data quality.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from ehr_eda.config import (
    COVERAGE_OUTLIER_THRESHOLD, DESCRIPTION_COL, TABLE_LEGEND, TIEBREAK_SEED, TOP_N,
)
from ehr_eda.data.schemas import TableName
from ehr_eda.data.store import DataStore
from ehr_eda.analytics.common import fillna_numeric, sanitize_for_json
from ehr_eda.analytics.coverage import (
    careplan_cost_coverage, coverage_distribution, coverage_outliers,
    coverage_summary, undefined_ratios,
)
from ehr_eda.analytics.demographics import (
    age_distribution, age_summary, category_counts, expense_coverage_by_group,
    expense_coverage_summary, race_ethnicity_crosstab,
)
from ehr_eda.analytics.frequency import (
    description_overview, frequency_by_table, frequency_scatter, top_descriptions,
)
from ehr_eda.analytics.utilization import (
    encounter_class_summary, observation_value_summary, referential_integrity, table_overview,
)
from ehr_eda.excel.formatters import ratio_highlight
from ehr_eda.excel.writer import ExcelWriter
from ehr_eda.excel.styles import SECTION_FONT


FREQUENCY_COLS = [
    ("rank", "number", "Rank"),
    (DESCRIPTION_COL, "text", "Description"),
    ("patients", "number", "Patients"),
    ("pct_of_patients", "percent", "% of Patients"),
]

COVERAGE_SUMMARY_COLS = [
    ("rank", "number", "Rank"),
    (DESCRIPTION_COL, "text", "Care Plan"),
    ("patients", "number", "Patients"),
    ("mean_ratio", "ratio", "Mean Ratio"),
    ("median_ratio", "ratio", "Median Ratio"),
    ("q1_ratio", "ratio", "Q1"),
    ("q3_ratio", "ratio", "Q3"),
    ("min_ratio", "ratio", "Min"),
    ("max_ratio", "ratio", "Max"),
    ("outliers", "number", "Ratio > 1"),
    ("undefined", "number", "Undefined"),
]

COVERAGE_OBS_COLS = [
    ("PATIENT", "text", "Patient"),
    (DESCRIPTION_COL, "text", "Care Plan"),
    ("rank", "number", "Plan Rank"),
    ("encounters", "number", "Encounters"),
    ("TOTAL_CLAIM_COST", "currency", "Total Claim Cost"),
    ("PAYER_COVERAGE", "currency", "Payer Coverage"),
    ("coverage_ratio", "ratio", "Coverage Ratio"),
]

GROUP_COVERAGE_COLS = [
    ("name", "text", "Group"),
    ("patients", "number", "Patients"),
    ("total_expenses", "currency", "Lifetime Expenses"),
    ("total_coverage", "currency", "Lifetime Coverage"),
    ("coverage_ratio", "ratio", "Coverage Ratio"),
    ("median_ratio", "ratio", "Median Patient Ratio"),
    ("mean_expenses", "mean_currency", "Mean Expenses"),
]

# Sheet label per description table
_TABLE_SHEETS = {
    "conditions": "Conditions",
    "medications": "Medications",
    "procedures": "Procedures",
    "careplans": "Care Plans",
    "observations": "Observations",
    "encounters": "Encounter Types",
}


def analyse(store: DataStore, top_n: int = TOP_N, seed: int | None = TIEBREAK_SEED) -> dict:
    """Run every analysis once; frames stay DataFrames for the Excel path.

    Pass the result to both generate_json and generate_excel so they share one
    tie-break draw.
    """
    patients = store.patients
    freqs = frequency_by_table(store.description_tables(), seed=seed)
    coverage = careplan_cost_coverage(
        store.careplans, store.encounters, top_n=top_n, freq=freqs[TableName.CAREPLANS.value],
    )

    return {
        "date_range": store.date_range(),
        "age_summary": age_summary(patients),
        "age_distribution": age_distribution(patients),
        "age_by_gender": age_distribution(patients, by="GENDER"),
        "gender": category_counts(patients, "GENDER"),
        "race": category_counts(patients, "RACE"),
        "ethnicity": category_counts(patients, "ETHNICITY"),
        "race_ethnicity": race_ethnicity_crosstab(patients),
        "race_ethnicity_pct": race_ethnicity_crosstab(patients, normalize=True),
        "expense_coverage": expense_coverage_summary(patients),
        "expense_coverage_by_race": expense_coverage_by_group(patients, "RACE"),
        "expense_coverage_by_age_group": expense_coverage_by_group(patients, "AGE_GROUP"),
        "patient_coverage_outliers": coverage_outliers(patients, "COVERAGE_RATIO"),
        "frequencies": freqs,
        "description_overview": description_overview(store.description_tables(), freqs=freqs),
        "careplan_coverage": coverage,
        "careplan_coverage_summary": coverage_summary(coverage),
        "careplan_coverage_outliers": coverage_outliers(coverage),
        "careplan_coverage_undefined": undefined_ratios(coverage),
        "table_overview": table_overview(store.tables),
        "encounter_classes": encounter_class_summary(store.encounters),
        "observation_values": observation_value_summary(store.observations, n=top_n),
        "referential_integrity": referential_integrity(store.tables),
    }


def _crosstab_records(table: pd.DataFrame) -> dict:
    """{row_label: {column_label: value}} for a crosstab."""
    return {str(r): {str(c): v for c, v in row.items()} for r, row in table.iterrows()}


def generate_json(
    store: DataStore,
    top_n: int = TOP_N,
    seed: int | None = TIEBREAK_SEED,
    analysis: dict | None = None,
) -> dict:
    a = analysis if analysis is not None else analyse(store, top_n, seed)
    freqs = a["frequencies"]

    outlier_cols = ["Id", "AGE", "RACE", "HEALTHCARE_EXPENSES", "HEALTHCARE_COVERAGE", "COVERAGE_RATIO"]
    patient_outliers = a["patient_coverage_outliers"]
    patient_outliers = patient_outliers[[c for c in outlier_cols if c in patient_outliers.columns]]

    return sanitize_for_json({
        "date_range": a["date_range"],
        "demographics": {
            "age_summary": a["age_summary"],
            "age_distribution": a["age_distribution"].to_dict("records"),
            "age_by_gender": a["age_by_gender"].to_dict("records"),
            "gender": a["gender"].to_dict("records"),
            "race": a["race"].to_dict("records"),
            "ethnicity": a["ethnicity"].to_dict("records"),
            "race_ethnicity": _crosstab_records(a["race_ethnicity"]),
            "race_ethnicity_pct": _crosstab_records(a["race_ethnicity_pct"]),
        },
        "expense_coverage": {
            "summary": a["expense_coverage"],
            "by_race": fillna_numeric(a["expense_coverage_by_race"]).to_dict("records"),
            "by_age_group": fillna_numeric(a["expense_coverage_by_age_group"]).to_dict("records"),
            "outliers": patient_outliers.to_dict("records"),
        },
        "descriptions": {
            "overview": a["description_overview"].to_dict("records"),
            "frequency": {name: f.head(top_n).to_dict("records") for name, f in freqs.items()},
            "scatter": {name: frequency_scatter(f) for name, f in freqs.items()},
            "top": {name: top_descriptions(f, top_n) for name, f in freqs.items()},
        },
        "careplan_coverage": {
            "summary": a["careplan_coverage_summary"].to_dict("records"),
            "observations": coverage_distribution(a["careplan_coverage"]),
            "outliers": a["careplan_coverage_outliers"].to_dict("records"),
            "undefined": a["careplan_coverage_undefined"].to_dict("records"),
        },
        "utilization": {
            "tables": a["table_overview"].to_dict("records"),
            "encounter_classes": a["encounter_classes"].to_dict("records"),
            "observation_values": a["observation_values"].to_dict("records"),
            "referential_integrity": a["referential_integrity"].to_dict("records"),
        },
    })


def generate_excel(
    store: DataStore,
    output_path: str | Path,
    top_n: int = TOP_N,
    seed: int | None = TIEBREAK_SEED,
    max_rows: int = 50,
    analysis: dict | None = None,
) -> Path:
    a = analysis if analysis is not None else analyse(store, top_n, seed)
    ages = a["age_summary"]
    cov = a["expense_coverage"]
    dr = a["date_range"]
    ew = ExcelWriter()

    # Overview
    ws = ew.add_sheet("Overview")
    ew.write_title(ws, "SYNTHETIC EHR",
                   f"Exploratory Data Analysis  |  Encounters {dr}  |  Generated {pd.Timestamp.now():%B %d, %Y}")

    row = ew.write_section(ws, 5, "PATIENTS")
    row = ew.write_kpi_row(ws, row, [
        (ages["patients"], "PATIENTS", "number"),
        (ages["living"], "LIVING", "number"),
        (ages["deceased"], "DECEASED", "number"),
        (ages["mean_age"], "MEAN AGE", "decimal"),
    ])

    row = ew.write_section(ws, row, "LIFETIME EXPENSE COVERAGE")
    row = ew.write_kpi_row(ws, row, [
        (cov["total_expenses"], "LIFETIME EXPENSES", "currency"),
        (cov["total_coverage"], "PAYER COVERAGE", "currency"),
        (cov["coverage_ratio"], "COVERAGE RATIO", "ratio"),
        (cov["patients_over_threshold"], f"PATIENTS RATIO > {COVERAGE_OUTLIER_THRESHOLD:g}", "number"),
    ])

    row = ew.write_section(ws, row, "TABLES")
    row = ew.write_table(ws, row, [
        ("table", "text", "Table"),
        ("rows", "number", "Rows"),
        ("columns", "number", "Columns"),
        ("patients", "number", "Patients"),
        ("earliest", "text", "Earliest"),
        ("latest", "text", "Latest"),
    ], a["table_overview"], freeze=False)
    ew.write_legend(ws, row + 1, TABLE_LEGEND)

    # Demographics
    ws_d = ew.add_sheet("Demographics")
    ws_d.cell(row=1, column=1).value = "Age Distribution"
    ws_d.cell(row=1, column=1).font = SECTION_FONT
    row = ew.write_table(ws_d, 3, [
        ("age_group", "text", "Age Group"),
        ("patients", "number", "Patients"),
        ("pct", "percent", "% of Patients"),
    ], a["age_distribution"], show_total=True, freeze=False)

    for title, key, label in [("Gender", "gender", "gender"), ("Race", "race", "race"),
                              ("Ethnicity", "ethnicity", "ethnicity")]:
        ws_d.cell(row=row + 1, column=1).value = title
        ws_d.cell(row=row + 1, column=1).font = SECTION_FONT
        row = ew.write_table(ws_d, row + 3, [
            (label, "text", title),
            ("patients", "number", "Patients"),
            ("pct", "percent", "% of Patients"),
        ], a[key], freeze=False)

    ws_ag = ew.add_sheet("Age by Gender")
    ew.write_frame(ws_ag, 1, a["age_by_gender"].set_index("age_group"), "Age Group")

    # Race x Ethnicity
    ws_re = ew.add_sheet("Race x Ethnicity")
    ws_re.cell(row=1, column=1).value = "Patients by Race and Ethnicity"
    ws_re.cell(row=1, column=1).font = SECTION_FONT
    row = ew.write_frame(ws_re, 3, a["race_ethnicity"], "Race")
    ws_re.cell(row=row + 1, column=1).value = "Row Percentages"
    ws_re.cell(row=row + 1, column=1).font = SECTION_FONT
    ew.write_frame(ws_re, row + 3, a["race_ethnicity_pct"], "Race", value_type="percent")

    # Expense coverage
    ws_e = ew.add_sheet("Expense Coverage")
    row = ew.write_insight(
        ws_e, 1, "LIFETIME COVERAGE RATIO:",
        f"Payers covered {cov['coverage_ratio']:.3f} per dollar of lifetime healthcare expenses; "
        f"{cov['patients_over_threshold']:,} patients exceed {COVERAGE_OUTLIER_THRESHOLD:g} and "
        f"{cov['patients_undefined_ratio']:,} have no defined ratio.",
    )
    row = ew.write_section(ws_e, row, "BY RACE")
    row = ew.write_table(ws_e, row, GROUP_COVERAGE_COLS, a["expense_coverage_by_race"],
                         highlight_fn=lambda i, r: ratio_highlight(r["coverage_ratio"]),
                         show_total=True, freeze=False)
    row = ew.write_section(ws_e, row + 1, "BY AGE GROUP")
    ew.write_table(ws_e, row, GROUP_COVERAGE_COLS, a["expense_coverage_by_age_group"],
                   show_total=True, freeze=False)

    # Description frequency, one sheet per table
    ws_o = ew.add_sheet("Description Overview")
    ew.write_table(ws_o, 1, [
        ("table", "text", "Table"),
        ("rows", "number", "Rows"),
        ("patients", "number", "Patients"),
        ("descriptions", "number", "Descriptions"),
        ("singleton_descriptions", "number", "Single-Patient Descriptions"),
        ("top_description", "text", "Most Common"),
        ("top_description_patients", "number", "Patients"),
    ], a["description_overview"])

    for name, freq in a["frequencies"].items():
        ws_f = ew.add_sheet(_TABLE_SHEETS.get(name, name.title()))
        ws_f.cell(row=1, column=1).value = f"Top {min(max_rows, len(freq))} of {len(freq):,} {name} descriptions by distinct patients"
        ws_f.cell(row=1, column=1).font = SECTION_FONT
        ew.write_table(ws_f, 3, FREQUENCY_COLS, freq.head(max_rows),
                       highlight_fn=lambda i, r: "top" if i < top_n else None)

    # Care plan coverage
    ws_c = ew.add_sheet("Care Plan Coverage")
    ws_c.cell(row=1, column=1).value = f"Payer Coverage Ratio for the Top {top_n} Care Plans"
    ws_c.cell(row=1, column=1).font = SECTION_FONT
    ew.write_table(ws_c, 3, COVERAGE_SUMMARY_COLS, a["careplan_coverage_summary"],
                   highlight_fn=lambda i, r: "outlier" if r.get("outliers") else None)

    ws_co = ew.add_sheet("Coverage Outliers")
    ws_co.cell(row=1, column=1).value = f"Care plan observations with coverage ratio > {COVERAGE_OUTLIER_THRESHOLD:g}"
    ws_co.cell(row=1, column=1).font = SECTION_FONT
    row = ew.write_table(ws_co, 3, COVERAGE_OBS_COLS, a["careplan_coverage_outliers"],
                         highlight_fn=lambda i, r: ratio_highlight(r["coverage_ratio"]), freeze=False)
    ws_co.cell(row=row + 1, column=1).value = "Undefined ratios (zero or missing claim cost)"
    ws_co.cell(row=row + 1, column=1).font = SECTION_FONT
    ew.write_table(ws_co, row + 3, COVERAGE_OBS_COLS, a["careplan_coverage_undefined"],
                   highlight_fn=lambda i, r: "undefined", freeze=False)

    # Utilisation and data quality
    ws_u = ew.add_sheet("Encounter Classes")
    ew.write_table(ws_u, 1, [
        ("name", "text", "Encounter Class"),
        ("encounters", "number", "Encounters"),
        ("patients", "number", "Patients"),
        ("total_claim_cost", "currency", "Total Claim Cost"),
        ("payer_coverage", "currency", "Payer Coverage"),
        ("coverage_ratio", "ratio", "Coverage Ratio"),
        ("mean_claim_cost", "mean_currency", "Mean Claim Cost"),
    ], a["encounter_classes"], show_total=True)

    ws_ov = ew.add_sheet("Observation Values")
    ew.write_table(ws_ov, 1, [
        ("description", "text", "Observation"),
        ("units", "text", "Units"),
        ("count", "number", "Values"),
        ("mean", "decimal", "Mean"),
        ("median", "decimal", "Median"),
        ("min", "decimal", "Min"),
        ("max", "decimal", "Max"),
    ], a["observation_values"])

    ws_q = ew.add_sheet("Data Quality")
    ew.write_table(ws_q, 1, [
        ("table", "text", "Table"),
        ("rows", "number", "Rows"),
        ("orphan_patient_rows", "number", "Unknown PATIENT"),
        ("orphan_encounter_rows", "number", "Unknown ENCOUNTER"),
    ], a["referential_integrity"],
        highlight_fn=lambda i, r: "quality" if r["orphan_patient_rows"] or r["orphan_encounter_rows"] else None)

    return ew.save(output_path)
