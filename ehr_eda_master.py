#!/usr/bin/env python3
"""
================================================================================
SYNTHETIC EHR - EXPLORATORY DATA ANALYSIS
================================================================================
Descriptive statistics over a Synthea CSV export.

TABLES READ (from EHR_EDA_DATA_DIR):
  patients, encounters, conditions, medications, procedures, careplans, observations

OUTPUT:
  reports/<timestamp>/EHR_EDA_Report.xlsx  - demographics, description frequency,
                                             care-plan cost coverage, data quality
  Console summary of the headline figures

SETTINGS (environment):
  EHR_EDA_DATA_DIR   folder holding the CSVs
  EHR_EDA_AS_OF      ISO date living patients are aged at (default today)
  EHR_EDA_SEED       seed for the tie-break between equal counts

USAGE:
  python ehr_eda_master.py

================================================================================
"""
import warnings
from datetime import datetime

from ehr_eda.config import COVERAGE_OUTLIER_THRESHOLD, DATA_FOLDER, REPORTS_FOLDER, TIEBREAK_SEED, TOP_N
from ehr_eda.data.store import DataStore
from ehr_eda.reports.eda_report import analyse, generate_excel, generate_json

warnings.filterwarnings("ignore")


def main():
    print("\n" + "=" * 70)
    print("  SYNTHETIC EHR - EXPLORATORY DATA ANALYSIS")
    print("=" * 70)
    print(f"  Started: {datetime.now():%Y-%m-%d %H:%M:%S}")
    print(f"\n  Data folder: {DATA_FOLDER}\n")

    store = DataStore().load(DATA_FOLDER)
    analysis = analyse(store, top_n=TOP_N, seed=TIEBREAK_SEED)
    data = generate_json(store, top_n=TOP_N, analysis=analysis)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = REPORTS_FOLDER / timestamp / "EHR_EDA_Report.xlsx"

    print("\nGenerating report...")
    generate_excel(store, output_path, top_n=TOP_N, analysis=analysis)
    print(f"  {output_path.name}")

    ages = data["demographics"]["age_summary"]
    cov = data["expense_coverage"]["summary"]

    print("\n" + "=" * 70)
    print("  SUMMARY")
    print("=" * 70)
    print(f"\n  Encounters: {data['date_range']}")

    print("\n  PATIENTS")
    print(f"     Total:        {ages['patients']:,} ({ages['deceased']:,} deceased)")
    print(f"     Age:          mean {ages['mean_age']}, median {ages['median_age']}, "
          f"range {ages['min_age']}-{ages['max_age']}")

    print("\n  LIFETIME EXPENSE COVERAGE")
    print(f"     Expenses:     ${cov['total_expenses']:,.2f}")
    print(f"     Coverage:     ${cov['total_coverage']:,.2f} (ratio {cov['coverage_ratio']:.3f})")
    print(f"     Ratio > {COVERAGE_OUTLIER_THRESHOLD:g}:    {cov['patients_over_threshold']:,} patients")

    print(f"\n  MOST COMMON DESCRIPTIONS (distinct patients)")
    for table, rows in data["descriptions"]["frequency"].items():
        if rows:
            print(f"     {table:<13} {rows[0]['DESCRIPTION'][:45]:<47}{rows[0]['patients']:>8,}")

    print(f"\n  TOP {TOP_N} CARE PLAN COVERAGE")
    for row in data["careplan_coverage"]["summary"]:
        print(f"     {row['rank']:>2}. {row['DESCRIPTION'][:45]:<47}median {row['median_ratio']:.3f}"
              f"  ({row['outliers']} > {COVERAGE_OUTLIER_THRESHOLD:g})")

    print("\n" + "=" * 70)
    print("  COMPLETE")
    print(f"  Report saved to: {output_path}")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
