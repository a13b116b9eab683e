"""Pytest fixtures: a small Synthea-layout CSV export written to a temp folder."""

import datetime as dt

import pandas as pd
import pytest

from ehr_eda.data.store import DataStore

AS_OF = dt.date(2024, 6, 30)


def _ts(day: str, minutes: int = 0) -> str:
    return (pd.Timestamp(f"{day}T09:00:00Z") + pd.Timedelta(minutes=minutes)).strftime("%Y-%m-%dT%H:%M:%SZ")


PATIENTS = pd.DataFrame([
    # Id, BIRTHDATE, DEATHDATE, RACE, ETHNICITY, GENDER, MARITAL, HEALTHCARE_EXPENSES, HEALTHCARE_COVERAGE
    ["p1", "1980-06-15", "", "white", "nonhispanic", "F", "M", 1000.0, 500.0],
    ["p2", "1950-01-01", "2020-12-31", "black", "nonhispanic", "M", "M", 2000.0, 3000.0],
    ["p3", "2010-03-10", "", "white", "hispanic", "M", "", 0.0, 100.0],
    ["p4", "1990-12-31", "", "asian", "nonhispanic", "F", "S", 4000.0, 1000.0],
    ["p5", "2000-07-01", "", "white", "nonhispanic", "F", "S", 1000.0, 0.0],
], columns=["Id", "BIRTHDATE", "DEATHDATE", "RACE", "ETHNICITY", "GENDER", "MARITAL",
            "HEALTHCARE_EXPENSES", "HEALTHCARE_COVERAGE"])

ENCOUNTERS = pd.DataFrame([
    # Id, START, STOP, PATIENT, ENCOUNTERCLASS, DESCRIPTION, TOTAL_CLAIM_COST, PAYER_COVERAGE
    ["e1", _ts("2019-02-17"), _ts("2019-02-17", 30), "p1", "ambulatory", "Encounter for symptom", 100.0, 80.0],
    ["e2", _ts("2019-05-01"), _ts("2019-05-01", 30), "p1", "wellness", "General examination", 200.0, 100.0],
    ["e3", _ts("2018-03-03"), _ts("2018-03-03", 30), "p2", "inpatient", "Hospital admission", 1000.0, 1200.0],
    ["e4", _ts("2020-07-07"), _ts("2020-07-07", 30), "p3", "ambulatory", "Encounter for symptom", 0.0, 0.0],
    ["e5", _ts("2021-01-20"), _ts("2021-01-20", 30), "p4", "ambulatory", "Encounter for symptom", 50.0, 25.0],
    ["e6", _ts("2022-11-11"), _ts("2022-11-11", 30), "p5", "emergency", "Emergency room admission", 300.0, 150.0],
], columns=["Id", "START", "STOP", "PATIENT", "ENCOUNTERCLASS", "DESCRIPTION",
            "TOTAL_CLAIM_COST", "PAYER_COVERAGE"])
ENCOUNTERS["BASE_ENCOUNTER_COST"] = 50.0

CAREPLANS = pd.DataFrame([
    # Id, START, PATIENT, ENCOUNTER, CODE, DESCRIPTION
    ["c1", "2019-02-17", "p1", "e1", 1, "Respiratory therapy"],
    ["c2", "2020-07-07", "p3", "e4", 1, "Respiratory therapy"],
    ["c3", "2021-01-20", "p4", "e5", 1, "Respiratory therapy"],
    # e1 belongs to p1, so this row has no (ENCOUNTER, PATIENT) match
    ["c4", "2019-02-17", "p5", "e1", 1, "Respiratory therapy"],
    ["c5", "2019-02-17", "p1", "e1", 2, "Diabetes care plan"],
    ["c6", "2019-05-01", "p1", "e2", 2, "Diabetes care plan"],
    ["c7", "2018-03-03", "p2", "e3", 2, "Diabetes care plan"],
    ["c8", "2022-11-11", "p5", "e6", 3, "Physical therapy"],
    ["c9", "2021-01-20", "p4", "e5", 4, "Wound care"],
], columns=["Id", "START", "PATIENT", "ENCOUNTER", "CODE", "DESCRIPTION"])
CAREPLANS["STOP"] = ""

CONDITIONS = pd.DataFrame([
    ["2019-02-17", "p1", "e1", 10, "Hypertension"],
    ["2018-03-03", "p2", "e3", 10, "Hypertension"],
    ["2018-03-04", "p2", "e3", 10, "Hypertension"],
    ["2021-01-20", "p4", "e5", 10, "Hypertension"],
    ["2020-07-07", "p3", "e4", 20, "Asthma"],
    ["2019-05-01", "p1", "e2", 20, "Asthma"],
    ["2022-11-11", "p9", "e6", 30, "Fracture of ankle"],
], columns=["START", "PATIENT", "ENCOUNTER", "CODE", "DESCRIPTION"])
CONDITIONS["STOP"] = ""

MEDICATIONS = pd.DataFrame([
    ["2019-02-17", "p1", "e1", 100, "Metformin 500 MG", 10.0, 8.0, 3, 30.0],
    ["2018-03-03", "p2", "e3", 100, "Metformin 500 MG", 10.0, 10.0, 1, 10.0],
    ["2020-07-07", "p3", "e4", 200, "Albuterol inhaler", 25.0, "unknown", 1, 25.0],
], columns=["START", "PATIENT", "ENCOUNTER", "CODE", "DESCRIPTION",
            "BASE_COST", "PAYER_COVERAGE", "DISPENSES", "TOTALCOST"])

PROCEDURES = pd.DataFrame([
    ["2020-07-07", "p3", "e4", 300, "Spirometry", 120.0],
    ["2021-01-20", "p4", "e5", 400, "Suture of wound", 80.0],
], columns=["DATE", "PATIENT", "ENCOUNTER", "CODE", "DESCRIPTION", "BASE_COST"])

OBSERVATIONS = pd.DataFrame([
    ["2019-02-17", "p1", "e1", "8302-2", "Body Height", "170", "cm", "numeric"],
    ["2018-03-03", "p2", "e3", "8302-2", "Body Height", "180", "cm", "numeric"],
    ["2020-07-07", "p3", "e4", "8302-2", "Body Height", "150", "cm", "numeric"],
    ["2019-02-17", "p1", "e1", "29463-7", "Body Weight", "70", "kg", "numeric"],
    ["2019-02-17", "p1", "e1", "72166-2", "Tobacco smoking status", "Never smoker", "", "text"],
], columns=["DATE", "PATIENT", "ENCOUNTER", "CODE", "DESCRIPTION", "VALUE", "UNITS", "TYPE"])

RAW_TABLES = {
    "patients": PATIENTS,
    "encounters": ENCOUNTERS,
    "conditions": CONDITIONS,
    "medications": MEDICATIONS,
    "procedures": PROCEDURES,
    "careplans": CAREPLANS,
    "observations": OBSERVATIONS,
}


@pytest.fixture
def data_dir(tmp_path):
    """Folder with one <table>.csv per Synthea table."""
    folder = tmp_path / "csv"
    folder.mkdir()
    for name, df in RAW_TABLES.items():
        df.to_csv(folder / f"{name}.csv", index=False)
    return folder


@pytest.fixture
def store(data_dir) -> DataStore:
    """Loaded store, living patients aged at AS_OF."""
    return DataStore().load(data_dir, as_of=AS_OF)


@pytest.fixture
def patients(store):
    return store.patients


@pytest.fixture
def encounters(store):
    return store.encounters


@pytest.fixture
def careplans(store):
    return store.careplans
