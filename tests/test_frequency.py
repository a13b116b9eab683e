"""Tests for description frequency ranking."""

import pandas as pd
import pytest

from ehr_eda.analytics.frequency import (
    description_frequency,
    description_overview,
    frequency_by_table,
    frequency_scatter,
    top_descriptions,
)
from ehr_eda.data.schemas import DESCRIPTION_TABLES

TIED = {"Physical therapy", "Wound care"}


class TestDescriptionFrequency:
    def test_counts_distinct_patients(self, store) -> None:
        freq = description_frequency(store.conditions, seed=1).set_index("DESCRIPTION")
        # p2 has Hypertension twice
        assert freq.loc["Hypertension", "patients"] == 3
        assert freq.loc["Asthma", "patients"] == 2
        assert freq.loc["Fracture of ankle", "patients"] == 1

    @pytest.mark.parametrize("table", DESCRIPTION_TABLES)
    def test_counts_sum_to_distinct_pairs(self, store, table) -> None:
        df = store.table(table)
        freq = description_frequency(df, seed=1)
        pairs = df[["PATIENT", "DESCRIPTION"]].dropna().drop_duplicates()
        assert freq["patients"].sum() == len(pairs)

    def test_ranks_are_contiguous_and_sorted(self, careplans) -> None:
        freq = description_frequency(careplans, seed=3)
        assert freq["rank"].tolist() == [1, 2, 3, 4]
        assert freq["patients"].is_monotonic_decreasing
        assert list(freq.columns) == ["DESCRIPTION", "patients", "pct_of_patients", "rank"]

    def test_singletons_are_kept(self, careplans) -> None:
        freq = description_frequency(careplans, seed=3)
        assert set(freq.loc[freq["patients"] == 1, "DESCRIPTION"]) == TIED

    def test_seed_makes_ties_reproducible(self, careplans) -> None:
        a = description_frequency(careplans, seed=42)
        b = description_frequency(careplans, seed=42)
        pd.testing.assert_frame_equal(a, b)

    def test_tied_order_varies_between_seeds(self, careplans) -> None:
        third = {
            description_frequency(careplans, seed=s)["DESCRIPTION"].iloc[2]
            for s in range(50)
        }
        assert third == TIED

    def test_untied_order_is_fixed(self, careplans) -> None:
        for s in range(10):
            top = description_frequency(careplans, seed=s)["DESCRIPTION"].tolist()[:2]
            assert top == ["Respiratory therapy", "Diabetes care plan"]

    def test_pct_of_patients(self, store) -> None:
        freq = description_frequency(store.conditions, seed=1).set_index("DESCRIPTION")
        # five distinct patients in conditions, including the orphan p9
        assert freq.loc["Hypertension", "pct_of_patients"] == 60.0

    def test_null_labels_are_excluded(self) -> None:
        df = pd.DataFrame({
            "PATIENT": ["a", "b", None, "c"],
            "DESCRIPTION": ["x", None, "x", "x"],
        })
        freq = description_frequency(df, seed=0)
        assert freq["DESCRIPTION"].tolist() == ["x"]
        assert freq["patients"].tolist() == [2]

    def test_empty_table(self) -> None:
        df = pd.DataFrame({"PATIENT": [], "DESCRIPTION": []})
        freq = description_frequency(df, seed=0)
        assert freq.empty
        assert "rank" in freq.columns


class TestChartRecords:
    def test_scatter_points(self, careplans) -> None:
        points = frequency_scatter(description_frequency(careplans, seed=0))
        assert points[0] == {"rank": 1, "patients": 4, "description": "Respiratory therapy"}
        assert [p["rank"] for p in points] == [1, 2, 3, 4]

    def test_top_descriptions(self, careplans) -> None:
        freq = description_frequency(careplans, seed=0)
        assert top_descriptions(freq, 2) == ["Respiratory therapy", "Diabetes care plan"]
        assert len(top_descriptions(freq, 10)) == 4


class TestOverview:
    def test_only_description_tables(self, store) -> None:
        freqs = frequency_by_table(store.tables, seed=0)
        assert "patients" not in freqs
        assert set(freqs) == set(store.description_tables())

    def test_overview_row(self, store) -> None:
        overview = description_overview(store.tables, seed=0).set_index("table")
        row = overview.loc["conditions"]
        assert row["rows"] == 7
        assert row["patients"] == 5
        assert row["descriptions"] == 3
        assert row["singleton_descriptions"] == 1
        assert row["top_description"] == "Hypertension"
        assert row["top_description_patients"] == 3

    def test_encounter_descriptions(self, store) -> None:
        overview = description_overview(store.tables, seed=0).set_index("table")
        assert overview.loc["encounters", "top_description"] == "Encounter for symptom"
        assert overview.loc["encounters", "top_description_patients"] == 3

    def test_overview_reuses_given_ranking(self, store) -> None:
        freqs = frequency_by_table(store.description_tables(), seed=None)
        overview = description_overview(store.description_tables(), freqs=freqs).set_index("table")
        assert overview.loc["careplans", "top_description"] == freqs["careplans"]["DESCRIPTION"].iloc[0]
        assert overview.loc["careplans", "descriptions"] == len(freqs["careplans"])
