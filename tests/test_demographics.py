"""Tests for patient demographics and lifetime expense coverage."""

import pytest

from ehr_eda.analytics.demographics import (
    age_distribution,
    age_summary,
    category_counts,
    expense_coverage_by_group,
    expense_coverage_summary,
    race_ethnicity_crosstab,
)
from ehr_eda.config import AGE_LABELS


def test_age_summary(patients) -> None:
    s = age_summary(patients)
    assert s["patients"] == 5
    assert s["living"] == 4
    assert s["deceased"] == 1
    assert s["mean_age"] == 36.8
    assert s["median_age"] == 33.0
    assert (s["min_age"], s["max_age"]) == (14, 70)


class TestAgeDistribution:
    def test_every_group_present(self, patients) -> None:
        dist = age_distribution(patients)
        assert dist["age_group"].tolist() == AGE_LABELS
        assert dist["patients"].tolist() == [1, 2, 1, 0, 1, 0]
        assert dist["patients"].sum() == len(patients)

    def test_percentages(self, patients) -> None:
        dist = age_distribution(patients).set_index("age_group")
        assert dist.loc["18-34", "pct"] == 40.0
        assert dist.loc["80+", "pct"] == 0.0

    def test_by_gender(self, patients) -> None:
        dist = age_distribution(patients, by="GENDER").set_index("age_group")
        assert list(dist.index) == AGE_LABELS
        assert dist.loc["18-34", "F"] == 2
        assert dist.loc["18-34", "M"] == 0
        assert dist.loc["0-17", "M"] == 1
        assert dist["total"].sum() == 5


class TestCategoryCounts:
    def test_race(self, patients) -> None:
        counts = category_counts(patients, "RACE").set_index("race")
        assert counts["patients"].to_dict() == {"white": 3, "black": 1, "asian": 1}
        assert counts.loc["white", "pct"] == 60.0

    def test_missing_values_are_unknown(self, patients) -> None:
        counts = category_counts(patients, "MARITAL").set_index("marital")
        assert counts.loc["unknown", "patients"] == 1


class TestRaceEthnicity:
    def test_counts_with_margins(self, patients) -> None:
        table = race_ethnicity_crosstab(patients)
        assert table.loc["white", "hispanic"] == 1
        assert table.loc["white", "nonhispanic"] == 2
        assert table.loc["Total", "nonhispanic"] == 4
        assert table.loc["Total", "Total"] == 5

    def test_row_percentages(self, patients) -> None:
        table = race_ethnicity_crosstab(patients, normalize=True)
        assert table.loc["white", "hispanic"] == 33.3
        assert table.loc["white", "nonhispanic"] == 66.7
        assert table.loc["asian", "nonhispanic"] == 100.0


class TestExpenseCoverage:
    def test_summary(self, patients) -> None:
        s = expense_coverage_summary(patients)
        assert s["total_expenses"] == 8000.0
        assert s["total_coverage"] == 4600.0
        assert s["coverage_ratio"] == 0.575
        assert s["mean_expenses"] == 1600.0
        # finite ratios 0.5, 1.5, 0.25, 0.0
        assert s["median_patient_ratio"] == 0.375
        assert s["patients_over_threshold"] == 1
        assert s["patients_undefined_ratio"] == 1

    def test_by_race(self, patients) -> None:
        g = expense_coverage_by_group(patients, "RACE").set_index("name")
        assert g.loc["white", "patients"] == 3
        assert g.loc["white", "total_expenses"] == 2000.0
        assert g.loc["white", "coverage_ratio"] == pytest.approx(0.3)
        # p3's infinite ratio is left out of the median
        assert g.loc["white", "median_ratio"] == pytest.approx(0.25)
        assert g.loc["black", "coverage_ratio"] == pytest.approx(1.5)

    def test_by_age_group_sorted_by_expenses(self, patients) -> None:
        g = expense_coverage_by_group(patients, "AGE_GROUP")
        assert g["name"].astype(str).iloc[0] == "18-34"
        assert g["total_expenses"].iloc[0] == 5000.0
