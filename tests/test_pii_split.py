"""
Tests for splitting a dataset into PII and non-PII frames.
"""

import uuid
from unittest.mock import MagicMock

import pytest
import pandas as pd

from piisplit.exceptions import InvalidInput, JoinKeyError
from piisplit.services.pii_detector import check_pii
from piisplit.services.pii_report import FlaggedReport
from piisplit.services.pii_split import generate_join_keys, split_pii_data


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def pii_df():
    return pd.DataFrame({
        "lat": [40.7128, 34.0522, 41.8781],
        "long": [-74.0060, -118.2437, -87.6298],
        "first_name": ["John", "Michael", "Linda"],
        "phone": ["123-456-7890", "234-567-8901", "345-678-9012"],
        "age": [35, 45, 55],
        "email": ["test@example.com", "contact@domain.com", "user@website.org"],
        "disabled": ["No", "Yes", "No"],
    })


def sequential_keys(n):
    return [f"key-{i}" for i in range(n)]


# ============================================================================
# COLUMN SELECTION
# ============================================================================

class TestColumnSelection:
    def test_pii_columns_in_dataset_order(self, pii_df):
        result = split_pii_data(pii_df)
        assert result.pii_columns == ["lat", "long", "first_name", "phone", "age", "email"]
        assert list(result.pii_data.columns) == [
            "lat", "long", "first_name", "phone", "age", "email", "join_key",
        ]
        assert list(result.non_pii_data.columns) == ["disabled", "join_key"]

    def test_pair_members_are_pii(self):
        df = pd.DataFrame({
            "lat": [40.7128, 34.0522],
            "lon": [-74.0060, -118.2437],
            "amount": [5000, 7000],
        })
        result = split_pii_data(df)
        assert result.pii_columns == ["lat", "lon"]
        assert list(result.non_pii_data.columns) == ["amount", "join_key"]

    def test_exclude_flagged_column(self, pii_df):
        result = split_pii_data(pii_df, exclude_columns={"phone"})
        assert "phone" not in result.pii_data.columns
        assert "phone" in result.non_pii_data.columns
        assert result.excluded_columns == ["phone"]

    def test_exclude_single_string(self, pii_df):
        result = split_pii_data(pii_df, exclude_columns="phone")
        assert "phone" in result.non_pii_data.columns

    def test_exclude_column_only_in_pair(self, pii_df):
        result = split_pii_data(pii_df, exclude_columns=["long"])
        assert "long" in result.non_pii_data.columns
        assert "lat" in result.pii_data.columns

    @pytest.mark.parametrize("exclude", [{"phone"}, {"lat", "email"}, {"disabled"}, set()])
    def test_exclusion_is_set_difference(self, pii_df, exclude):
        baseline = set(split_pii_data(pii_df).pii_columns)
        result = split_pii_data(pii_df, exclude_columns=exclude)
        assert set(result.pii_columns) == baseline - exclude

    def test_partition_is_complete(self, pii_df):
        result = split_pii_data(pii_df)
        pii_cols = set(result.pii_data.columns)
        non_pii_cols = set(result.non_pii_data.columns)
        assert pii_cols | non_pii_cols >= set(pii_df.columns)
        assert pii_cols & non_pii_cols == {"join_key"}

    def test_nothing_flagged(self):
        df = pd.DataFrame({"amount": [5000, 7000]})
        result = split_pii_data(df)
        assert list(result.pii_data.columns) == ["join_key"]
        assert len(result.pii_data) == 2
        assert list(result.non_pii_data.columns) == ["amount", "join_key"]

    def test_excluding_everything_matches_nothing_flagged(self):
        df = pd.DataFrame({"phone": ["123-456-7890", "234-567-8901"], "amount": [5000, 7000]})
        result = split_pii_data(df, exclude_columns=["phone"])
        assert result.pii_columns == []
        assert list(result.pii_data.columns) == ["join_key"]
        assert list(result.non_pii_data.columns) == ["phone", "amount", "join_key"]


# ============================================================================
# ROW ALIGNMENT AND JOIN KEYS
# ============================================================================

class TestRowAlignment:
    def test_keys_align(self, pii_df):
        result = split_pii_data(pii_df)
        assert result.pii_data["join_key"].tolist() == result.non_pii_data["join_key"].tolist()

    def test_rows_trace_back_to_source(self, pii_df):
        result = split_pii_data(pii_df, key_generator=sequential_keys)
        assert result.pii_data["join_key"].tolist() == ["key-0", "key-1", "key-2"]
        assert result.pii_data["phone"].tolist() == pii_df["phone"].tolist()
        assert result.non_pii_data["disabled"].tolist() == pii_df["disabled"].tolist()

    def test_index_preserved(self):
        df = pd.DataFrame({"phone": ["123-456-7890", "234-567-8901"], "amount": [5000, 7000]}, index=[10, 3])
        result = split_pii_data(df)
        assert list(result.pii_data.index) == [10, 3]
        assert list(result.non_pii_data.index) == [10, 3]

    def test_relink(self, pii_df):
        result = split_pii_data(pii_df)
        merged = result.non_pii_data.merge(result.pii_data, on="join_key")
        assert merged["first_name"].tolist() == ["John", "Michael", "Linda"]
        assert merged["disabled"].tolist() == ["No", "Yes", "No"]

    def test_default_keys_are_uuid4(self):
        keys = generate_join_keys(5)
        assert len(set(keys)) == 5
        assert all(uuid.UUID(key).version == 4 for key in keys)

    def test_fresh_keys_each_run(self, pii_df):
        first = split_pii_data(pii_df).pii_data["join_key"].tolist()
        second = split_pii_data(pii_df).pii_data["join_key"].tolist()
        assert set(first).isdisjoint(second)

    def test_custom_join_key_name(self, pii_df):
        result = split_pii_data(pii_df, join_key="row_link")
        assert result.join_key == "row_link"
        assert "row_link" in result.pii_data.columns

    def test_zero_rows(self):
        df = pd.DataFrame({"phone": pd.Series([], dtype=object), "amount": pd.Series([], dtype=float)})
        result = split_pii_data(df)
        assert list(result.pii_data.columns) == ["phone", "join_key"]
        assert len(result.pii_data) == 0
        assert len(result.non_pii_data) == 0

    def test_input_not_modified(self, pii_df):
        before = pii_df.copy()
        split_pii_data(pii_df)
        pd.testing.assert_frame_equal(pii_df, before)


# ============================================================================
# ERRORS
# ============================================================================

class TestSplitErrors:
    def test_unknown_exclusion(self, pii_df):
        with pytest.raises(InvalidInput, match="phnoe"):
            split_pii_data(pii_df, exclude_columns=["phnoe"])

    def test_join_key_collision(self):
        df = pd.DataFrame({"join_key": ["a", "b"], "phone": ["123-456-7890", "234-567-8901"]})
        with pytest.raises(InvalidInput):
            split_pii_data(df)

    def test_generator_wrong_count(self, pii_df):
        with pytest.raises(JoinKeyError):
            split_pii_data(pii_df, key_generator=lambda n: ["only-one"])

    def test_generator_duplicates(self, pii_df):
        with pytest.raises(JoinKeyError):
            split_pii_data(pii_df, key_generator=lambda n: ["same"] * n)


# ============================================================================
# PRECOMPUTED REPORT
# ============================================================================

class TestPrecomputedReport:
    def test_report_skips_detection(self, pii_df):
        report = check_pii(pii_df)
        detector = MagicMock()
        result = split_pii_data(pii_df, detector=detector, report=report)
        detector.detect.assert_not_called()
        assert result.report is report
        assert result.pii_columns == ["lat", "long", "first_name", "phone", "age", "email"]

    def test_detector_used_without_report(self, pii_df):
        detector = MagicMock()
        detector.detect.return_value = FlaggedReport()
        result = split_pii_data(pii_df, detector=detector)
        detector.detect.assert_called_once_with(pii_df)
        assert result.pii_columns == []
