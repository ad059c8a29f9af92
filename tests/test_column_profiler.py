"""
Tests for the Column Statistics Profiler.

Covers per-column profiles, dataset-wide medians and the degenerate
cases (no text columns, all-missing columns, single row).
"""

import math

import pytest
import pandas as pd
import numpy as np

from piisplit.exceptions import ComputationDegenerate, InvalidInput
from piisplit.services.column_profiler import (
    DatasetStatistics,
    compute_dataset_statistics,
    is_numeric_column,
    is_temporal_column,
    is_text_column,
    profile_column,
    profile_dataset,
    uniqueness_ratio,
)


# ============================================================================
# COLUMN TYPE HELPERS
# ============================================================================

class TestColumnTypes:
    def test_integer_is_numeric(self):
        assert is_numeric_column(pd.Series([1, 2, 3])) is True

    def test_bool_is_not_numeric(self):
        assert is_numeric_column(pd.Series([True, False])) is False

    def test_bool_is_not_text(self):
        assert is_text_column(pd.Series([True, False])) is False

    def test_datetime_is_temporal(self):
        series = pd.Series(pd.to_datetime(["2024-01-01", "2024-02-01"]))
        assert is_temporal_column(series) is True
        assert is_numeric_column(series) is False

    def test_object_is_text(self):
        assert is_text_column(pd.Series(["a", "b"])) is True


# ============================================================================
# UNIQUENESS
# ============================================================================

class TestUniquenessRatio:
    def test_all_distinct(self):
        assert uniqueness_ratio(pd.Series(["a", "b", "c"])) == 1.0

    def test_missing_values_ignored(self):
        assert uniqueness_ratio(pd.Series(["a", "a", None, None])) == 0.5

    def test_all_missing_is_nan(self):
        assert math.isnan(uniqueness_ratio(pd.Series([np.nan, np.nan])))

    def test_nested_values_rejected(self):
        with pytest.raises(InvalidInput):
            uniqueness_ratio(pd.Series([[1, 2], [3]]))


# ============================================================================
# COLUMN PROFILE
# ============================================================================

class TestProfileColumn:
    def test_text_profile(self):
        profile = profile_column("notes", pd.Series(["ab", "", None]))
        assert profile.is_text is True
        assert profile.lengths == (2, 0)
        assert profile.non_missing_count == 2
        assert profile.uniqueness == 1.0

    def test_numeric_profile_has_no_lengths(self):
        profile = profile_column("amount", pd.Series([1.5, 2.5]))
        assert profile.is_numeric is True
        assert profile.lengths == ()

    def test_empty_profile(self):
        profile = profile_column("blank", pd.Series([None, None], dtype=object))
        assert profile.is_empty is True
        assert profile.lengths == ()


# ============================================================================
# DATASET STATISTICS
# ============================================================================

class TestDatasetStatistics:
    def test_medians(self):
        df = pd.DataFrame({
            "code": ["ab", "abcd", "abcdef"],
            "amount": [1, 1, 2],
        })
        stats = compute_dataset_statistics(profile_dataset(df))
        assert stats.median_string_length == 4.0
        assert stats.median_uniqueness == pytest.approx((1.0 + 2 / 3) / 2)

    def test_numeric_columns_do_not_count_towards_length(self):
        df = pd.DataFrame({
            "code": ["abc", "abc"],
            "amount": [123456789, 123456789],
        })
        stats = compute_dataset_statistics(profile_dataset(df))
        assert stats.median_string_length == 3.0

    def test_all_missing_column_excluded_from_uniqueness(self):
        df = pd.DataFrame({
            "code": ["a", "b"],
            "blank": [np.nan, np.nan],
        })
        stats = compute_dataset_statistics(profile_dataset(df))
        assert stats.median_uniqueness == 1.0

    def test_single_row(self):
        df = pd.DataFrame({"code": ["abcde"]})
        stats = compute_dataset_statistics(profile_dataset(df))
        assert stats.median_string_length == 5.0
        assert stats.median_uniqueness == 1.0

    def test_no_text_columns_is_nan(self):
        df = pd.DataFrame({"amount": [1, 2]})
        stats = compute_dataset_statistics(profile_dataset(df))
        assert math.isnan(stats.median_string_length)

    def test_recomputed_per_dataset(self):
        first = compute_dataset_statistics(profile_dataset(pd.DataFrame({"a": ["xx"]})))
        second = compute_dataset_statistics(profile_dataset(pd.DataFrame({"a": ["xxxxxx"]})))
        assert first.median_string_length == 2.0
        assert second.median_string_length == 6.0


class TestThresholds:
    def test_length_bounds(self):
        assert DatasetStatistics(10.0, 0.5).name_length_bounds() == (5.0, 15.0)

    def test_length_floor(self):
        assert DatasetStatistics(3.0, 0.5).name_length_bounds() == (2, 4.5)

    def test_uniqueness_threshold(self):
        assert DatasetStatistics(4.0, 0.5).uniqueness_threshold() == pytest.approx(0.6)

    def test_nan_length_is_degenerate(self):
        with pytest.raises(ComputationDegenerate):
            DatasetStatistics(float("nan"), 0.5).name_length_bounds()

    def test_nan_uniqueness_is_degenerate(self):
        with pytest.raises(ComputationDegenerate):
            DatasetStatistics(4.0, float("nan")).uniqueness_threshold()
