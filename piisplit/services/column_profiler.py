"""
Column Statistics Profiler

Builds a read-only profile per column and the dataset-wide medians that the
dynamic name/identifier rule uses as its baseline:

- median string length across every text column's values (missing excluded)
- median uniqueness ratio across all columns (columns with no values excluded)

Statistics are derived from the DataFrame handed in and never cached, so two
calls on different datasets can never leak thresholds into each other.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import pandas as pd
from pandas.api import types as ptypes

from piisplit.exceptions import ComputationDegenerate, InvalidInput


# ============================================================================
# THRESHOLD CONSTANTS
# ============================================================================

NAME_LENGTH_FLOOR = 2
NAME_LENGTH_LOWER_FACTOR = 0.5
NAME_LENGTH_UPPER_FACTOR = 1.5
UNIQUENESS_FACTOR = 1.2


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class ColumnProfile:
    """Summary of one column, derived once per detection run."""
    name: Any
    is_numeric: bool
    is_temporal: bool
    is_text: bool
    lengths: Tuple[int, ...]    # non-missing values rendered as text, empty strings included
    uniqueness: float           # NaN when the column holds no values
    non_missing_count: int

    @property
    def is_empty(self) -> bool:
        return self.non_missing_count == 0


@dataclass(frozen=True)
class DatasetStatistics:
    median_string_length: float
    median_uniqueness: float

    def name_length_bounds(self) -> Tuple[float, float]:
        """Inclusive string-length band for the name/identifier rule."""
        if math.isnan(self.median_string_length):
            raise ComputationDegenerate("no text values to derive a median string length")
        lower = max(NAME_LENGTH_FLOOR, self.median_string_length * NAME_LENGTH_LOWER_FACTOR)
        upper = self.median_string_length * NAME_LENGTH_UPPER_FACTOR
        return lower, upper

    def uniqueness_threshold(self) -> float:
        if math.isnan(self.median_uniqueness):
            raise ComputationDegenerate("no column holds values to derive a median uniqueness")
        return self.median_uniqueness * UNIQUENESS_FACTOR


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def is_numeric_column(series: pd.Series) -> bool:
    """Numeric dtype, booleans excluded."""
    return ptypes.is_numeric_dtype(series) and not ptypes.is_bool_dtype(series)


def is_temporal_column(series: pd.Series) -> bool:
    return (
        ptypes.is_datetime64_any_dtype(series)
        or ptypes.is_timedelta64_dtype(series)
        or isinstance(series.dtype, pd.PeriodDtype)
    )


def is_text_column(series: pd.Series) -> bool:
    """Columns whose values count towards the median string length."""
    if is_numeric_column(series) or is_temporal_column(series) or ptypes.is_bool_dtype(series):
        return False
    return (
        ptypes.is_object_dtype(series)
        or ptypes.is_string_dtype(series)
        or isinstance(series.dtype, pd.CategoricalDtype)
    )


def non_missing_text(series: pd.Series) -> pd.Series:
    """Non-missing values rendered as text. Missing values never match anything."""
    return series.dropna().astype(str)


def uniqueness_ratio(series: pd.Series) -> float:
    """Distinct non-missing values / non-missing values. NaN for an all-missing column."""
    non_missing = series.dropna()
    if len(non_missing) == 0:
        return float("nan")
    try:
        distinct = non_missing.nunique()
    except TypeError as exc:
        raise InvalidInput(
            f"Column '{series.name}' holds nested values; only scalar cells are supported"
        ) from exc
    return distinct / len(non_missing)


# ============================================================================
# PROFILER
# ============================================================================

def profile_column(name: Any, series: pd.Series) -> ColumnProfile:
    numeric = is_numeric_column(series)
    temporal = is_temporal_column(series)

    lengths: Tuple[int, ...] = ()
    if not numeric and not temporal:
        rendered = non_missing_text(series)
        lengths = tuple(len(value) for value in rendered)

    return ColumnProfile(
        name=name,
        is_numeric=numeric,
        is_temporal=temporal,
        is_text=is_text_column(series),
        lengths=lengths,
        uniqueness=uniqueness_ratio(series),
        non_missing_count=int(series.notna().sum()),
    )


def profile_dataset(df: pd.DataFrame) -> Dict[Any, ColumnProfile]:
    """Profile every column, keyed by column name in declared order."""
    return {col: profile_column(col, df[col]) for col in df.columns}


def compute_dataset_statistics(profiles: Dict[Any, ColumnProfile]) -> DatasetStatistics:
    """
    Medians over the profiles of one dataset.

    The median of a single value is that value; with nothing to take a
    median of the statistic is NaN and the rules relying on it stay silent.
    """
    all_lengths: List[int] = []
    for profile in profiles.values():
        if profile.is_text:
            all_lengths.extend(profile.lengths)

    median_length = pd.Series(all_lengths, dtype=float).median()
    median_uniqueness = pd.Series(
        [profile.uniqueness for profile in profiles.values()], dtype=float
    ).median()

    return DatasetStatistics(
        median_string_length=float(median_length),
        median_uniqueness=float(median_uniqueness),
    )
