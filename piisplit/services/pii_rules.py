"""
PII Column Rules

Independent signal detectors evaluated per column, plus the ordered rule
list the detector walks for every non-numeric column:

  PII-02  column name keyword
  PII-03  phone number pattern
  PII-04  email address pattern
  PII-05  dynamic name / unique identifier (length band + uniqueness)
  PII-06  mixed data types
  PII-07  city / town / village name
  PII-08  disability status

The first rule that fires wins; later rules are skipped for that column.
Numeric and temporal columns never reach this list, they are only tested
for latitude/longitude ranges (see coordinate_pairing).
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import pandas as pd

from piisplit.exceptions import ComputationDegenerate
from piisplit.services.column_profiler import (
    ColumnProfile,
    DatasetStatistics,
    is_numeric_column,
    non_missing_text,
)
from piisplit.services.pii_report import FlaggedEntry, Reason


# ============================================================================
# KEYWORDS AND PATTERNS
# ============================================================================

PII_NAME_KEYWORDS = (
    "name", "id", "identification", "phone", "email", "geo", "address",
    "city", "town", "village", "disability", "ssn", "social security", "zip",
)

PLACE_NAME_KEYWORDS = ("city", "town", "village", "region", "district")

PHONE_PATTERN = re.compile(r"\(?\d{3}\)?[ -]?\d{3}[ -]?\d{4}")
EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
DISABILITY_PATTERN = re.compile(r"disability|disabled|handicap")

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)

PLACE_UNIQUENESS_MIN = 0.5


# ============================================================================
# SIGNAL DETECTORS
# ============================================================================

def values_within_range(series: pd.Series, min_val: float, max_val: float) -> bool:
    """
    True when the column is numeric and every non-missing value lies in
    [min_val, max_val]. An all-missing column is never in range.
    """
    if not is_numeric_column(series):
        return False
    valid_values = series.dropna()
    if len(valid_values) == 0:
        return False
    return bool(valid_values.between(min_val, max_val).all())


def is_latitude_like(series: pd.Series) -> bool:
    return values_within_range(series, *LATITUDE_RANGE)


def is_longitude_like(series: pd.Series) -> bool:
    return values_within_range(series, *LONGITUDE_RANGE)


def column_name_suggests_pii(name: Any) -> bool:
    col_lower = str(name).lower()
    return any(keyword in col_lower for keyword in PII_NAME_KEYWORDS)


def contains_phone_number(text_values: pd.Series) -> bool:
    return any(PHONE_PATTERN.search(value) for value in text_values)


def contains_email_address(text_values: pd.Series) -> bool:
    return any(EMAIL_PATTERN.search(value) for value in text_values)


def mentions_disability(text_values: pd.Series) -> bool:
    return any(DISABILITY_PATTERN.search(value.lower()) for value in text_values)


def has_mixed_types(series: pd.Series) -> bool:
    """
    A text-typed column holding numeric values (numbers or numeric-looking
    strings) next to values that are not numeric at all.
    """
    if is_numeric_column(series):
        return False
    text_values = non_missing_text(series).str.strip()
    if len(text_values) == 0:
        return False
    numeric_count = int(pd.to_numeric(text_values, errors="coerce").notna().sum())
    return 0 < numeric_count < len(text_values)


def is_place_name_column(name: Any, uniqueness: float) -> bool:
    # NaN uniqueness (all-missing column) compares False
    if not uniqueness > PLACE_UNIQUENESS_MIN:
        return False
    col_lower = str(name).lower()
    return any(keyword in col_lower for keyword in PLACE_NAME_KEYWORDS)


def name_or_identifier_detail(profile: ColumnProfile, stats: DatasetStatistics) -> Optional[str]:
    """
    Dynamic name / unique identifier test.

    Every non-empty value must have a length inside
    [max(2, median_length * 0.5), median_length * 1.5] and the column's
    uniqueness must exceed median_uniqueness * 1.2. Returns the detail
    message on a match, None otherwise (including degenerate statistics).
    """
    lengths = [length for length in profile.lengths if length > 0]
    if not lengths:
        return None
    try:
        lower, upper = stats.name_length_bounds()
        threshold = stats.uniqueness_threshold()
    except ComputationDegenerate:
        return None

    length_check = all(lower <= length <= upper for length in lengths)
    if length_check and profile.uniqueness > threshold:
        return (
            f"{Reason.NAME_OR_IDENTIFIER.value} detected "
            f"(string length {lower:.1f}-{upper:.1f} and uniqueness >{threshold:.2f})"
        )
    return None


# ============================================================================
# ORDERED RULE LIST
# ============================================================================

@dataclass
class ColumnContext:
    """Everything a rule may look at for one column."""
    name: Any
    series: pd.Series
    profile: ColumnProfile
    stats: DatasetStatistics

    def __post_init__(self):
        self.text_values = non_missing_text(self.series)


RuleCheck = Callable[[ColumnContext], Optional[str]]


@dataclass(frozen=True)
class ColumnRule:
    reason: Reason
    check: RuleCheck

    def evaluate(self, ctx: ColumnContext) -> Optional[FlaggedEntry]:
        detail = self.check(ctx)
        if detail is None:
            return None
        return FlaggedEntry(column=ctx.name, reason=self.reason, detail=detail)


def _when(predicate: Callable[[ColumnContext], bool], reason: Reason) -> RuleCheck:
    def check(ctx: ColumnContext) -> Optional[str]:
        return reason.value if predicate(ctx) else None
    return check


COLUMN_RULES: Tuple[ColumnRule, ...] = (
    ColumnRule(
        Reason.SUSPICIOUS_NAME,
        _when(lambda ctx: column_name_suggests_pii(ctx.name), Reason.SUSPICIOUS_NAME),
    ),
    ColumnRule(
        Reason.PHONE,
        _when(lambda ctx: contains_phone_number(ctx.text_values), Reason.PHONE),
    ),
    ColumnRule(
        Reason.EMAIL,
        _when(lambda ctx: contains_email_address(ctx.text_values), Reason.EMAIL),
    ),
    ColumnRule(
        Reason.NAME_OR_IDENTIFIER,
        lambda ctx: name_or_identifier_detail(ctx.profile, ctx.stats),
    ),
    ColumnRule(
        Reason.MIXED_TYPE,
        _when(lambda ctx: has_mixed_types(ctx.series), Reason.MIXED_TYPE),
    ),
    ColumnRule(
        Reason.PLACE_NAME,
        _when(lambda ctx: is_place_name_column(ctx.name, ctx.profile.uniqueness), Reason.PLACE_NAME),
    ),
    ColumnRule(
        Reason.DISABILITY,
        _when(lambda ctx: mentions_disability(ctx.text_values), Reason.DISABILITY),
    ),
)


def first_matching_rule(ctx: ColumnContext, rules: Tuple[ColumnRule, ...] = COLUMN_RULES) -> Optional[FlaggedEntry]:
    """Walk the rules in order and stop at the first one that fires."""
    for rule in rules:
        entry = rule.evaluate(ctx)
        if entry is not None:
            return entry
    return None
