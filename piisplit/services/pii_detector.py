"""
PII Detection Engine

Flags columns (and coordinate column pairs) of a DataFrame that likely hold
personally identifiable information.

Detection order per column:
1. Type gate: numeric/temporal columns are only tested for latitude and
   longitude ranges and never reach the rules below
2. Ordered column rules (pii_rules.COLUMN_RULES), first match wins
3. Coordinate pairing over all columns, independent of the early exits

The engine is a pure function of the DataFrame and the fixed thresholds:
statistics are recomputed on every call and the input is never modified.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from piisplit.exceptions import InvalidInput
from piisplit.services.column_profiler import (
    DatasetStatistics,
    compute_dataset_statistics,
    profile_dataset,
)
from piisplit.services.coordinate_pairing import CoordinateCandidates, pair_coordinates
from piisplit.services.pii_report import FlaggedEntry, FlaggedReport
from piisplit.services.pii_rules import COLUMN_RULES, ColumnContext, first_matching_rule


@dataclass(frozen=True)
class DetectionRun:
    """Report plus the intermediate values it was derived from."""
    report: FlaggedReport
    statistics: DatasetStatistics
    latitude_columns: List[Any]
    longitude_columns: List[Any]


def _finite_or_none(value: float) -> Optional[float]:
    return None if math.isnan(value) else value


class PiiDetector:
    """
    Detects PII-bearing columns of a DataFrame.

    Usage:
        detector = PiiDetector()
        report = detector.detect(df)
        report.reasons_for("email")      # [Reason.EMAIL]
        report.pii_columns()             # pairs flattened
    """

    def __init__(self, rules=COLUMN_RULES):
        self.rules = rules

    @staticmethod
    def _validate(df: pd.DataFrame) -> None:
        if not isinstance(df, pd.DataFrame):
            raise InvalidInput(f"Expected a pandas DataFrame, got {type(df).__name__}")
        duplicated = df.columns[df.columns.duplicated()].tolist()
        if duplicated:
            raise InvalidInput(f"Duplicate column names: {duplicated}")

    def run(self, df: pd.DataFrame) -> DetectionRun:
        """Full detection pass, keeping the statistics for reporting."""
        self._validate(df)

        profiles = profile_dataset(df)
        stats = compute_dataset_statistics(profiles)
        coordinates = CoordinateCandidates()
        entries: List[FlaggedEntry] = []

        for col in df.columns:
            series = df[col]
            profile = profiles[col]

            # 1. Type gate
            if profile.is_numeric or profile.is_temporal:
                coordinates.add(col, series)
                continue

            # 2. Ordered rules
            ctx = ColumnContext(name=col, series=series, profile=profile, stats=stats)
            entry = first_matching_rule(ctx, self.rules)
            if entry is not None:
                entries.append(entry)

        # 3. Coordinate pairs
        entries.extend(pair_coordinates(coordinates.latitude, coordinates.longitude))

        return DetectionRun(
            report=FlaggedReport(entries),
            statistics=stats,
            latitude_columns=list(coordinates.latitude),
            longitude_columns=list(coordinates.longitude),
        )

    def detect(self, df: pd.DataFrame) -> FlaggedReport:
        return self.run(df).report

    def get_pii_columns(self, df: pd.DataFrame) -> List[str]:
        """Individual flagged column names, pair members included."""
        return self.detect(df).pii_columns()

    def get_detection_report(self, df: pd.DataFrame) -> Dict[str, Any]:
        """
        Generate a serialisable detection report.

        Args:
            df: Input DataFrame

        Returns:
            Dict with flagged entries, PII columns, coordinate candidates and
            the dataset statistics the dynamic thresholds came from
        """
        run = self.run(df)
        report = run.report

        by_reason: Dict[str, int] = {}
        for entry in report:
            by_reason[entry.reason.name] = by_reason.get(entry.reason.name, 0) + 1

        return {
            "column_count": len(df.columns),
            "row_count": len(df),
            "flagged": report.to_records(),
            "pii_columns": report.pii_columns(),
            "pairs": [str(pair) for pair in report.pairs],
            "latitude_candidates": run.latitude_columns,
            "longitude_candidates": run.longitude_columns,
            "flags_by_reason": by_reason,
            "statistics": {
                "median_string_length": _finite_or_none(run.statistics.median_string_length),
                "median_uniqueness": _finite_or_none(run.statistics.median_uniqueness),
            },
        }


# Convenience function for direct usage
def check_pii(df: pd.DataFrame) -> FlaggedReport:
    """
    Flag columns of ``df`` that potentially contain PII.

    Args:
        df: Input DataFrame

    Returns:
        FlaggedReport, empty when nothing was flagged
    """
    return PiiDetector().detect(df)
