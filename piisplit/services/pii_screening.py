"""
PiiScreening: audited detection + split for one screening job.

Wraps the pure detection engine and the splitter, and records what they did:

  Every flagged column   → DetectionLog (pii_column_flagged)
  Every coordinate pair  → DetectionLog (pii_pair_flagged, needs_review)
                           + pending-review flag for the frontend
  Every exclusion        → DetectionLog (pii_column_excluded)
  The split itself       → DetectionLog (dataset_split)

The DataFrame handed in is never modified.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

import pandas as pd

from piisplit.models.detection_log import DetectionLog
from piisplit.services.pii_detector import PiiDetector
from piisplit.services.pii_report import FlaggedReport
from piisplit.services.pii_split import JoinKeyGenerator, PartitionResult, split_pii_data


class PiiScreening:
    """
    Usage:
        screening = PiiScreening(job_id=1, df=raw_df, db=db_session)
        summary = screening.run_all(exclude_columns=["phone"])
        result = screening.result    # PartitionResult (pii_data / non_pii_data)
        flags = screening.flags      # coordinate pairs awaiting human review
    """

    def __init__(
        self,
        job_id: int,
        df: pd.DataFrame,
        db,
        key_generator: Optional[JoinKeyGenerator] = None,
    ):
        self.job_id = job_id
        self.df = df
        self.db = db
        self.key_generator = key_generator
        self.detector = PiiDetector()
        self.report: Optional[FlaggedReport] = None
        self.result: Optional[PartitionResult] = None
        self.flags: list[dict] = []
        self.summary: dict = {
            "row_count": len(df),
            "column_count": len(df.columns),
            "flagged": [],
            "pii_columns": [],
            "pairs": [],
            "excluded_columns": [],
            "split": False,
            "join_key": None,
        }

    # ─────────────────────────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────────────────────────

    def _log(
        self,
        rule_id: Optional[str],
        action: str,
        reason: str,
        column_name: Optional[str] = None,
        needs_review: bool = False,
    ) -> None:
        """Persist a DetectionLog entry with rule traceability."""
        entry = DetectionLog(
            job_id=self.job_id,
            column_name=column_name,
            action=action,
            reason=reason,
            rule_id=rule_id,
            needs_review=needs_review,
            timestamp=datetime.utcnow(),
        )
        self.db.add(entry)

    def _flag(
        self,
        rule_id: str,
        flag_type: str,
        description: str,
        affected_columns: Optional[list] = None,
        suggested_action: Optional[str] = None,
    ) -> None:
        """
        Record a pending-review item. Coordinate pairs are hints only:
        the pairing is exhaustive and pairs unrelated in-range columns too.
        """
        self.flags.append({
            "rule_id": rule_id,
            "flag_type": flag_type,
            "description": description,
            "affected_columns": affected_columns or [],
            "suggested_action": suggested_action,
        })

    # ─────────────────────────────────────────────────────────────────
    # Detection
    # ─────────────────────────────────────────────────────────────────

    def detect(self) -> FlaggedReport:
        """Run the detection engine and log one entry per flagged column/pair."""
        report = self.detector.detect(self.df)

        for entry in report:
            if entry.is_pair:
                self._log(
                    rule_id=entry.reason.rule_id,
                    action="pii_pair_flagged",
                    reason=f"Columns '{entry.label}': {entry.detail}",
                    column_name=entry.label,
                    needs_review=True,
                )
                self._flag(
                    rule_id=entry.reason.rule_id,
                    flag_type="coordinate_pair",
                    description=f"'{entry.label}' may be a latitude/longitude pair",
                    affected_columns=[str(col) for col in entry.columns],
                    suggested_action="confirm_or_exclude",
                )
            else:
                self._log(
                    rule_id=entry.reason.rule_id,
                    action="pii_column_flagged",
                    reason=f"Column '{entry.label}': {entry.detail}",
                    column_name=entry.label,
                )

        self.report = report
        self.summary["flagged"] = report.to_records()
        self.summary["pii_columns"] = [str(col) for col in report.pii_columns()]
        self.summary["pairs"] = [str(pair) for pair in report.pairs]
        self.db.flush()
        return report

    # ─────────────────────────────────────────────────────────────────
    # Split
    # ─────────────────────────────────────────────────────────────────

    def split(self, exclude_columns: Optional[Iterable[Any]] = None) -> PartitionResult:
        """
        Split the dataset, reusing the report from detect() when it ran.
        InvalidInput from the splitter propagates.
        """
        result = split_pii_data(
            self.df,
            exclude_columns=exclude_columns,
            key_generator=self.key_generator,
            detector=self.detector,
            report=self.report,
        )
        self.report = result.report

        flagged = set(result.report.pii_columns())
        for col in result.excluded_columns:
            if col in flagged:
                reason = f"Column '{col}' was flagged but excluded by the caller; kept in the non-PII frame"
            else:
                reason = f"Column '{col}' excluded by the caller; it was not flagged"
            self._log(
                rule_id=None,
                action="pii_column_excluded",
                reason=reason,
                column_name=str(col),
            )

        moved = ", ".join(str(col) for col in result.pii_columns) or "none"
        self._log(
            rule_id=None,
            action="dataset_split",
            reason=(
                f"Moved {len(result.pii_columns)} column(s) to the PII frame: {moved}. "
                f"Frames linked by '{result.join_key}'."
            ),
        )

        self.result = result
        self.summary["excluded_columns"] = [str(col) for col in result.excluded_columns]
        self.summary["pii_columns"] = [str(col) for col in result.pii_columns]
        self.summary["split"] = True
        self.summary["join_key"] = result.join_key
        self.db.flush()
        return result

    # ─────────────────────────────────────────────────────────────────
    # run_all: orchestrator
    # ─────────────────────────────────────────────────────────────────

    def run_all(self, exclude_columns: Optional[Iterable[Any]] = None, split: bool = True) -> dict:
        """
        Detect, then optionally split. Commits the audit trail.

        Returns the summary dict. The frames are in self.result and the
        pending-review items in self.flags.
        """
        self.detect()
        if split:
            self.split(exclude_columns)
        self.db.commit()
        return self.summary
