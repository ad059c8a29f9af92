"""
Split a DataFrame into PII and non-PII frames linked by a join key.

The PII set is every individually flagged column plus every member of a
flagged coordinate pair, minus the caller's exclusions. Both output frames
keep the input's row order and index, and share a freshly generated join key
column; it is the only column they have in common.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence

import pandas as pd

from piisplit.config import settings
from piisplit.exceptions import InvalidInput, JoinKeyError
from piisplit.services.pii_detector import PiiDetector
from piisplit.services.pii_report import FlaggedReport


JoinKeyGenerator = Callable[[int], Sequence[str]]


def generate_join_keys(n: int) -> List[str]:
    """One random UUID4 string per row."""
    return [str(uuid.uuid4()) for _ in range(n)]


@dataclass(frozen=True)
class PartitionResult:
    pii_data: pd.DataFrame
    non_pii_data: pd.DataFrame
    join_key: str
    pii_columns: List[Any] = field(default_factory=list)
    excluded_columns: List[Any] = field(default_factory=list)
    report: FlaggedReport = field(default_factory=FlaggedReport)


def _normalize_exclusions(exclude_columns: Optional[Iterable[Any]]) -> List[Any]:
    if exclude_columns is None:
        return []
    if isinstance(exclude_columns, str):
        exclude_columns = [exclude_columns]
    return list(dict.fromkeys(exclude_columns))


def _make_keys(key_generator: JoinKeyGenerator, n: int) -> List[str]:
    keys = [str(key) for key in key_generator(n)]
    if len(keys) != n:
        raise JoinKeyError(f"Join key generator returned {len(keys)} keys for {n} rows")
    if len(set(keys)) != n:
        raise JoinKeyError("Join key generator returned duplicate keys")
    return keys


def split_pii_data(
    df: pd.DataFrame,
    exclude_columns: Optional[Iterable[Any]] = None,
    key_generator: Optional[JoinKeyGenerator] = None,
    join_key: Optional[str] = None,
    detector: Optional[PiiDetector] = None,
    report: Optional[FlaggedReport] = None,
) -> PartitionResult:
    """
    Split ``df`` into a PII frame and a non-PII frame.

    Args:
        df: Input DataFrame, left untouched
        exclude_columns: Columns known to be safe; never placed in the PII
            frame even when flagged. Every name must exist in ``df``.
        key_generator: Callable returning ``n`` unique strings, UUID4 by default
        join_key: Name of the key column, ``settings.JOIN_KEY_COLUMN`` by default
        detector: Detector to run, a fresh PiiDetector by default
        report: Report already computed for this same ``df``; detection is
            skipped when given

    Returns:
        PartitionResult with both frames and the columns that were moved

    Raises:
        InvalidInput: unknown excluded column, or ``join_key`` already a column
        JoinKeyError: the key generator broke its contract
    """
    if report is None:
        report = (detector or PiiDetector()).detect(df)
    key_generator = key_generator or generate_join_keys
    join_key = join_key or settings.JOIN_KEY_COLUMN

    exclusions = _normalize_exclusions(exclude_columns)
    unknown = [col for col in exclusions if col not in df.columns]
    if unknown:
        raise InvalidInput(f"Excluded columns not found in dataset: {unknown}")
    if join_key in df.columns:
        raise InvalidInput(f"Dataset already has a column named '{join_key}'")

    pii_set = set(report.pii_columns()) - set(exclusions)
    pii_columns = [col for col in df.columns if col in pii_set]
    non_pii_columns = [col for col in df.columns if col not in pii_set]

    working = df.copy()
    working[join_key] = _make_keys(key_generator, len(df))

    return PartitionResult(
        pii_data=working[pii_columns + [join_key]].copy(),
        non_pii_data=working[non_pii_columns + [join_key]].copy(),
        join_key=join_key,
        pii_columns=pii_columns,
        excluded_columns=exclusions,
        report=report,
    )
