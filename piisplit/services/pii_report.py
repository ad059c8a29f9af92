"""
Flagged report data model.

A report is an ordered list of FlaggedEntry records. Each entry names either
a single column or a ColumnPair (coordinate pair hint) and carries one Reason.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

import pandas as pd


PAIR_SEPARATOR = " & "


class Reason(str, Enum):
    """Categorical reason tags. The value is the human-readable message."""
    SUSPICIOUS_NAME = "Column name suggests PII"
    PHONE = "Phone number detected"
    EMAIL = "Email address detected"
    NAME_OR_IDENTIFIER = "Potential name or unique identifier"
    MIXED_TYPE = "Mixed data types detected"
    PLACE_NAME = "Potential city/town/village name"
    DISABILITY = "Disability status detected"
    GEO_PAIR = "Potential latitude/longitude pair detected"

    @property
    def rule_id(self) -> str:
        return RULE_IDS[self]


RULE_IDS: Dict[Reason, str] = {
    Reason.SUSPICIOUS_NAME: "PII-02",
    Reason.PHONE: "PII-03",
    Reason.EMAIL: "PII-04",
    Reason.NAME_OR_IDENTIFIER: "PII-05",
    Reason.MIXED_TYPE: "PII-06",
    Reason.PLACE_NAME: "PII-07",
    Reason.DISABILITY: "PII-08",
    Reason.GEO_PAIR: "PII-PAIR",
}


class ColumnPair(NamedTuple):
    """Two columns that together look like a coordinate pair."""
    latitude: str
    longitude: str

    def __str__(self) -> str:
        return f"{self.latitude}{PAIR_SEPARATOR}{self.longitude}"

    @classmethod
    def parse(cls, label: str) -> "ColumnPair":
        """Inverse of str(); only for labels coming from a rendered report."""
        lat, sep, lon = label.partition(PAIR_SEPARATOR)
        if not sep:
            raise ValueError(f"'{label}' is not a column pair label")
        return cls(lat.strip(), lon.strip())


ColumnRef = Union[str, ColumnPair]


def column_label(column: ColumnRef) -> str:
    return str(column)


@dataclass(frozen=True)
class FlaggedEntry:
    """One suspect column (or column pair) and why it was flagged."""
    column: ColumnRef
    reason: Reason
    detail: str = ""

    @property
    def is_pair(self) -> bool:
        return isinstance(self.column, ColumnPair)

    @property
    def label(self) -> str:
        return column_label(self.column)

    @property
    def columns(self) -> Tuple[str, ...]:
        """Individual column names covered by this entry."""
        if isinstance(self.column, ColumnPair):
            return tuple(self.column)
        return (self.column,)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.label,
            "reason": self.reason.value,
            "detail": self.detail or self.reason.value,
            "rule_id": self.reason.rule_id,
            "is_pair": self.is_pair,
        }


class FlaggedReport:
    """
    Ordered collection of flagged entries.

    Supports both "is column X flagged" (``x in report``) and
    "list all reasons for X" (``report.reasons_for(x)``). Pairs can be
    queried with a ColumnPair, a plain tuple or the rendered "A & B" label.
    """

    def __init__(self, entries: Optional[List[FlaggedEntry]] = None):
        self._entries: Tuple[FlaggedEntry, ...] = tuple(entries or ())

    # ── Sequence protocol ─────────────────────────────────────────────

    def __iter__(self) -> Iterator[FlaggedEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> FlaggedEntry:
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlaggedReport):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"FlaggedReport({list(self._entries)!r})"

    @property
    def entries(self) -> Tuple[FlaggedEntry, ...]:
        return self._entries

    # ── Queries ───────────────────────────────────────────────────────

    @staticmethod
    def _normalize(column: Union[ColumnRef, Tuple[str, str]]) -> ColumnRef:
        if isinstance(column, ColumnPair):
            return column
        if isinstance(column, tuple):
            return ColumnPair(*column)
        if isinstance(column, str) and PAIR_SEPARATOR in column:
            return ColumnPair.parse(column)
        return column

    def __contains__(self, column: object) -> bool:
        try:
            return bool(self.reasons_for(column))
        except TypeError:
            return False

    def reasons_for(self, column: Union[ColumnRef, Tuple[str, str]]) -> List[Reason]:
        """
        All reasons recorded for exactly this column identifier.

        A plain column name wins over a pair label, so a column literally
        named "R & D" is looked up as itself before "R & D" is read as a pair.
        """
        if isinstance(column, str):
            direct = [entry.reason for entry in self._entries if not entry.is_pair and entry.column == column]
            if direct or PAIR_SEPARATOR not in column:
                return direct
        key = self._normalize(column)
        return [entry.reason for entry in self._entries if entry.column == key]

    def entries_for(self, column: str) -> List[FlaggedEntry]:
        """Every entry that mentions ``column``, alone or inside a pair."""
        return [entry for entry in self._entries if column in entry.columns]

    @property
    def columns(self) -> List[ColumnRef]:
        return [entry.column for entry in self._entries]

    @property
    def pairs(self) -> List[ColumnPair]:
        return [entry.column for entry in self._entries if entry.is_pair]

    def pii_columns(self) -> List[str]:
        """Individual column names, pairs flattened, first-seen order, no repeats."""
        seen: Dict[str, None] = {}
        for entry in self._entries:
            for name in entry.columns:
                seen.setdefault(name, None)
        return list(seen)

    # ── Rendering ─────────────────────────────────────────────────────

    def to_frame(self) -> pd.DataFrame:
        """Two-column Column/Reason table, one row per entry."""
        return pd.DataFrame(
            {
                "Column": [entry.label for entry in self._entries],
                "Reason": [entry.detail or entry.reason.value for entry in self._entries],
            },
            columns=["Column", "Reason"],
        )

    def to_records(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]
