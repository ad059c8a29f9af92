"""
Coordinate pairing.

Numeric columns whose values all fall in [-90, 90] are latitude candidates,
those in [-180, 180] longitude candidates; a column can be both. Every
latitude candidate is paired with every longitude candidate, a column with
itself included. Pairs are hints for human review: reverse pairs are not
merged and unrelated measurements that happen to be in range are paired too.
"""

from dataclasses import dataclass, field
from itertools import product
from typing import Any, List, Sequence

import pandas as pd

from piisplit.services.pii_report import ColumnPair, FlaggedEntry, Reason
from piisplit.services.pii_rules import is_latitude_like, is_longitude_like


@dataclass
class CoordinateCandidates:
    latitude: List[Any] = field(default_factory=list)
    longitude: List[Any] = field(default_factory=list)

    def add(self, name: Any, series: pd.Series) -> bool:
        """Classify one column; True when it landed in either list."""
        matched = False
        if is_latitude_like(series):
            self.latitude.append(name)
            matched = True
        if is_longitude_like(series):
            self.longitude.append(name)
            matched = True
        return matched


def pair_coordinates(latitude_cols: Sequence[Any], longitude_cols: Sequence[Any]) -> List[FlaggedEntry]:
    """Cross product latitude × longitude, in declared column order."""
    return [
        FlaggedEntry(
            column=ColumnPair(lat, lon),
            reason=Reason.GEO_PAIR,
            detail=Reason.GEO_PAIR.value,
        )
        for lat, lon in product(latitude_cols, longitude_cols)
    ]
