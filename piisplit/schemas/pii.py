from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class FlaggedEntryResponse(BaseModel):
    column: str          # "name" or "lat & long" for coordinate pairs
    reason: str
    detail: str
    rule_id: str
    is_pair: bool


class ReviewFlag(BaseModel):
    rule_id: str
    flag_type: str
    description: str
    affected_columns: list[str]
    suggested_action: Optional[str] = None


class PiiCheckResponse(BaseModel):
    job_id: Optional[int]
    filename: str
    row_count: int
    column_count: int
    flagged: list[FlaggedEntryResponse]
    pii_columns: list[str]
    pairs: list[str]
    review_flags: list[ReviewFlag]


class PiiSplitResponse(PiiCheckResponse):
    excluded_columns: list[str]
    join_key: str
    pii_data: list[dict[str, Any]]
    non_pii_data: list[dict[str, Any]]


class DetectionLogEntry(BaseModel):
    id: int
    job_id: int
    column_name: Optional[str]
    action: str
    reason: str
    rule_id: Optional[str]
    needs_review: Optional[bool]
    timestamp: datetime

    model_config = {"from_attributes": True}
