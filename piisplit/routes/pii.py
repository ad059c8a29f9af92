from __future__ import annotations

import json
from datetime import datetime

import pandas as pd
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from piisplit.database import get_db
from piisplit.exceptions import InvalidInput, JoinKeyError
from piisplit.models.detection_log import DetectionLog
from piisplit.models.screening_job import ScreeningJob
from piisplit.schemas.pii import DetectionLogEntry, PiiCheckResponse, PiiSplitResponse
from piisplit.services.dataset_upload import read_uploaded_csv
from piisplit.services.pii_screening import PiiScreening

router = APIRouter(prefix="/pii", tags=["pii"])


def _frame_records(df: pd.DataFrame) -> list[dict]:
    return json.loads(df.to_json(orient="records", date_format="iso"))


def _start_job(db: Session, filename: str, df: pd.DataFrame) -> ScreeningJob:
    job = ScreeningJob(
        filename=filename,
        status="pending",
        row_count=len(df),
        column_count=len(df.columns),
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def _run_screening(db: Session, job: ScreeningJob, screening: PiiScreening, **kwargs) -> dict:
    try:
        summary = screening.run_all(**kwargs)
    except InvalidInput as e:
        db.rollback()
        job.status = "failed"
        job.error_message = str(e)
        db.commit()
        raise HTTPException(status_code=400, detail=str(e))
    except JoinKeyError as e:
        db.rollback()
        job.status = "failed"
        job.error_message = str(e)
        db.commit()
        raise HTTPException(status_code=500, detail=str(e))

    job.status = "completed"
    job.flagged_entries = summary["flagged"]
    job.pii_columns = summary["pii_columns"]
    job.excluded_columns = summary["excluded_columns"]
    job.processed_at = datetime.utcnow()
    db.commit()
    return summary


# ─────────────────────────────────────────────────────────────────────────────
# Detection only
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/check", response_model=PiiCheckResponse)
def check_dataset(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Upload a CSV and get back the columns that potentially hold PII."""
    df = read_uploaded_csv(file)
    job = _start_job(db, file.filename, df)

    screening = PiiScreening(job_id=job.id, df=df, db=db)
    summary = _run_screening(db, job, screening, split=False)

    return PiiCheckResponse(
        job_id=job.id,
        filename=file.filename,
        row_count=summary["row_count"],
        column_count=summary["column_count"],
        flagged=summary["flagged"],
        pii_columns=summary["pii_columns"],
        pairs=summary["pairs"],
        review_flags=screening.flags,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Detection + split
# ─────────────────────────────────────────────────────────────────────────────

@router.post("/split", response_model=PiiSplitResponse)
def split_dataset(
    file: UploadFile = File(...),
    exclude: list[str] = Form(default=[]),
    db: Session = Depends(get_db),
):
    """
    Upload a CSV and split it into a PII frame and a non-PII frame linked by
    a join key. Columns listed in ``exclude`` stay in the non-PII frame; an
    unknown column name is rejected with 400.
    """
    df = read_uploaded_csv(file)
    job = _start_job(db, file.filename, df)

    screening = PiiScreening(job_id=job.id, df=df, db=db)
    summary = _run_screening(db, job, screening, exclude_columns=exclude)
    result = screening.result

    return PiiSplitResponse(
        job_id=job.id,
        filename=file.filename,
        row_count=summary["row_count"],
        column_count=summary["column_count"],
        flagged=summary["flagged"],
        pii_columns=summary["pii_columns"],
        pairs=summary["pairs"],
        review_flags=screening.flags,
        excluded_columns=summary["excluded_columns"],
        join_key=result.join_key,
        pii_data=_frame_records(result.pii_data),
        non_pii_data=_frame_records(result.non_pii_data),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Audit trail
# ─────────────────────────────────────────────────────────────────────────────

@router.get("/jobs/{job_id}/audit-trail", response_model=list[DetectionLogEntry])
def audit_trail(
    job_id: int,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    job = db.query(ScreeningJob).filter(ScreeningJob.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return (
        db.query(DetectionLog)
        .filter(DetectionLog.job_id == job_id)
        .order_by(DetectionLog.timestamp.asc())
        .limit(limit)
        .all()
    )
