"""Validation and parsing of uploaded CSV datasets."""

import io
import os

import pandas as pd
from fastapi import HTTPException, UploadFile

from piisplit.config import settings


def validate_upload(file: UploadFile) -> dict:
    allowed_extensions = [".csv", ".txt"]
    file_ext = os.path.splitext(file.filename or "")[1].lower()

    if file_ext not in allowed_extensions:
        return {
            "valid": False,
            "error": f"File type '{file_ext}' not allowed. Only CSV files accepted.",
            "file_size": 0,
        }

    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)

    max_size = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if file_size > max_size:
        return {
            "valid": False,
            "error": (
                f"File too large ({file_size / 1024 / 1024:.1f}MB). "
                f"Maximum {settings.MAX_UPLOAD_SIZE_MB}MB."
            ),
            "file_size": file_size,
        }

    return {"valid": True, "error": None, "file_size": file_size}


def read_uploaded_csv(file: UploadFile) -> pd.DataFrame:
    """Validate the upload and parse it; any problem is a 400."""
    validation = validate_upload(file)
    if not validation["valid"]:
        raise HTTPException(status_code=400, detail=validation["error"])

    raw = file.file.read()
    try:
        return pd.read_csv(io.BytesIO(raw))
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Could not parse CSV: {str(e)}")
