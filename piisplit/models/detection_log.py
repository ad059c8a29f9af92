from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from piisplit.database import Base
from piisplit.models.screening_job import ScreeningJob  # noqa: F401


class DetectionLog(Base):
    __tablename__ = "detection_logs"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("screening_jobs.id"), nullable=False)

    # Single column name, or "lat & long" for coordinate pair hints.
    # None for dataset-level actions (dataset_split).
    column_name = Column(String, nullable=True)

    # Action types: pii_column_flagged | pii_pair_flagged |
    #               pii_column_excluded | dataset_split
    action = Column(String, nullable=False)
    reason = Column(String, nullable=False)

    # Rule traceability, e.g. PII-02 (name keyword), PII-PAIR
    rule_id = Column(String, nullable=True, index=True)
    # True = hint that a human must confirm (coordinate pairs)
    needs_review = Column(Boolean, nullable=True, default=False)

    timestamp = Column(DateTime, default=datetime.utcnow)

    # Relationships
    job = relationship("ScreeningJob", back_populates="detection_logs")
