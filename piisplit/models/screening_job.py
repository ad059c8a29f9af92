from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from piisplit.database import Base


class ScreeningJob(Base):
    __tablename__ = "screening_jobs"

    id = Column(Integer, primary_key=True, index=True)

    # Source metadata
    filename = Column(String, nullable=False)

    # Processing status
    status = Column(String, default="pending")  # pending/completed/failed
    error_message = Column(String, nullable=True)

    # Results (filled after screening)
    row_count = Column(Integer, nullable=True)
    column_count = Column(Integer, nullable=True)
    flagged_entries = Column(JSON, nullable=True)   # [{column, reason, detail}]
    pii_columns = Column(JSON, nullable=True)       # columns moved to the PII frame
    excluded_columns = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    processed_at = Column(DateTime, nullable=True)

    # Relationships
    detection_logs = relationship("DetectionLog", back_populates="job")
