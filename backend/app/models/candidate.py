from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base

CANDIDATE_STATUSES = ("rejected", "ongoing", "selected", "scheduled")
DEFAULT_STATUS = "ongoing"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # always lowercase
    status = Column(String(20), nullable=False, default=DEFAULT_STATUS, index=True)
    position = Column(String(255), nullable=False)
    experience = Column(Integer, nullable=False, default=0)
    # Resume bytes live in resume_files; both columns are set together or not at all.
    resume_file_id = Column(Integer, ForeignKey("resume_files.id", ondelete="SET NULL"), nullable=True)
    resume_filename = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    # Timestamps are naive UTC so stored and bound values share one format.
    interview_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    creator = relationship("User", back_populates="candidates")
    resume = relationship(
        "ResumeFile",
        back_populates="candidate",
        uselist=False,
        single_parent=True,
        cascade="all, delete-orphan",
    )
