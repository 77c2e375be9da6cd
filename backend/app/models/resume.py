from sqlalchemy import Column, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class ResumeFile(Base):
    """Uploaded resume bytes, kept out of the candidate row."""

    __tablename__ = "resume_files"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(LargeBinary, nullable=False)
    content_type = Column(String(120), nullable=True)
    size_bytes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    candidate = relationship("Candidate", back_populates="resume", uselist=False)
