"""
Recording Model - Audio capture session metadata
"""
import enum
import uuid

from sqlalchemy import Column, String, BigInteger, Float, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class RecordingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    DELETED = "DELETED"


class Recording(Base):
    __tablename__ = "recordings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=True)
    format = Column(String(20), nullable=False, default="webm")
    status = Column(String(20), nullable=False, default=RecordingStatus.ACTIVE.value)  # ACTIVE, COMPLETED, FAILED
    total_size = Column(BigInteger, nullable=True)  # Bytes, computed on completion
    duration = Column(Float, nullable=True)  # Seconds, estimated on completion
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationship to User (many-to-one)
    user = relationship("User", back_populates="recordings")

    # Relationship to AudioChunk (one-to-many)
    chunks = relationship(
        "AudioChunk",
        back_populates="recording",
        cascade="all, delete-orphan",
        order_by="AudioChunk.chunk_index"
    )

    def __repr__(self):
        return f"<Recording(id={self.id}, name={self.name}, status={self.status})>"
