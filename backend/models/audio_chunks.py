"""
AudioChunk Model - Binary audio segment of a recording
"""
from sqlalchemy import Column, String, Integer, Float, LargeBinary, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship, deferred
from sqlalchemy.sql import func
import uuid

from database import Base


class AudioChunk(Base):
    __tablename__ = "audio_chunks"
    __table_args__ = (
        UniqueConstraint("recording_id", "chunk_index", name="uq_audio_chunks_recording_chunk_index"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recording_id = Column(Uuid(as_uuid=True), ForeignKey("recordings.id", ondelete="CASCADE"), nullable=False, index=True)
    chunk_index = Column(Integer, nullable=False)
    # Loaded only when explicitly requested (playback)
    audio_data = deferred(Column(LargeBinary, nullable=False))
    size = Column(Integer, nullable=False)  # len(audio_data)
    duration = Column(Float, nullable=True)
    mime_type = Column(String(100), nullable=False, default="audio/webm")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationship to Recording (many-to-one)
    recording = relationship("Recording", back_populates="chunks")

    def __repr__(self):
        return f"<AudioChunk(id={self.id}, chunk_index={self.chunk_index}, size={self.size})>"
