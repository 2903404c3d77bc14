"""
SQLAlchemy models package
"""
from .users import User
from .recordings import Recording, RecordingStatus
from .audio_chunks import AudioChunk

__all__ = [
    "User",
    "Recording",
    "RecordingStatus",
    "AudioChunk",
]
