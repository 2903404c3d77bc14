"""
Recording Schemas - Pydantic models for recording and chunk operations
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from schemas.common_schemas import CamelModel


# ============================================
# Request Schemas
# ============================================

class RecordingCreate(CamelModel):
    """Schema for creating a new recording session"""
    name: Optional[str] = Field(None, max_length=255, description="Recording name")
    format: Optional[str] = Field(
        None,
        max_length=20,
        pattern=r"^[A-Za-z0-9]+$",
        description="Container format (webm, wav, mp3). Defaults to webm"
    )


# ============================================
# Response Schemas
# ============================================

class ChunkUploadResponse(CamelModel):
    """Schema returned after a chunk upload"""
    id: UUID
    chunk_index: int
    size: int


class ChunkMetadata(CamelModel):
    """Chunk information without the audio bytes"""
    id: UUID
    chunk_index: int
    size: int
    duration: Optional[float] = None
    mime_type: str
    created_at: datetime


class RecordingResponse(CamelModel):
    """Schema for recording response"""
    id: UUID
    user_id: UUID
    name: Optional[str] = None
    format: str
    status: str
    status_display: Optional[str] = Field(None, description="Human readable status")
    total_size: Optional[int] = Field(None, description="Total size in bytes")
    duration: Optional[float] = Field(None, description="Estimated duration in seconds")
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class RecordingListItem(RecordingResponse):
    """Recording entry of the user's list"""
    chunk_count: int = Field(default=0, description="Number of chunks stored")


class RecordingDetailResponse(RecordingResponse):
    """Recording with its chunk metadata ordered by index"""
    chunks: List[ChunkMetadata] = Field(default_factory=list)


class RecordingSummary(CamelModel):
    id: UUID
    name: Optional[str] = None
    status: str
    duration: Optional[float] = None
    format: str
    total_size: Optional[int] = None
    chunks_count: int


class ChunkDiagnostics(CamelModel):
    id: UUID
    chunk_index: int
    size: int
    mime_type: str
    has_audio_data: bool


class RecordingDiagnostics(CamelModel):
    """Debug view comparing stored chunks with recording aggregates"""
    recording: RecordingSummary
    chunks: List[ChunkDiagnostics]
    total_chunks: int
    total_size: int
