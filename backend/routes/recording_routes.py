"""
Recording Routes - Endpoints for recording sessions, chunk upload and playback
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from config import DEFAULT_AUDIO_MIME_TYPE, MAX_AUDIO_SIZE_BYTES
from database import get_db
from models.recordings import Recording
from schemas.common_schemas import ApiResponse
from schemas.recording_schemas import (
    ChunkMetadata,
    ChunkUploadResponse,
    RecordingCreate,
    RecordingDetailResponse,
    RecordingDiagnostics,
    RecordingListItem,
    RecordingResponse
)
from security import get_current_user
from services import recording_service
from utils.status_translator import translate_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recordings", tags=["Recordings"])

# File validation constants
ALLOWED_AUDIO_TYPES = [
    "audio/webm",
    "audio/ogg",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/mpeg",
    "audio/mp4",
    "audio/aac",
    "video/webm",  # Browsers label audio-only WebM captures this way
]
GENERIC_BINARY_TYPE = "application/octet-stream"


# ============================================
# Helper Functions
# ============================================

def _recording_fields(recording: Recording) -> dict:
    return {
        "id": recording.id,
        "user_id": recording.user_id,
        "name": recording.name,
        "format": recording.format,
        "status": recording.status,
        "status_display": translate_status(recording.status),
        "total_size": recording.total_size,
        "duration": recording.duration,
        "created_at": recording.created_at,
        "updated_at": recording.updated_at,
        "completed_at": recording.completed_at,
    }


def _recording_detail(recording: Recording) -> RecordingDetailResponse:
    return RecordingDetailResponse(
        **_recording_fields(recording),
        chunks=[ChunkMetadata.model_validate(chunk) for chunk in recording.chunks]
    )


def _resolve_mime_type(content_type: Optional[str]) -> str:
    """
    Validate the uploaded content type and return the mime type to store.
    Parameters such as ";codecs=opus" are kept.
    """
    if not content_type or content_type.split(";")[0].strip() == GENERIC_BINARY_TYPE:
        return DEFAULT_AUDIO_MIME_TYPE
    
    if content_type.split(";")[0].strip().lower() not in ALLOWED_AUDIO_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type. Accepted types: {', '.join(ALLOWED_AUDIO_TYPES)}"
        )
    
    return content_type


# ============================================
# Endpoints
# ============================================

@router.post("", response_model=ApiResponse[RecordingResponse], status_code=status.HTTP_201_CREATED)
async def create_recording(
    recording_data: Optional[RecordingCreate] = None,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a new recording session for the authenticated user.
    The format defaults to webm.
    """
    recording_data = recording_data or RecordingCreate()
    recording = recording_service.create_recording(
        db,
        current_user["id"],
        name=recording_data.name,
        format=recording_data.format
    )
    
    return ApiResponse(
        message="Recording created successfully",
        data=RecordingResponse(**_recording_fields(recording))
    )


@router.post("/{recording_id}/chunks", response_model=ApiResponse[ChunkUploadResponse], status_code=status.HTTP_201_CREATED)
async def upload_chunk(
    recording_id: UUID,
    audio: Optional[UploadFile] = File(None, description="Audio blob"),
    chunk_index: int = Form(0, alias="chunkIndex", ge=0, description="Index of the chunk within the recording"),
    is_last_chunk: bool = Form(False, alias="isLastChunk", description="Complete the recording after storing this chunk"),
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upload an audio blob to a recording.
    
    **Flow:**
    1. Validates JWT authentication
    2. Validates presence, type and size of the file
    3. Stores the chunk (same index overwrites)
    4. Completes the recording when isLastChunk is true
    
    **Errors:**
    - 401: Invalid or expired token
    - 400: Missing/empty/oversized file, unsupported type or recording not active
    - 404: Recording not found
    """
    if audio is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio file is required"
        )
    
    mime_type = _resolve_mime_type(audio.content_type)
    
    audio_data = await audio.read()
    if not audio_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio file is empty"
        )
    
    if len(audio_data) > MAX_AUDIO_SIZE_BYTES:
        max_size_mb = MAX_AUDIO_SIZE_BYTES / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size: {max_size_mb:g}MB"
        )
    
    chunk = recording_service.upload_chunk(
        db,
        current_user["id"],
        recording_id,
        chunk_index=chunk_index,
        is_last_chunk=is_last_chunk,
        audio_data=audio_data,
        mime_type=mime_type
    )
    
    return ApiResponse(
        message="Chunk uploaded successfully",
        data=ChunkUploadResponse(id=chunk.id, chunk_index=chunk.chunk_index, size=chunk.size)
    )


@router.get("", response_model=ApiResponse[List[RecordingListItem]])
async def list_recordings(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List all recordings belonging to the authenticated user, newest first.
    Returns recordings with chunk count and no audio data.
    """
    rows = recording_service.get_user_recordings(db, current_user["id"])
    
    result = [
        RecordingListItem(**_recording_fields(recording), chunk_count=chunk_count)
        for recording, chunk_count in rows
    ]
    
    return ApiResponse(message="Recordings retrieved successfully", data=result)


@router.get("/{recording_id}", response_model=ApiResponse[RecordingDetailResponse])
async def get_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a recording with its chunk metadata."""
    recording = recording_service.get_recording(db, recording_id, current_user["id"])
    
    return ApiResponse(
        message="Recording retrieved successfully",
        data=_recording_detail(recording)
    )


@router.get("/{recording_id}/stream")
async def stream_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return the recording's audio bytes for playback."""
    logger.info("Streaming recording %s for user %s", recording_id, current_user["id"])
    
    audio_data, mime_type = recording_service.stream_recording(db, recording_id, current_user["id"])
    
    return Response(
        content=audio_data,
        media_type=mime_type,
        headers={
            "Content-Length": str(len(audio_data)),
            "Accept-Ranges": "bytes",
            "Cache-Control": "no-cache",
        }
    )


@router.post("/{recording_id}/complete", response_model=ApiResponse[RecordingDetailResponse])
async def complete_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark the recording as completed and recompute its size and duration."""
    recording = recording_service.complete_recording(db, recording_id, current_user["id"])
    
    return ApiResponse(message="Recording completed", data=_recording_detail(recording))


@router.post("/{recording_id}/cancel", response_model=ApiResponse[None])
async def cancel_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel an active recording. Stored chunks are kept."""
    result = recording_service.cancel_recording(db, recording_id, current_user["id"])
    
    return ApiResponse(message=result["message"])


@router.delete("/{recording_id}", response_model=ApiResponse[None])
async def delete_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a recording and all of its chunks."""
    result = recording_service.delete_recording(db, recording_id, current_user["id"])
    
    return ApiResponse(message=result["message"])


@router.get("/{recording_id}/debug", response_model=ApiResponse[RecordingDiagnostics])
async def debug_recording(
    recording_id: UUID,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Inspect what is stored for a recording's chunks."""
    diagnostics = recording_service.get_recording_diagnostics(db, recording_id, current_user["id"])
    
    return ApiResponse(
        message="Recording diagnostics retrieved",
        data=RecordingDiagnostics.model_validate(diagnostics)
    )
