"""
Recording Service - Recording sessions, chunk uploads, completion and playback

Every lookup is filtered by (recording_id, user_id): a recording owned by
somebody else is reported exactly like a missing one.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, undefer

from config import DEFAULT_AUDIO_MIME_TYPE
from models.audio_chunks import AudioChunk
from models.recordings import Recording, RecordingStatus

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "webm"

# Coarse estimate: each stored chunk counts as one second of audio
SECONDS_PER_CHUNK = 1


# ============================================
# Helper Functions
# ============================================

def get_owned_recording(db: Session, recording_id: UUID, user_id: UUID) -> Recording:
    """
    Fetch a recording belonging to the user.
    Raises 404 both when it does not exist and when another user owns it.
    """
    recording = db.query(Recording).filter(
        Recording.id == recording_id,
        Recording.user_id == user_id
    ).first()
    
    if not recording:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recording not found"
        )
    
    return recording


def _finalize(db: Session, recording: Recording) -> None:
    """Derive size/duration from the stored chunks and mark the recording COMPLETED."""
    chunk_count, total_size = db.query(
        func.count(AudioChunk.id),
        func.coalesce(func.sum(AudioChunk.size), 0)
    ).filter(AudioChunk.recording_id == recording.id).one()
    
    recording.total_size = int(total_size)
    recording.duration = float(chunk_count * SECONDS_PER_CHUNK)
    recording.status = RecordingStatus.COMPLETED.value
    recording.completed_at = datetime.now(timezone.utc)


def _not_active() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Recording is not active"
    )


# ============================================
# Operations
# ============================================

def create_recording(
    db: Session,
    user_id: UUID,
    name: Optional[str] = None,
    format: Optional[str] = None
) -> Recording:
    """Create a new recording session in ACTIVE status."""
    recording = Recording(
        user_id=user_id,
        name=name,
        format=format or DEFAULT_FORMAT,
        status=RecordingStatus.ACTIVE.value
    )
    
    try:
        db.add(recording)
        db.commit()
        db.refresh(recording)
    except Exception:
        db.rollback()
        logger.exception("Failed to create recording for user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create recording"
        )
    
    logger.info("Created recording %s for user %s", recording.id, user_id)
    return recording


def upload_chunk(
    db: Session,
    user_id: UUID,
    recording_id: UUID,
    chunk_index: int,
    is_last_chunk: bool,
    audio_data: bytes,
    mime_type: Optional[str] = None
) -> AudioChunk:
    """
    Store an audio blob at the given index of a recording.
    
    **Flow:**
    1. Fetch the recording (ownership filtered)
    2. Reject if it is not ACTIVE
    3. Upsert the chunk keyed by (recording_id, chunk_index)
    4. Complete the recording when this is the last chunk
    
    Raises:
        HTTPException 404: Recording not found (or not owned)
        HTTPException 400: Recording is not ACTIVE
        HTTPException 500: Unexpected persistence failure
    """
    recording = get_owned_recording(db, recording_id, user_id)
    
    if recording.status != RecordingStatus.ACTIVE.value:
        raise _not_active()
    
    mime_type = mime_type or DEFAULT_AUDIO_MIME_TYPE
    
    try:
        chunk = db.query(AudioChunk).filter(
            AudioChunk.recording_id == recording_id,
            AudioChunk.chunk_index == chunk_index
        ).first()
        
        if chunk:
            # Re-upload of the same index overwrites the stored blob
            chunk.audio_data = audio_data
            chunk.size = len(audio_data)
            chunk.mime_type = mime_type
        else:
            chunk = AudioChunk(
                recording_id=recording_id,
                chunk_index=chunk_index,
                audio_data=audio_data,
                size=len(audio_data),
                mime_type=mime_type
            )
            db.add(chunk)
        db.flush()
        
        if is_last_chunk:
            _finalize(db, recording)
        
        db.commit()
        db.refresh(chunk)
    except Exception:
        db.rollback()
        logger.exception("Failed to store chunk %s of recording %s", chunk_index, recording_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload chunk"
        )
    
    logger.info(
        "Stored chunk %s of recording %s (%s bytes, last=%s)",
        chunk_index, recording_id, chunk.size, is_last_chunk
    )
    return chunk


def complete_recording(db: Session, recording_id: UUID, user_id: UUID) -> Recording:
    """
    Mark a recording as COMPLETED, computing total size and estimated duration.
    
    An already completed recording is returned unchanged.
    
    Raises:
        HTTPException 404: Recording not found (or not owned)
        HTTPException 400: Recording was cancelled
    """
    recording = get_owned_recording(db, recording_id, user_id)
    
    if recording.status == RecordingStatus.COMPLETED.value:
        return get_recording(db, recording_id, user_id)
    
    if recording.status != RecordingStatus.ACTIVE.value:
        raise _not_active()
    
    try:
        _finalize(db, recording)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to complete recording %s", recording_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to complete recording"
        )
    
    logger.info("Completed recording %s", recording_id)
    return get_recording(db, recording_id, user_id)


def get_recording(db: Session, recording_id: UUID, user_id: UUID) -> Recording:
    """
    Get a recording with its chunk metadata (no audio bytes).
    Chunks are available as ``recording.chunks`` ordered by chunk_index.
    """
    return get_owned_recording(db, recording_id, user_id)


def get_recording_chunks(db: Session, recording_id: UUID, user_id: UUID) -> List[AudioChunk]:
    """Get all chunks of a recording including audio bytes, ordered by chunk_index."""
    get_owned_recording(db, recording_id, user_id)
    
    return (
        db.query(AudioChunk)
        .options(undefer(AudioChunk.audio_data))
        .filter(AudioChunk.recording_id == recording_id)
        .order_by(AudioChunk.chunk_index.asc())
        .all()
    )


def stream_recording(db: Session, recording_id: UUID, user_id: UUID) -> Tuple[bytes, str]:
    """
    Return the playable audio of a recording and its mime type.
    
    The lowest-index chunk holds the complete recording and is served as is.
    
    Raises:
        HTTPException 404: Recording not found (or not owned)
        HTTPException 400: No chunks stored or the blob is empty
    """
    chunks = get_recording_chunks(db, recording_id, user_id)
    logger.info("Found %s chunks for recording %s", len(chunks), recording_id)
    
    if not chunks:
        logger.error("No audio chunks found for recording %s", recording_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No audio chunks found for this recording. Please record new audio."
        )
    
    for chunk in chunks:
        logger.debug(
            "Chunk id=%s index=%s size=%s mime_type=%s",
            chunk.id, chunk.chunk_index, chunk.size, chunk.mime_type
        )
    
    if len(chunks) > 1:
        logger.warning(
            "Recording %s has %s chunks; serving chunk %s only",
            recording_id, len(chunks), chunks[0].chunk_index
        )
    
    audio_chunk = chunks[0]
    if not audio_chunk.audio_data:
        logger.error("Audio chunk %s has no audio data", audio_chunk.id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio data is corrupted or missing"
        )
    
    return audio_chunk.audio_data, audio_chunk.mime_type or DEFAULT_AUDIO_MIME_TYPE


def delete_recording(db: Session, recording_id: UUID, user_id: UUID) -> dict:
    """Delete a recording; its chunks are removed by cascade."""
    recording = get_owned_recording(db, recording_id, user_id)
    
    try:
        db.delete(recording)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to delete recording %s", recording_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete recording"
        )
    
    logger.info("Deleted recording %s", recording_id)
    return {"message": "Recording deleted successfully"}


def cancel_recording(db: Session, recording_id: UUID, user_id: UUID) -> dict:
    """
    Cancel an active recording (status FAILED, nothing is deleted).
    
    Raises:
        HTTPException 400: Recording already completed
    """
    recording = get_owned_recording(db, recording_id, user_id)
    
    if recording.status == RecordingStatus.COMPLETED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Completed recordings cannot be cancelled"
        )
    
    if recording.status != RecordingStatus.FAILED.value:
        try:
            recording.status = RecordingStatus.FAILED.value
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to cancel recording %s", recording_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to cancel recording"
            )
        logger.info("Cancelled recording %s", recording_id)
    
    return {"message": "Recording cancelled"}


def get_user_recordings(db: Session, user_id: UUID) -> List[Tuple[Recording, int]]:
    """List the user's recordings, newest first, with their chunk count."""
    return (
        db.query(
            Recording,
            func.count(AudioChunk.id).label("chunk_count")
        )
        .outerjoin(AudioChunk, Recording.id == AudioChunk.recording_id)
        .filter(Recording.user_id == user_id)
        .group_by(Recording.id)
        .order_by(Recording.created_at.desc(), Recording.id.desc())
        .all()
    )


def get_recording_diagnostics(db: Session, recording_id: UUID, user_id: UUID) -> dict:
    """Summarize a recording next to what is actually stored for its chunks."""
    recording = get_recording(db, recording_id, user_id)
    chunks = get_recording_chunks(db, recording_id, user_id)
    
    return {
        "recording": {
            "id": recording.id,
            "name": recording.name,
            "status": recording.status,
            "duration": recording.duration,
            "format": recording.format,
            "total_size": recording.total_size,
            "chunks_count": len(recording.chunks),
        },
        "chunks": [
            {
                "id": chunk.id,
                "chunk_index": chunk.chunk_index,
                "size": chunk.size,
                "mime_type": chunk.mime_type,
                "has_audio_data": bool(chunk.audio_data),
            }
            for chunk in chunks
        ],
        "total_chunks": len(chunks),
        "total_size": sum(chunk.size for chunk in chunks),
    }
