"""
Client side of the voice recorder: HTTP API client and microphone recorder
"""
from .api_client import ApiClient, ApiError
from .recorder import AudioRecorder, RecorderError, RecorderState

__all__ = [
    "ApiClient",
    "ApiError",
    "AudioRecorder",
    "RecorderError",
    "RecorderState",
]
