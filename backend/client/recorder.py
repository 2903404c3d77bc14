"""
Audio Recorder - microphone capture state machine driving the upload API

States: IDLE -> RECORDING <-> PAUSED -> IDLE.
The recorder owns at most one capture source at a time and releases it on
stop, cancel, close and whenever start fails.
"""
import enum
import io
import logging
import time
import wave
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
WAV_MIME_TYPE = "audio/wav"


class RecorderState(str, enum.Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    PAUSED = "PAUSED"


class RecorderError(Exception):
    """Event not allowed in the current state, or nothing was captured"""


class MicrophoneSource:
    """Default capture source: 16-bit PCM from the default input device."""

    sample_width = 2

    def __init__(self, sample_rate: int = DEFAULT_SAMPLE_RATE, channels: int = 1,
                 device: Optional[int] = None):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self._stream = None
        self._frames: list[bytes] = []

    def _callback(self, indata, frames, time_info, status):
        if status:
            logger.warning("Input stream status: %s", status)
        self._frames.append(bytes(indata))

    def open(self) -> None:
        import sounddevice as sd

        self._frames = []
        self._stream = sd.RawInputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="int16",
            device=self.device,
            callback=self._callback,
        )
        self._stream.start()
        logger.info("Microphone opened: device=%s, %sHz", self.device, self.sample_rate)

    def pause(self) -> None:
        self._stream.stop()

    def resume(self) -> None:
        self._stream.start()

    def read(self) -> bytes:
        return b"".join(self._frames)

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.stop()
            stream.close()
            logger.info("Microphone released")


def encode_wav(pcm: bytes, sample_rate: int, channels: int, sample_width: int = 2) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buffer.getvalue()


class AudioRecorder:
    def __init__(self, api_client, source_factory: Callable = MicrophoneSource,
                 clock: Callable[[], float] = time.monotonic):
        self.api = api_client
        self._source_factory = source_factory
        self._clock = clock
        self._state = RecorderState.IDLE
        self._source = None
        self._recording_id: Optional[str] = None
        self._elapsed = 0.0
        self._resumed_at: Optional[float] = None

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def recording_id(self) -> Optional[str]:
        return self._recording_id

    @property
    def elapsed(self) -> float:
        """Seconds spent in RECORDING since start (pauses excluded)."""
        if self._resumed_at is None:
            return self._elapsed
        return self._elapsed + (self._clock() - self._resumed_at)

    def _require(self, event: str, *states: RecorderState) -> None:
        if self._state not in states:
            raise RecorderError(f"Cannot {event} while {self._state.value}")

    def _stop_timer(self) -> None:
        if self._resumed_at is not None:
            self._elapsed += self._clock() - self._resumed_at
            self._resumed_at = None

    def _release(self) -> None:
        source, self._source = self._source, None
        self._stop_timer()
        self._state = RecorderState.IDLE
        if source is not None:
            source.close()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def start(self, name: Optional[str] = None) -> str:
        """Open the capture source and create the server-side recording."""
        self._require("start", RecorderState.IDLE)

        source = self._source_factory()
        try:
            source.open()
            recording = self.api.create_recording(
                name=name or f"Recording {datetime.now():%Y-%m-%d %H:%M:%S}",
                format="wav",
            )
        except Exception:
            logger.exception("Failed to start recording")
            source.close()
            raise

        self._source = source
        self._recording_id = recording["id"]
        self._elapsed = 0.0
        self._resumed_at = self._clock()
        self._state = RecorderState.RECORDING
        logger.info("Recording %s started", self._recording_id)
        return self._recording_id

    def pause(self) -> None:
        self._require("pause", RecorderState.RECORDING)
        self._source.pause()
        self._stop_timer()
        self._state = RecorderState.PAUSED

    def resume(self) -> None:
        self._require("resume", RecorderState.PAUSED)
        self._source.resume()
        self._resumed_at = self._clock()
        self._state = RecorderState.RECORDING

    def stop(self) -> dict:
        """
        Stop capturing and upload everything as the single, final chunk.

        Returns the uploaded chunk ``{id, chunkIndex, size}``. When nothing was
        captured the server-side recording is cancelled and RecorderError raised.
        """
        self._require("stop", RecorderState.RECORDING, RecorderState.PAUSED)

        source = self._source
        try:
            pcm = source.read()
        finally:
            self._release()

        recording_id = self._recording_id
        if not pcm:
            self.api.cancel_recording(recording_id)
            raise RecorderError("No audio captured")

        audio = encode_wav(pcm, source.sample_rate, source.channels, source.sample_width)
        chunk = self.api.upload_chunk(
            recording_id,
            audio,
            chunk_index=0,
            is_last_chunk=True,
            mime_type=WAV_MIME_TYPE,
            filename="recording.wav",
        )
        logger.info("Recording %s uploaded (%s bytes, %.1fs)", recording_id, len(audio), self._elapsed)
        return chunk

    def cancel(self) -> None:
        """Discard the capture and mark the server-side recording as cancelled."""
        self._require("cancel", RecorderState.RECORDING, RecorderState.PAUSED)
        self._release()
        self.api.cancel_recording(self._recording_id)

    def close(self) -> None:
        """Release the capture source without contacting the server."""
        if self._state is not RecorderState.IDLE:
            self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
