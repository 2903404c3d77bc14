"""
Tests for the client-side recorder state machine
"""
import io
import wave

import pytest

from client.recorder import AudioRecorder, RecorderError, RecorderState


class FakeSource:
    sample_rate = 8000
    channels = 1
    sample_width = 2

    def __init__(self, pcm=b"\x01\x00" * 8000, fail_on_open=False):
        self.pcm = pcm
        self.fail_on_open = fail_on_open
        self.events = []

    def open(self):
        self.events.append("open")
        if self.fail_on_open:
            raise OSError("no input device")

    def pause(self):
        self.events.append("pause")

    def resume(self):
        self.events.append("resume")

    def read(self):
        self.events.append("read")
        return self.pcm

    def close(self):
        self.events.append("close")


class FakeApi:
    def __init__(self, fail_create=False):
        self.fail_create = fail_create
        self.uploads = []
        self.cancelled = []

    def create_recording(self, name=None, format=None):
        if self.fail_create:
            raise ConnectionError("backend down")
        return {"id": "rec-1", "name": name, "format": format}

    def upload_chunk(self, recording_id, audio, chunk_index=0, is_last_chunk=False,
                     mime_type="audio/webm", filename="recording.webm"):
        self.uploads.append((recording_id, audio, chunk_index, is_last_chunk, mime_type))
        return {"id": "chunk-1", "chunkIndex": chunk_index, "size": len(audio)}

    def cancel_recording(self, recording_id):
        self.cancelled.append(recording_id)
        return "Recording cancelled"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder(api, source, clock):
    return AudioRecorder(api, source_factory=lambda: source, clock=clock)


def test_start_pause_resume_stop(recorder, api, source, clock):
    assert recorder.state is RecorderState.IDLE

    assert recorder.start("memo") == "rec-1"
    assert recorder.state is RecorderState.RECORDING

    clock.now = 3.0
    recorder.pause()
    assert recorder.state is RecorderState.PAUSED

    clock.now = 10.0
    recorder.resume()
    clock.now = 12.0
    assert recorder.elapsed == pytest.approx(5.0)

    chunk = recorder.stop()

    assert recorder.state is RecorderState.IDLE
    assert chunk["chunkIndex"] == 0
    assert source.events == ["open", "pause", "resume", "read", "close"]
    recording_id, audio, index, last, mime_type = api.uploads[0]
    assert (recording_id, index, last, mime_type) == ("rec-1", 0, True, "audio/wav")
    with wave.open(io.BytesIO(audio), "rb") as wf:
        assert wf.getframerate() == 8000
        assert wf.getnchannels() == 1
        assert wf.readframes(wf.getnframes()) == source.pcm


def test_invalid_events_raise(recorder):
    with pytest.raises(RecorderError):
        recorder.pause()
    with pytest.raises(RecorderError):
        recorder.resume()
    with pytest.raises(RecorderError):
        recorder.stop()

    recorder.start()
    with pytest.raises(RecorderError):
        recorder.start()
    with pytest.raises(RecorderError):
        recorder.resume()


def test_source_released_when_recording_cannot_be_created(source, clock):
    recorder = AudioRecorder(FakeApi(fail_create=True), source_factory=lambda: source, clock=clock)

    with pytest.raises(ConnectionError):
        recorder.start()

    assert source.events == ["open", "close"]
    assert recorder.state is RecorderState.IDLE


def test_source_released_when_device_fails(api, clock):
    source = FakeSource(fail_on_open=True)
    recorder = AudioRecorder(api, source_factory=lambda: source, clock=clock)

    with pytest.raises(OSError):
        recorder.start()

    assert source.events == ["open", "close"]
    assert recorder.state is RecorderState.IDLE


def test_cancel_releases_and_cancels_on_server(recorder, api, source):
    recorder.start()
    recorder.pause()

    recorder.cancel()

    assert recorder.state is RecorderState.IDLE
    assert source.events[-1] == "close"
    assert api.cancelled == ["rec-1"]
    assert api.uploads == []


def test_stop_without_audio_cancels(api, clock):
    source = FakeSource(pcm=b"")
    recorder = AudioRecorder(api, source_factory=lambda: source, clock=clock)
    recorder.start()

    with pytest.raises(RecorderError):
        recorder.stop()

    assert source.events[-1] == "close"
    assert api.cancelled == ["rec-1"]
    assert recorder.state is RecorderState.IDLE


def test_context_manager_releases_on_error(recorder, source):
    with pytest.raises(RuntimeError):
        with recorder:
            recorder.start()
            raise RuntimeError("boom")

    assert source.events == ["open", "close"]
    assert recorder.state is RecorderState.IDLE
