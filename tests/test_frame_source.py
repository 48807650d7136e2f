"""
Unit tests for FrameSource.

Uses small MJPG clips written by conftest.write_test_video
(30 frames at 10 fps, 64x48 unless stated otherwise).
"""

import cv2
import numpy as np
import pytest

from hue_cue.core.errors import (
    DecodeError,
    HueCueError,
    UnopenableStreamError,
    VideoNotFoundError,
)
from hue_cue.core.frame_source import FrameSource, is_supported_video
from hue_cue.core.models import VideoMetadata

from conftest import TEST_FPS, TEST_FRAME_COUNT, TEST_SIZE


class TestOpen:
    """Tests for opening videos."""

    def test_open_reads_first_frame(self, video_path):
        source = FrameSource()
        frame = source.open(video_path)

        assert source.is_open
        assert source.position == 0
        assert frame is source.current_frame
        assert frame.shape == (TEST_SIZE[1], TEST_SIZE[0], 3)
        source.close()

    def test_metadata(self, video_path):
        with FrameSource(video_path) as source:
            meta = source.metadata
            assert isinstance(meta, VideoMetadata)
            assert meta.name == "clip.avi"
            assert meta.width == TEST_SIZE[0]
            assert meta.height == TEST_SIZE[1]
            assert meta.fps == pytest.approx(TEST_FPS)
            assert meta.frame_count == TEST_FRAME_COUNT
            assert meta.duration == pytest.approx(TEST_FRAME_COUNT / TEST_FPS)

    def test_missing_file_raises_not_found(self, tmp_path):
        source = FrameSource()
        with pytest.raises(VideoNotFoundError):
            source.open(tmp_path / "nope.mp4")
        assert not source.is_open

    def test_not_found_is_file_not_found_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FrameSource(tmp_path / "nope.mp4")

    def test_garbage_file_raises_unopenable(self, garbage_video_path):
        source = FrameSource()
        with pytest.raises(UnopenableStreamError):
            source.open(garbage_video_path)
        assert not source.is_open
        assert source.current_frame is None

    def test_failed_open_keeps_previous_video(self, video_path, garbage_video_path, tmp_path):
        """A load attempt is all-or-nothing."""
        source = FrameSource(video_path)
        source.read_next()
        source.read_next()
        frame_before = source.current_frame

        with pytest.raises(HueCueError):
            source.open(garbage_video_path)
        with pytest.raises(HueCueError):
            source.open(tmp_path / "missing.avi")

        assert source.is_open
        assert source.name == "clip.avi"
        assert source.position == 2
        assert source.current_frame is frame_before

        # Stream still advances from where it was
        assert source.read_next() is not None
        assert source.position == 3
        source.close()

    def test_open_replaces_previous_video(self, video_path, short_video_path):
        source = FrameSource(video_path)
        source.seek_to(10)
        source.open(short_video_path)
        assert source.name == "short.avi"
        assert source.position == 0
        assert source.frame_count == 5
        source.close()


class TestReadNext:
    """Tests for sequential reads."""

    def test_advances_one_frame(self, video_path):
        with FrameSource(video_path) as source:
            frame = source.read_next()
            assert frame is not None
            assert source.position == 1
            assert source.frame_slot.index == 1

    def test_frames_are_read_only(self, video_path):
        with FrameSource(video_path) as source:
            frame = source.read_next()
            assert not frame.flags.writeable

    def test_end_of_stream_returns_none(self, short_video_path):
        with FrameSource(short_video_path) as source:
            reads = 0
            while source.read_next() is not None:
                reads += 1
            assert reads == 4  # frame 0 was read by open()
            assert source.position == 4
            assert source.read_next() is None

    def test_read_when_closed_returns_none(self):
        assert FrameSource().read_next() is None

    def test_decoder_fault_raises_decode_error(self, video_path):
        class BrokenCapture:
            def isOpened(self):
                return True

            def read(self):
                raise cv2.error("corrupt packet")

            def release(self):
                pass

        source = FrameSource(video_path)
        source._release()
        source._cap = BrokenCapture()
        with pytest.raises(DecodeError):
            source.read_next()


class TestSeek:
    """Tests for seek_by / seek_to."""

    def test_seek_by_converts_seconds(self, video_path):
        with FrameSource(video_path) as source:
            source.seek_by(1.0)
            assert source.position == int(TEST_FPS)

            source.seek_by(-0.5)
            assert source.position == int(TEST_FPS) - 5

    def test_seek_by_clamps_below_zero(self, video_path):
        with FrameSource(video_path) as source:
            source.seek_by(0.5)
            frame = source.seek_by(-60.0)
            assert frame is not None
            assert source.position == 0

    def test_seek_by_clamps_past_end(self, video_path):
        with FrameSource(video_path) as source:
            frame = source.seek_by(3600.0)
            assert frame is not None
            assert source.position == TEST_FRAME_COUNT - 1

    def test_seek_publishes_frame(self, video_path):
        with FrameSource(video_path) as source:
            frame = source.seek_by(1.0)
            assert source.current_frame is frame
            assert source.frame_slot.index == source.position

    def test_seek_by_when_closed_is_noop(self):
        source = FrameSource()
        assert source.seek_by(5.0) is None
        assert source.position == 0

    def test_seek_to_clamps(self, video_path):
        with FrameSource(video_path) as source:
            source.seek_to(-3)
            assert source.position == 0
            source.seek_to(10_000)
            assert source.position == TEST_FRAME_COUNT - 1

    def test_read_continues_after_seek(self, video_path):
        with FrameSource(video_path) as source:
            source.seek_to(10)
            source.read_next()
            assert source.position == 11


class TestClose:
    """Tests for resource release."""

    def test_close_is_idempotent(self, video_path):
        source = FrameSource(video_path)
        source.close()
        source.close()
        assert not source.is_open
        assert source.current_frame is None
        assert source.metadata is None

    def test_reopen_after_close(self, video_path):
        """No stale handle after close."""
        source = FrameSource(video_path)
        source.close()

        frame = source.open(video_path)
        assert frame is not None
        assert source.is_open
        assert source.position == 0
        source.close()

    def test_second_source_on_same_path(self, video_path):
        first = FrameSource(video_path)
        first.close()
        second = FrameSource(video_path)
        assert second.is_open
        second.close()

    def test_context_manager_closes(self, video_path):
        with FrameSource(video_path) as source:
            assert source.is_open
        assert not source.is_open


class TestSupportedVideo:
    """Tests for the advertised extension list."""

    @pytest.mark.parametrize("name", ["a.mp4", "b.AVI", "c.mov", "d.mkv", "e.wmv", "f.flv", "g.webm"])
    def test_advertised_extensions(self, name):
        assert is_supported_video(name)

    @pytest.mark.parametrize("name", ["a.txt", "b.gif", "noext"])
    def test_other_extensions(self, name):
        assert not is_supported_video(name)


class FakeCapture:
    """Stand-in for cv2.VideoCapture with a configurable reported frame count."""

    def __init__(self, actual_frames=50, reported_count=0, fps=10.0):
        self.actual_frames = actual_frames
        self.reported_count = reported_count
        self.fps = fps
        self.pos = 0
        self.released = False

    def isOpened(self):
        return not self.released

    def get(self, prop):
        if prop == cv2.CAP_PROP_FPS:
            return self.fps
        if prop == cv2.CAP_PROP_FRAME_COUNT:
            return self.reported_count
        return 0

    def set(self, prop, value):
        self.pos = int(value)
        return True

    def read(self):
        if self.pos >= self.actual_frames:
            return False, None
        frame = np.full((4, 4, 3), self.pos % 256, dtype=np.uint8)
        self.pos += 1
        return True, frame

    def release(self):
        self.released = True


@pytest.fixture
def fake_capture(monkeypatch):
    """Patch cv2.VideoCapture inside frame_source; returns a configurator."""
    settings = {}

    def configure(**kwargs):
        settings.update(kwargs)

    monkeypatch.setattr(
        "hue_cue.core.frame_source.cv2.VideoCapture",
        lambda path: FakeCapture(**settings),
    )
    return configure


class TestUnreportedFrameCount:
    """Streams whose container does not report a length."""

    def test_count_grows_while_reading(self, fake_capture, video_path):
        fake_capture(actual_frames=50, reported_count=0)
        source = FrameSource(video_path)
        assert not source.frame_count_known
        assert source.frame_count == 1

        for _ in range(20):
            assert source.read_next() is not None

        assert source.position == 20
        assert source.frame_count == 21
        assert source.position <= source.last_index

    def test_seek_forward_is_not_clamped_to_start(self, fake_capture, video_path):
        fake_capture(actual_frames=50, reported_count=0, fps=10.0)
        source = FrameSource(video_path)
        for _ in range(20):
            source.read_next()

        frame = source.seek_by(1.0)

        assert frame is not None
        assert source.position == 30
        assert source.frame_slot.index == 30
        assert source.position <= source.last_index

    def test_seek_past_end_lands_on_last_seen_frame(self, fake_capture, video_path):
        fake_capture(actual_frames=50, reported_count=0)
        source = FrameSource(video_path)
        source.seek_to(40)

        frame = source.seek_to(1000)

        assert frame is not None
        assert source.position == 40
        assert source.position <= source.last_index

    def test_reported_count_caps_reads(self, fake_capture, video_path):
        """Position never passes the last reported frame."""
        fake_capture(actual_frames=8, reported_count=5)
        source = FrameSource(video_path)
        assert source.frame_count_known

        reads = 0
        while source.read_next() is not None:
            reads += 1

        assert reads == 4
        assert source.position == source.last_index == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
