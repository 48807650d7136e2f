# HueCue Playback Driver

"""
Timer-driven playback with a periodically refreshed histogram.

Two independent QTimers run on the Qt event loop:
- playback timer (~30 Hz): while PLAYING, decode one frame and publish it
- histogram timer (1 Hz): regardless of play state, re-render the histogram
  from whatever frame is current

Both only read the frame source's FrameSlot, which is swapped wholesale on
every decode. End of stream (or a decode fault) stops playback and rewinds
to frame 0. Histogram failures fall back to a blank chart and never touch
either timer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Set, Union

import numpy as np
from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QImage

from hue_cue.core.errors import DecodeError, HueCueError
from hue_cue.core.frame_source import FrameSource
from hue_cue.core.histogram import HistogramRenderer
from hue_cue.core.models import PlaybackState
from hue_cue.ui.image_convert import bgr_to_qimage
from hue_cue.utils import config
from hue_cue.utils.logging import get_logger

logger = get_logger(__name__)


# Valid state transitions (from_state -> allowed to_states)
VALID_TRANSITIONS: Dict[PlaybackState, Set[PlaybackState]] = {
    PlaybackState.STOPPED: {PlaybackState.PLAYING},
    PlaybackState.PLAYING: {PlaybackState.STOPPED},
}


class PlaybackDriver(QObject):
    """
    Owns the frame source, the histogram renderer and both timers.

    Signals:
        frame_ready(QImage): A new frame is ready for display
        histogram_ready(QImage): A new histogram chart is ready
        playing_changed(bool): is_playing flipped
        has_video_changed(bool): A video was loaded or closed
        video_loaded(str): File name of the newly loaded video
        position_changed(int, int): (frame_index, frame_count)
        error_occurred(str): A load attempt failed
    """

    frame_ready = Signal(QImage)
    histogram_ready = Signal(QImage)
    playing_changed = Signal(bool)
    has_video_changed = Signal(bool)
    video_loaded = Signal(str)
    position_changed = Signal(int, int)
    error_occurred = Signal(str)

    def __init__(
        self,
        frame_source: Optional[FrameSource] = None,
        renderer: Optional[HistogramRenderer] = None,
        playback_interval_ms: Optional[int] = None,
        histogram_interval_ms: Optional[int] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._source = frame_source if frame_source is not None else FrameSource()
        self._renderer = renderer if renderer is not None else HistogramRenderer.from_config()
        self._state = PlaybackState.STOPPED
        self._histogram_image: Optional[np.ndarray] = None

        if playback_interval_ms is None:
            playback_interval_ms = config.get("playback_interval_ms", 33)
        if histogram_interval_ms is None:
            histogram_interval_ms = config.get("histogram_interval_ms", 1000)

        self._playback_timer = QTimer(self)
        self._playback_timer.setInterval(int(playback_interval_ms))
        self._playback_timer.timeout.connect(self.on_playback_tick)

        self._histogram_timer = QTimer(self)
        self._histogram_timer.setInterval(int(histogram_interval_ms))
        self._histogram_timer.timeout.connect(self.on_histogram_tick)

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == PlaybackState.PLAYING

    @property
    def has_video(self) -> bool:
        return self._source.is_open

    @property
    def current_video_file(self) -> Optional[str]:
        """File name of the loaded video."""
        return self._source.name

    @property
    def position(self) -> int:
        return self._source.position

    @property
    def frame_count(self) -> int:
        return self._source.frame_count

    @property
    def frame_source(self) -> FrameSource:
        return self._source

    @property
    def current_frame(self) -> Optional[np.ndarray]:
        return self._source.frame_slot.get()

    @property
    def histogram_image(self) -> Optional[np.ndarray]:
        """Last rendered histogram chart (BGR), or None."""
        return self._histogram_image

    @property
    def playback_timer(self) -> QTimer:
        return self._playback_timer

    @property
    def histogram_timer(self) -> QTimer:
        return self._histogram_timer

    # ========================================================================
    # Loading
    # ========================================================================

    def load_video(self, video_path: Union[str, Path]) -> bool:
        """
        Open a video and show its first frame and histogram.

        All-or-nothing: on failure the current video (if any) keeps playing
        as before.

        Returns:
            True if the video was loaded.
        """
        try:
            self._source.open(video_path)
        except HueCueError as e:
            logger.warning(f"Failed to load video: {e}")
            self.error_occurred.emit(str(e))
            return False

        self.pause()
        self._publish_current_frame()
        self.refresh_histogram()
        self._histogram_timer.start()

        self.video_loaded.emit(self._source.name or "")
        self.has_video_changed.emit(True)
        return True

    def close(self) -> None:
        """Stop both timers and release the video. Safe to call twice."""
        self.pause()
        self._histogram_timer.stop()
        had_video = self._source.is_open
        self._source.close()
        self._histogram_image = None
        if had_video:
            self.has_video_changed.emit(False)

    # ========================================================================
    # Playback Control
    # ========================================================================

    def play(self) -> None:
        """Start playback. No-op without a video or when already playing."""
        if not self.has_video:
            return
        if self._transition_to(PlaybackState.PLAYING):
            self._playback_timer.start()

    def pause(self) -> None:
        """Pause playback at the current frame."""
        if self._transition_to(PlaybackState.STOPPED):
            self._playback_timer.stop()

    def toggle_play_pause(self) -> None:
        """Toggle between play and pause."""
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        """Stop playback and return to start."""
        self.pause()
        self._rewind()

    def seek_by(self, delta_seconds: float) -> None:
        """Jump by a signed number of seconds (clamped to the video)."""
        try:
            frame = self._source.seek_by(delta_seconds)
        except DecodeError:
            logger.warning("Seek failed", exc_info=True)
            return
        if frame is not None:
            self._publish_current_frame()

    # ========================================================================
    # Timer callbacks
    # ========================================================================

    def on_playback_tick(self) -> None:
        """Playback timer callback - decode and show the next frame."""
        if not self.is_playing:
            return
        if not self.has_video:
            self.pause()
            return

        try:
            frame = self._source.read_next()
        except DecodeError:
            logger.warning("Decode failed, treating as end of stream", exc_info=True)
            frame = None

        if frame is None:
            self._on_end_of_stream()
            return

        self._publish_current_frame()

    def on_histogram_tick(self) -> None:
        """Histogram timer callback - runs whether or not playback is active."""
        logger.debug(f"Histogram tick at frame {self.position}")
        self.refresh_histogram()

    def refresh_histogram(self) -> bool:
        """
        Re-render the histogram from the current frame.

        Returns:
            False if there is no current frame.
        """
        frame = self._source.frame_slot.get()
        if frame is None:
            return False

        self._histogram_image = self._renderer.render(frame)
        self.histogram_ready.emit(bgr_to_qimage(self._histogram_image))
        return True

    # ========================================================================
    # Internal
    # ========================================================================

    def _on_end_of_stream(self) -> None:
        logger.info("End of stream, rewinding to start")
        self.pause()
        self._rewind()

    def _rewind(self) -> None:
        if not self.has_video:
            return
        try:
            frame = self._source.seek_to(0)
        except DecodeError:
            logger.warning("Rewind failed", exc_info=True)
            return
        if frame is not None:
            self._publish_current_frame()

    def _publish_current_frame(self) -> None:
        frame, index, _ = self._source.frame_slot.snapshot()
        if frame is None:
            return
        self.frame_ready.emit(bgr_to_qimage(frame))
        self.position_changed.emit(index, self._source.frame_count)

    def _transition_to(self, new_state: PlaybackState) -> bool:
        if new_state not in VALID_TRANSITIONS.get(self._state, set()):
            return False
        self._state = new_state
        logger.debug(f"Playback state -> {new_state.name}")
        self.playing_changed.emit(new_state == PlaybackState.PLAYING)
        return True
