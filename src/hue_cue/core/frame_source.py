# HueCue Frame Source

"""
Video decoding with OpenCV for sequential playback and clamped seeking.
This module provides the FrameSource class that wraps cv2.VideoCapture.

Key features:
- All-or-nothing open (a failed open leaves the previous stream untouched)
- First frame decoded eagerly on open
- End-of-stream reported as None, decoder faults as DecodeError
- Second-based seeking clamped to the valid frame range
- Resource cleanup (idempotent close, context manager)
"""

from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from hue_cue.utils import config
from hue_cue.utils.logging import get_logger
from .errors import DecodeError, UnopenableStreamError, VideoNotFoundError
from .frame_slot import FrameSlot
from .models import VideoMetadata

logger = get_logger(__name__)


def is_supported_video(path: Union[str, Path]) -> bool:
    """True if the file extension is one the file picker advertises."""
    return Path(path).suffix.lower() in config.video_extensions()


class FrameSource:
    """
    Owns the open video stream and the most recently read frame.

    Frames are BGR numpy arrays with shape (height, width, 3). Every frame
    read is published to ``frame_slot`` and becomes the current frame.

    Usage:
        source = FrameSource()
        source.open("clip.mp4")          # frame 0 is now current
        frame = source.current_frame
        while frame is not None:
            show(frame)
            frame = source.read_next()
        source.close()

    Or as context manager:
        with FrameSource("clip.mp4") as source:
            source.seek_by(5.0)
    """

    def __init__(self, video_path: Optional[Union[str, Path]] = None,
                 frame_slot: Optional[FrameSlot] = None):
        self._cap: Optional[cv2.VideoCapture] = None
        self._path: Optional[Path] = None
        self._fps: float = 0.0
        self._frame_count: int = 0
        self._count_known: bool = False
        self._width: int = 0
        self._height: int = 0
        self._position: int = 0
        self._slot = frame_slot if frame_slot is not None else FrameSlot()

        if video_path is not None:
            self.open(video_path)

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def path(self) -> Optional[str]:
        return str(self._path) if self._path is not None else None

    @property
    def name(self) -> Optional[str]:
        """File name of the open video."""
        return self._path.name if self._path is not None else None

    @property
    def fps(self) -> float:
        """Frames per second."""
        return self._fps

    @property
    def frame_count(self) -> int:
        """
        Total number of frames.

        The container's count when it reports one, otherwise the number of
        frames seen so far (grows as the stream is read).
        """
        return self._frame_count

    @property
    def frame_count_known(self) -> bool:
        """False when the container did not report a frame count."""
        return self._count_known

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def duration(self) -> float:
        """Video duration in seconds."""
        if self._fps > 0:
            return self._frame_count / self._fps
        return 0.0

    @property
    def position(self) -> int:
        """Index of the current frame."""
        return self._position

    @property
    def last_index(self) -> int:
        """Highest valid frame index."""
        return max(0, self._frame_count - 1)

    @property
    def frame_slot(self) -> FrameSlot:
        return self._slot

    @property
    def current_frame(self) -> Optional[np.ndarray]:
        """Most recently read frame (read-only), or None."""
        return self._slot.get()

    @property
    def metadata(self) -> Optional[VideoMetadata]:
        """Get video metadata as a dataclass, or None when closed."""
        if not self.is_open:
            return None
        return VideoMetadata(
            path=self.path,
            name=self.name,
            width=self._width,
            height=self._height,
            fps=self._fps,
            frame_count=self._frame_count,
            duration=self.duration,
        )

    # ========================================================================
    # Open / Close
    # ========================================================================

    def open(self, video_path: Union[str, Path]) -> np.ndarray:
        """
        Open a video file and decode its first frame.

        Args:
            video_path: Path to the video file.

        Returns:
            The first frame.

        Raises:
            VideoNotFoundError: If the file does not exist.
            UnopenableStreamError: If the decoder rejects the file or it
                yields no frames.
        """
        path = Path(video_path)
        if not path.is_file():
            raise VideoNotFoundError(f"Video not found: {video_path}")

        # Build the new capture on the side so a failure leaves the current
        # stream as it was.
        cap = cv2.VideoCapture(str(path))
        try:
            if not cap.isOpened():
                raise UnopenableStreamError(f"Cannot open video: {video_path}")

            ok, frame = cap.read()
            if not ok or frame is None or frame.size == 0:
                raise UnopenableStreamError(f"No decodable frames in: {video_path}")
        except UnopenableStreamError:
            cap.release()
            raise
        except cv2.error as e:
            cap.release()
            raise UnopenableStreamError(f"Cannot open video: {video_path} ({e})") from e

        fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        if fps <= 0:
            fps = float(config.get("fallback_fps", 30.0))
        frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))

        self._release()
        self._cap = cap
        self._path = path
        self._fps = float(fps)
        self._count_known = frame_count > 0
        self._frame_count = frame_count if self._count_known else 1
        self._height, self._width = frame.shape[:2]
        self._position = 0
        frame = self._slot.publish(frame, 0)

        logger.info(
            f"Opened {path.name}: {self._width}x{self._height} "
            f"@ {self._fps:.2f} fps, {self._frame_count} frames"
        )
        return frame

    def close(self) -> None:
        """Close the video and release the decoder. Safe to call twice."""
        if self._cap is None and self._path is None:
            return
        name = self.name
        self._release()
        self._path = None
        self._fps = 0.0
        self._frame_count = 0
        self._count_known = False
        self._width = 0
        self._height = 0
        self._position = 0
        self._slot.clear()
        logger.info(f"Closed {name}")

    def _release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    # ========================================================================
    # Reading
    # ========================================================================

    def read_next(self) -> Optional[np.ndarray]:
        """
        Advance the stream by one frame.

        Returns:
            The new frame, or None at end of stream (or when nothing is open).

        Raises:
            DecodeError: If the decoder fails mid-stream.
        """
        if not self.is_open:
            return None
        if self._count_known and self._position >= self.last_index:
            return None

        try:
            ok, frame = self._cap.read()
        except cv2.error as e:
            raise DecodeError(f"Failed to decode frame {self._position + 1}: {e}") from e

        if not ok or frame is None or frame.size == 0:
            return None

        self._position += 1
        if not self._count_known:
            self._frame_count = max(self._frame_count, self._position + 1)
        return self._slot.publish(frame, self._position)

    def seek_by(self, delta_seconds: float) -> Optional[np.ndarray]:
        """
        Move by a signed number of seconds and decode one frame there.

        The offset is converted with the stream's frame rate and the target
        is clamped to [0, frame_count - 1]. Without a reported frame count
        only the lower bound applies until the stream end is found.

        Returns:
            The frame at the new position, or None if nothing is open or the
            read failed.

        Raises:
            DecodeError: If the decoder fails.
        """
        if not self.is_open:
            return None

        delta_frames = int(round(delta_seconds * self._fps))
        return self.seek_to(self._position + delta_frames)

    def seek_to(self, frame_index: int) -> Optional[np.ndarray]:
        """
        Jump to an absolute frame index (clamped) and decode it.

        Returns:
            The frame at the new position, or None if nothing is open or the
            read failed.

        Raises:
            DecodeError: If the decoder fails.
        """
        if not self.is_open:
            return None

        target = max(0, int(frame_index))
        if self._count_known:
            target = min(self.last_index, target)

        try:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, target)
            # The stream now sits at target even if the decode below fails
            self._position = target
            ok, frame = self._cap.read()
        except cv2.error as e:
            raise DecodeError(f"Failed to decode frame {target}: {e}") from e

        if not ok or frame is None or frame.size == 0:
            if not self._count_known and target > self.last_index:
                # Past the end of a stream with no reported length
                logger.debug(f"Frame {target} is past the end, using {self.last_index}")
                return self.seek_to(self.last_index)
            logger.warning(f"Seek to frame {target} returned no frame")
            return None

        if not self._count_known:
            self._frame_count = max(self._frame_count, target + 1)
        return self._slot.publish(frame, target)

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self._release()
