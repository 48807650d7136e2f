# HueCue Frame Slot

"""
Holds the most recently decoded frame.

The frame source is the only writer. The playback tick and the histogram
tick both read. A publish replaces the reference wholesale and the published
array is frozen (writeable=False), so a reader either sees the previous frame
or the new one, never a half-updated buffer.
"""

import threading
from typing import Optional, Tuple

import numpy as np


class FrameSlot:
    """
    Single-writer / multi-reader cell for the current frame.

    Usage:
        slot = FrameSlot()
        slot.publish(frame_bgr, index=0)
        frame = slot.get()          # read-only ndarray or None
        frame, index, version = slot.snapshot()
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._index: int = -1
        self._version: int = 0

    def publish(self, frame: np.ndarray, index: int) -> np.ndarray:
        """
        Replace the current frame.

        The slot takes ownership of the array. A view into another buffer is
        copied first, since freezing the view would not freeze its base.

        Returns:
            The frozen array now held by the slot.
        """
        if not frame.flags.owndata:
            frame = np.array(frame, copy=True)
        frame.flags.writeable = False

        with self._lock:
            self._frame = frame
            self._index = int(index)
            self._version += 1
        return frame

    def clear(self) -> None:
        """Drop the current frame."""
        with self._lock:
            self._frame = None
            self._index = -1
            self._version += 1

    def get(self) -> Optional[np.ndarray]:
        """Current frame, or None if nothing has been published."""
        with self._lock:
            return self._frame

    def snapshot(self) -> Tuple[Optional[np.ndarray], int, int]:
        """(frame, frame_index, version) read under one lock."""
        with self._lock:
            return self._frame, self._index, self._version

    @property
    def index(self) -> int:
        """Frame index of the current frame (-1 when empty)."""
        with self._lock:
            return self._index

    @property
    def version(self) -> int:
        """Incremented on every publish or clear."""
        with self._lock:
            return self._version

    def is_empty(self) -> bool:
        with self._lock:
            return self._frame is None
