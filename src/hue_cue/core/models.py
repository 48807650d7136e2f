from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Tuple

import numpy as np


class PlaybackState(Enum):
    """Playback driver state."""
    STOPPED = auto()
    PLAYING = auto()


@dataclass(frozen=True)
class VideoMetadata:
    """Properties of an open video stream."""
    path: str
    name: str
    width: int
    height: int
    fps: float
    frame_count: int
    duration: float      # Seconds

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True, eq=False)
class Histogram:
    """Per-channel intensity counts for a single frame (256 bins each by default).

    Compared and hashed by identity, like the frames it is computed from.
    """
    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray

    @property
    def channels(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Counts in presentation order (R, G, B)."""
        return (self.red, self.green, self.blue)

    @property
    def total(self) -> int:
        """Pixel count of the source frame."""
        return int(self.red.sum())

    def peaks(self) -> Tuple[int, int, int]:
        """Bin index of the tallest bin in each channel."""
        return tuple(int(np.argmax(c)) for c in self.channels)
