# HueCue Histogram Renderer

"""
Turns one BGR frame into a fixed-size RGB histogram chart.

Pipeline:
1. BGR -> RGB (cv2.cvtColor) so channels come out in presentation order
2. cv2.calcHist per channel, 256 bins over [0, 256) by default
3. Per-channel rescale: the tallest bin spans the full image height
4. One open polyline per channel (bins - 1 segments) on a black canvas

Rendering never raises. Any failure, including an empty or malformed frame,
produces the all-black chart of the same size so the playback loop keeps
running.
"""

from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from hue_cue.utils import config
from hue_cue.utils.logging import get_logger
from .errors import RenderError
from .models import Histogram

logger = get_logger(__name__)

HIST_SIZE = 256
HIST_RANGE = [0, 256]

DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 400
DEFAULT_THICKNESS = 2

# Channel colors in BGR for OpenCV drawing
DEFAULT_COLORS_BGR: Dict[str, Tuple[int, int, int]] = {
    "red": (0, 0, 255),
    "green": (0, 255, 0),
    "blue": (255, 0, 0),
}

CHANNEL_ORDER = ("red", "green", "blue")


def _validate_frame(frame) -> None:
    if not isinstance(frame, np.ndarray):
        raise RenderError(f"Expected ndarray frame, got {type(frame).__name__}")
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise RenderError(f"Expected (H, W, 3) frame, got shape {frame.shape}")
    if frame.size == 0:
        raise RenderError("Frame is empty")
    if frame.dtype != np.uint8:
        raise RenderError(f"Expected uint8 frame, got {frame.dtype}")


def compute_histogram(frame: np.ndarray, bins: int = HIST_SIZE) -> Histogram:
    """
    Count intensity levels per channel.

    Args:
        frame: BGR uint8 image with shape (H, W, 3).
        bins: Number of equal-width bins over [0, 256).

    Returns:
        Histogram with ``bins`` int64 counts per channel, R/G/B order.

    Raises:
        RenderError: If the frame is not a non-empty 3-channel uint8 image
            or OpenCV rejects it.
    """
    _validate_frame(frame)

    try:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        counts = [
            cv2.calcHist([rgb], [channel], None, [int(bins)], HIST_RANGE)
            .ravel()
            .astype(np.int64)
            for channel in range(3)
        ]
    except cv2.error as e:
        raise RenderError(f"Histogram computation failed: {e}") from e

    return Histogram(red=counts[0], green=counts[1], blue=counts[2])


def scale_histogram(counts: np.ndarray, height: int) -> np.ndarray:
    """
    Rescale counts so the peak equals ``height``; others floor proportionally.

    An all-zero channel stays all zero.
    """
    counts = np.asarray(counts, dtype=np.int64)
    peak = int(counts.max()) if counts.size else 0
    if peak <= 0:
        return np.zeros_like(counts)
    return (counts * int(height)) // peak


def blank_histogram_image(width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> np.ndarray:
    """Uniformly black chart of the given size."""
    return np.zeros((height, width, 3), dtype=np.uint8)


class HistogramRenderer:
    """
    Renders RGB histogram charts with a fixed size and palette.

    Usage:
        renderer = HistogramRenderer()           # 512x400, stroke 2
        chart = renderer.render(frame_bgr)       # always (400, 512, 3)

        renderer = HistogramRenderer.from_config()
    """

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        thickness: int = DEFAULT_THICKNESS,
        colors: Optional[Dict[str, Tuple[int, int, int]]] = None,
        bins: int = HIST_SIZE,
    ):
        if bins < 2 or bins > HIST_SIZE:
            raise ValueError(f"Bin count must be in [2, {HIST_SIZE}], got {bins}")
        if width < bins or height <= 0:
            raise ValueError(f"Chart must be at least {bins} wide and 1 high, got {width}x{height}")
        self.bins = int(bins)
        self.width = int(width)
        self.height = int(height)
        self.thickness = max(1, int(thickness))
        self.colors = dict(DEFAULT_COLORS_BGR)
        if colors:
            self.colors.update(colors)
        self.bin_width = self.width // self.bins

    @classmethod
    def from_config(cls, cfg: Optional[dict] = None) -> "HistogramRenderer":
        """Build a renderer from the histogram_* configuration keys."""
        cfg = cfg if cfg is not None else config.get_config()
        hex_colors = cfg.get("histogram_colors", {}) or {}
        colors = {name: config.hex_to_bgr(value) for name, value in hex_colors.items()}
        return cls(
            width=cfg.get("histogram_width", DEFAULT_WIDTH),
            height=cfg.get("histogram_height", DEFAULT_HEIGHT),
            thickness=cfg.get("histogram_line_thickness", DEFAULT_THICKNESS),
            colors=colors,
            bins=cfg.get("histogram_bins", HIST_SIZE),
        )

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of every chart this renderer produces."""
        return (self.width, self.height)

    def blank(self) -> np.ndarray:
        return blank_histogram_image(self.width, self.height)

    def polyline_points(self, counts: np.ndarray) -> np.ndarray:
        """
        Vertices of one channel's polyline.

        Returns:
            int32 array of shape (bins, 2): (bin * bin_width, height - scaled).
        """
        scaled = scale_histogram(counts, self.height)
        xs = np.arange(len(scaled), dtype=np.int64) * self.bin_width
        ys = self.height - scaled
        return np.stack([xs, ys], axis=1).astype(np.int32)

    def draw(self, histogram: Histogram) -> np.ndarray:
        """Draw an already computed histogram onto a fresh black canvas."""
        image = self.blank()
        for name, counts in zip(CHANNEL_ORDER, histogram.channels):
            points = self.polyline_points(counts)
            cv2.polylines(
                image,
                [points.reshape(-1, 1, 2)],
                isClosed=False,
                color=self.colors[name],
                thickness=self.thickness,
            )
        return image

    def render(self, frame: np.ndarray) -> np.ndarray:
        """
        Frame -> histogram chart. Never raises.

        Returns:
            BGR uint8 image of shape (height, width, 3). All black if the
            histogram could not be computed or drawn.
        """
        try:
            return self.draw(compute_histogram(frame, self.bins))
        except Exception:
            logger.warning("Histogram render failed, using blank chart", exc_info=True)
            return self.blank()


_default_renderer: Optional[HistogramRenderer] = None


def render_histogram(frame: np.ndarray) -> np.ndarray:
    """Render with the default 512x400 renderer. Never raises."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = HistogramRenderer()
    return _default_renderer.render(frame)
