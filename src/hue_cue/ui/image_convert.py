"""
numpy -> QImage conversion for the display.

OpenCV rasters are BGR; QImage wants RGB888 rows. The returned image owns its
pixels, so the source array can be released or replaced right away.
"""

from typing import Optional

import numpy as np
from PySide6.QtGui import QImage


def bgr_to_qimage(frame_bgr: Optional[np.ndarray]) -> QImage:
    """
    Convert a BGR frame to a detached QImage.

    Args:
        frame_bgr: numpy array with shape (H, W, 3) in BGR format

    Returns:
        RGB888 QImage, or a null QImage for None / empty input.
    """
    if frame_bgr is None or frame_bgr.size == 0:
        return QImage()

    h, w = frame_bgr.shape[:2]

    # Convert BGR to RGB
    frame_rgb = np.ascontiguousarray(frame_bgr[:, :, ::-1])

    bytes_per_line = 3 * w
    qimage = QImage(frame_rgb.data, w, h, bytes_per_line, QImage.Format.Format_RGB888)

    # QImage only wraps frame_rgb's buffer; copy so it outlives the array
    return qimage.copy()
