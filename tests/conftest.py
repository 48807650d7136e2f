"""
Pytest configuration and fixtures for HueCue tests.
"""

import os
import sys
from pathlib import Path

import pytest

# Headless Qt for CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

import cv2
import numpy as np
from PySide6.QtWidgets import QApplication


TEST_FPS = 10.0
TEST_FRAME_COUNT = 30
TEST_SIZE = (64, 48)  # width, height


def write_test_video(path, frame_count=TEST_FRAME_COUNT, fps=TEST_FPS, size=TEST_SIZE):
    """Write a small MJPG/AVI clip whose brightness rises frame by frame."""
    width, height = size
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (width, height))
    assert writer.isOpened(), "OpenCV build cannot write MJPG/AVI"
    for i in range(frame_count):
        frame = np.full((height, width, 3), (i * 8) % 256, dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return Path(path)


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication once per test session."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def video_path(tmp_path):
    """Path to a 30-frame, 10 fps synthetic video."""
    return str(write_test_video(tmp_path / "clip.avi"))


@pytest.fixture
def short_video_path(tmp_path):
    """Path to a 5-frame synthetic video."""
    return str(write_test_video(tmp_path / "short.avi", frame_count=5))


@pytest.fixture
def garbage_video_path(tmp_path):
    """A file with a video extension that no decoder accepts."""
    path = tmp_path / "broken.mp4"
    path.write_bytes(b"this is not a video container" * 64)
    return str(path)
