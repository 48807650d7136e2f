"""Qt-facing layer: playback driver and image hand-off to the display."""
