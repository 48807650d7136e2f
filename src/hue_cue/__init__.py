"""
HueCue: video playback core with a live RGB histogram.

Packages:
    core  - frame source, current-frame slot, histogram renderer
    ui    - Qt playback driver and QImage hand-off
    utils - configuration and logging
"""

__version__ = "1.0.0"
