"""
Exception hierarchy for the playback core.

Only the open path lets these escape to callers. The playback driver turns
DecodeError into end-of-stream and the histogram renderer turns RenderError
into a blank chart.
"""


class HueCueError(Exception):
    """Base class for all HueCue errors."""


class VideoNotFoundError(HueCueError, FileNotFoundError):
    """The requested video path does not exist."""


class UnopenableStreamError(HueCueError):
    """The decoder rejected the container or codec."""


class DecodeError(HueCueError):
    """A frame read failed in the middle of a stream."""


class RenderError(HueCueError):
    """The histogram could not be computed from a frame."""
