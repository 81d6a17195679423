"""
Exceptions raised by the AVI steganography functions
"""

from enum import Enum


class ParseErrorKind(Enum):
    """Why an AVI buffer could not be indexed."""
    MISSING_MAIN_HEADER = "missing main header"
    MISSING_VIDEO_HEADER = "missing video stream header"
    MISSING_AUDIO_HEADER = "missing audio stream header"
    MALFORMED_CHUNK = "malformed chunk"


class AviStegError(Exception):
    """Base class for all avisteg errors."""


class ParseError(AviStegError, ValueError):
    """The buffer is not a usable AVI file."""

    def __init__(self, kind: ParseErrorKind, message: str = None, offset: int = None):
        self.kind = kind
        self.offset = offset
        if message is None:
            message = kind.value
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class InsufficientSpaceError(AviStegError, ValueError):
    """The selected streams cannot hold the message."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Not enough space for message: {required} bytes required, "
            f"but only {available} bytes available"
        )


class MessageNotFoundError(AviStegError, ValueError):
    """No message end marker was found in the selected streams."""

    def __init__(self, message: str = "No hidden message found"):
        super().__init__(message)
