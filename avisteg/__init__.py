"""
AviSteg - A Python steganography library
Hide text in AVI files using LSB encoding of junk, video and audio chunks
"""

from .scanner import build_index, Chunk, ChunkIndex
from .streams import StreamCategory, DEFAULT_CATEGORIES
from .capacity import compute_capacity, Capacity
from .core import hide_message, extract_message, HideResult
from .avi import hide_in_avi, extract_from_avi, get_avi_capacity, get_avi_info
from .errors import (
    AviStegError, ParseError, ParseErrorKind,
    InsufficientSpaceError, MessageNotFoundError
)

__version__ = "1.0.0"
__all__ = [
    "build_index",
    "Chunk",
    "ChunkIndex",
    "StreamCategory",
    "DEFAULT_CATEGORIES",
    "compute_capacity",
    "Capacity",
    "hide_message",
    "extract_message",
    "HideResult",
    "hide_in_avi",
    "extract_from_avi",
    "get_avi_capacity",
    "get_avi_info",
    "AviStegError",
    "ParseError",
    "ParseErrorKind",
    "InsufficientSpaceError",
    "MessageNotFoundError",
]
