"""
Stream classification

Resolves the video and audio stream headers of an AVI file and maps movie
chunk ids onto stream categories.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import ParseError, ParseErrorKind
from .headers import (
    UNCOMPRESSED_QUALITY,
    AviStreamHeader,
    BitmapInfoHeader,
    WaveFormat,
    read_bitmap_info_header,
    read_chunk_header,
    read_stream_header,
    read_wave_format,
)
from .utils import find

logger = logging.getLogger(__name__)

STRH = b'strh'
STRF = b'strf'
VIDS = b'vids'
AUDS = b'auds'

# Two character chunk type codes of movie data chunks
VIDEO_COMPRESSED_SUFFIX = b'dc'
VIDEO_UNCOMPRESSED_SUFFIX = b'db'
AUDIO_SUFFIX = b'wb'


class StreamCategory(Enum):
    """Kind of data region a message can be hidden in."""
    JUNK = "junk"
    VIDEO_COMPRESSED = "video-compressed"
    VIDEO_UNCOMPRESSED = "video-uncompressed"
    AUDIO = "audio"

    def __str__(self):
        return self.value


DEFAULT_CATEGORIES = (
    StreamCategory.JUNK,
    StreamCategory.VIDEO_UNCOMPRESSED,
    StreamCategory.VIDEO_COMPRESSED,
    StreamCategory.AUDIO,
)


def is_uncompressed(header: AviStreamHeader) -> bool:
    """A stream counts as uncompressed only when dwQuality is exactly 10000."""
    return header.quality == UNCOMPRESSED_QUALITY


@dataclass(frozen=True)
class StreamInfo:
    """The video and audio streams declared in the header list."""
    video: AviStreamHeader
    audio: AviStreamHeader
    bitmap_info: BitmapInfoHeader = None
    wave_format: WaveFormat = None

    @property
    def video_compressed(self) -> bool:
        return not is_uncompressed(self.video)

    @property
    def audio_compressed(self) -> bool:
        return not is_uncompressed(self.audio)

    def is_compressed(self, category: StreamCategory) -> bool:
        """Whether writing into ``category`` needs the force flag."""
        if category is StreamCategory.VIDEO_COMPRESSED:
            return self.video_compressed
        if category is StreamCategory.AUDIO:
            return self.audio_compressed
        return False


def classify_suffix(chunk_id: bytes, video_compressed: bool):
    """
    Map a movie chunk id such as ``00dc`` onto a stream category.

    Args:
        chunk_id: four byte chunk id, stream number followed by type code
        video_compressed: compression state of the video stream header

    Returns:
        StreamCategory, or None for chunk types that are not indexed
    """
    suffix = bytes(chunk_id[2:4])
    if suffix == VIDEO_COMPRESSED_SUFFIX:
        if video_compressed:
            return StreamCategory.VIDEO_COMPRESSED
        return StreamCategory.VIDEO_UNCOMPRESSED
    if suffix == VIDEO_UNCOMPRESSED_SUFFIX:
        return StreamCategory.VIDEO_UNCOMPRESSED
    if suffix == AUDIO_SUFFIX:
        return StreamCategory.AUDIO
    return None


def _read_stream_format(buffer, header: AviStreamHeader, reader):
    """Decode the ``strf`` chunk following a stream header, if it is there."""
    strf = read_chunk_header(buffer, header.next_offset)
    if strf.id != STRF:
        logger.debug("No strf chunk after stream header at %d", header.offset)
        return None
    return reader(buffer, strf.data_offset)


def find_stream_headers(buffer, start: int = 0, end: int = None) -> StreamInfo:
    """
    Locate the first video and the first audio stream header.

    Args:
        buffer: whole AVI file
        start: first byte of the search range (normally the ``hdrl`` list)
        end: end of the search range, defaults to the end of the buffer

    Returns:
        StreamInfo with both headers and their format structures

    Raises:
        ParseError: when either stream header is missing
    """
    if end is None:
        end = len(buffer)

    video = audio = None
    index = find(buffer, STRH, start, end)
    while index >= 0 and (video is None or audio is None):
        header = read_stream_header(buffer, index)
        if header.is_video and video is None:
            video = header
        elif header.is_audio and audio is None:
            audio = header
        index = find(buffer, STRH, index + len(STRH), end)

    if video is None:
        raise ParseError(ParseErrorKind.MISSING_VIDEO_HEADER, "AVI file has no video stream header")
    if audio is None:
        raise ParseError(ParseErrorKind.MISSING_AUDIO_HEADER, "AVI file has no audio stream header")

    logger.debug(
        "Video stream %s quality=%d, audio stream quality=%d",
        video.fcc_handler, video.quality, audio.quality
    )

    return StreamInfo(
        video=video,
        audio=audio,
        bitmap_info=_read_stream_format(buffer, video, read_bitmap_info_header),
        wave_format=_read_stream_format(buffer, audio, read_wave_format),
    )
