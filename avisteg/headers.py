"""
Fixed-layout AVI header structures

All fields are little-endian integers at fixed offsets. The readers take
the whole file buffer and the offset where the structure starts and never
modify the buffer.
"""

import struct
from dataclasses import dataclass

from .errors import ParseError, ParseErrorKind

CHUNK_HEADER = struct.Struct('<4sI')
# AVIMAINHEADER including its own fcc/cb prefix
MAIN_HEADER = struct.Struct('<4sI10I4I')
# AVISTREAMHEADER including its own fcc/cb prefix
STREAM_HEADER = struct.Struct('<4sI4s4sIHHIIIIIIIIhhhh')
BITMAP_INFO_HEADER = struct.Struct('<IiiHHIIiiII')
WAVE_FORMAT = struct.Struct('<HHIIHH')

# dwQuality value written by encoders for raw (uncompressed) streams
UNCOMPRESSED_QUALITY = 10000


def _unpack(layout: struct.Struct, buffer, offset: int, name: str) -> tuple:
    """Unpack a structure, rejecting reads that leave the buffer."""
    if offset < 0 or offset + layout.size > len(buffer):
        raise ParseError(ParseErrorKind.MALFORMED_CHUNK, f"Truncated {name}", offset)
    return layout.unpack_from(buffer, offset)


@dataclass(frozen=True)
class ChunkHeader:
    """RIFF chunk header: four character id and payload size."""
    id: bytes
    size: int
    offset: int

    @property
    def data_offset(self) -> int:
        return self.offset + CHUNK_HEADER.size

    @property
    def padded_size(self) -> int:
        """Header plus payload plus the pad byte of odd sized chunks."""
        return CHUNK_HEADER.size + self.size + (self.size & 1)


@dataclass(frozen=True)
class AviMainHeader:
    """The ``avih`` chunk (Windows AVIMAINHEADER)."""
    fcc: bytes
    cb: int
    micro_sec_per_frame: int
    max_bytes_per_sec: int
    padding_granularity: int
    flags: int
    total_frames: int
    initial_frames: int
    streams: int
    suggested_buffer_size: int
    width: int
    height: int
    reserved: tuple

    @property
    def frames_per_second(self) -> float:
        if self.micro_sec_per_frame == 0:
            return 0.0
        return 1_000_000 / self.micro_sec_per_frame


@dataclass(frozen=True)
class RectFrame:
    left: int
    top: int
    right: int
    bottom: int


@dataclass(frozen=True)
class AviStreamHeader:
    """The ``strh`` chunk (Windows AVISTREAMHEADER)."""
    fcc: bytes
    cb: int
    fcc_type: bytes
    fcc_handler: bytes
    flags: int
    priority: int
    language: int
    initial_frames: int
    scale: int
    rate: int
    start: int
    length: int
    suggested_buffer_size: int
    quality: int
    sample_size: int
    frame: RectFrame
    offset: int

    @property
    def is_video(self) -> bool:
        return self.fcc_type == b'vids'

    @property
    def is_audio(self) -> bool:
        return self.fcc_type == b'auds'

    @property
    def rate_per_second(self) -> float:
        """Frames (video) or samples (audio) per second, dwRate / dwScale."""
        if self.scale == 0:
            return 0.0
        return self.rate / self.scale

    @property
    def next_offset(self) -> int:
        """Offset of the chunk that follows this header in its stream list."""
        return self.offset + CHUNK_HEADER.size + self.cb + (self.cb & 1)


@dataclass(frozen=True)
class BitmapInfoHeader:
    """Windows BITMAPINFOHEADER found in the video ``strf`` chunk."""
    size: int
    width: int
    height: int
    planes: int
    bit_count: int
    compression: int
    size_image: int
    x_pels_per_meter: int
    y_pels_per_meter: int
    clr_used: int
    clr_important: int

    @property
    def compression_tag(self) -> str:
        """Compression as text, ``BI_RGB`` for raw frames or the codec FourCC."""
        if self.compression == 0:
            return 'BI_RGB'
        return self.compression.to_bytes(4, 'little').decode('latin-1')


@dataclass(frozen=True)
class WaveFormat:
    """Leading PCMWAVEFORMAT fields of the audio ``strf`` chunk."""
    format_tag: int
    channels: int
    samples_per_sec: int
    avg_bytes_per_sec: int
    block_align: int
    bits_per_sample: int


def read_chunk_header(buffer, offset: int) -> ChunkHeader:
    """Read the 8-byte chunk header starting at ``offset``."""
    ck_id, ck_size = _unpack(CHUNK_HEADER, buffer, offset, 'chunk header')
    return ChunkHeader(id=ck_id, size=ck_size, offset=offset)


def read_main_header(buffer, offset: int) -> AviMainHeader:
    """
    Decode the AVI main header.

    Args:
        buffer: whole AVI file
        offset: position of the ``avih`` tag

    Returns:
        AviMainHeader
    """
    fields = _unpack(MAIN_HEADER, buffer, offset, 'AVI main header')
    return AviMainHeader(*fields[:12], reserved=tuple(fields[12:]))


def read_stream_header(buffer, offset: int) -> AviStreamHeader:
    """
    Decode a stream header.

    Args:
        buffer: whole AVI file
        offset: position of the ``strh`` tag

    Returns:
        AviStreamHeader
    """
    fields = _unpack(STREAM_HEADER, buffer, offset, 'AVI stream header')
    return AviStreamHeader(
        *fields[:15],
        frame=RectFrame(*fields[15:]),
        offset=offset,
    )


def read_bitmap_info_header(buffer, offset: int) -> BitmapInfoHeader:
    """Decode a BITMAPINFOHEADER starting at ``offset``."""
    return BitmapInfoHeader(*_unpack(BITMAP_INFO_HEADER, buffer, offset, 'bitmap info header'))


def read_wave_format(buffer, offset: int) -> WaveFormat:
    """Decode a PCMWAVEFORMAT starting at ``offset``."""
    return WaveFormat(*_unpack(WAVE_FORMAT, buffer, offset, 'wave format'))
