"""
RIFF/AVI chunk scanner

Builds a ChunkIndex: every payload chunk of the ``movi`` list and every
``JUNK`` chunk of the file, grouped by stream category in file order.
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass
from types import MappingProxyType

from .errors import ParseError, ParseErrorKind
from .headers import CHUNK_HEADER, AviMainHeader, read_chunk_header, read_main_header
from .streams import StreamCategory, StreamInfo, classify_suffix, find_stream_headers
from .utils import find

logger = logging.getLogger(__name__)

LIST = b'LIST'
JUNK = b'JUNK'
HDRL = b'hdrl'
AVIH = b'avih'
MOVI = b'movi'
REC = b'rec '


@dataclass(frozen=True)
class Chunk:
    """A data region that can carry hidden bits."""
    id: bytes
    data_offset: int
    data_size: int

    @property
    def data_end(self) -> int:
        return self.data_offset + self.data_size


@dataclass(frozen=True)
class ChunkIndex:
    """Classified chunks of one AVI buffer, plus the headers they depend on."""
    main_header: AviMainHeader
    streams: StreamInfo
    chunks: MappingProxyType

    def chunks_for(self, category: StreamCategory) -> tuple:
        return self.chunks.get(category, ())

    def is_compressed(self, category: StreamCategory) -> bool:
        return self.streams.is_compressed(category)

    def counts(self) -> dict:
        """Number of chunks per category."""
        return {category: len(chunks) for category, chunks in self.chunks.items()}


def _check_bounds(header, limit: int, what: str):
    if header.data_offset + header.size > limit:
        raise ParseError(
            ParseErrorKind.MALFORMED_CHUNK,
            f"{what} {header.id!r} of {header.size} bytes runs past its container",
            header.offset,
        )


def _find_header_list(buffer) -> tuple:
    """Return the offset of the ``hdrl`` tag and the end of its list."""
    index = find(buffer, HDRL)
    if index < 0:
        raise ParseError(ParseErrorKind.MISSING_MAIN_HEADER, "AVI file does not contain a header list")

    end = len(buffer)
    list_offset = index - CHUNK_HEADER.size
    if list_offset >= 0 and bytes(buffer[list_offset:list_offset + 4]) == LIST:
        header = read_chunk_header(buffer, list_offset)
        _check_bounds(header, len(buffer), 'List')
        end = header.data_offset + header.size

    if bytes(buffer[index + 4:index + 8]) != AVIH:
        raise ParseError(ParseErrorKind.MISSING_MAIN_HEADER, "Header list does not start with avih", index)

    return index, end


def _find_movie_list(buffer):
    """Return the (start, end) payload range of the ``movi`` list, or None."""
    index = find(buffer, LIST)
    while index >= 0:
        if bytes(buffer[index + 8:index + 12]) == MOVI:
            header = read_chunk_header(buffer, index)
            _check_bounds(header, len(buffer), 'List')
            return header.data_offset + 4, header.data_offset + header.size
        index = find(buffer, LIST, index + len(LIST))
    return None


def _scan_movie_list(buffer, start: int, end: int, video_compressed: bool, found: dict):
    """
    Classify every payload chunk between ``start`` and ``end``.

    ``rec `` lists are walked through an explicit stack of (cursor, end)
    ranges. When one is met the rest of the current range is pushed below
    it, so chunks are still recorded in file order.
    """
    stack = [(start, end)]
    while stack:
        cursor, limit = stack.pop()
        while cursor + CHUNK_HEADER.size <= limit:
            header = read_chunk_header(buffer, cursor)
            _check_bounds(header, limit, 'Chunk')
            next_cursor = cursor + header.padded_size

            if header.id == LIST:
                list_type = bytes(buffer[header.data_offset:header.data_offset + 4])
                if list_type == REC and header.size % 2 == 0:
                    stack.append((next_cursor, limit))
                    stack.append((header.data_offset + 4, header.data_offset + header.size))
                    break
                logger.debug("Skipping list %r at %d", list_type, cursor)
            elif header.id != JUNK:
                category = classify_suffix(header.id, video_compressed)
                if category is not None:
                    found[category].append(Chunk(header.id, header.data_offset, header.size))

            cursor = next_cursor


def find_junk_chunks(buffer, excluded=()) -> list:
    """
    Find all ``JUNK`` chunks anywhere in the file.

    Args:
        buffer: whole AVI file
        excluded: sorted, non-overlapping Chunks whose payload must not be
            searched (stream data that may happen to contain the tag)

    Returns:
        List of Chunk in file order
    """
    starts = [chunk.data_offset for chunk in excluded]
    junks = []

    index = find(buffer, JUNK)
    while index >= 0:
        pos = bisect_right(starts, index + len(JUNK) - 1) - 1
        if pos >= 0 and index < excluded[pos].data_end:
            index = find(buffer, JUNK, excluded[pos].data_end)
            continue

        header = read_chunk_header(buffer, index)
        _check_bounds(header, len(buffer), 'Chunk')
        junks.append(Chunk(JUNK, header.data_offset, header.size))
        index = find(buffer, JUNK, header.data_offset + header.size)

    return junks


def build_index(buffer) -> ChunkIndex:
    """
    Scan an AVI file and classify its data chunks.

    Args:
        buffer: bytes-like object holding the whole file

    Returns:
        ChunkIndex

    Raises:
        ParseError: missing headers or chunks running past their container
    """
    if not hasattr(buffer, 'find'):
        # one searchable snapshot for all tag searches below
        buffer = bytes(buffer)

    hdrl, hdrl_end = _find_header_list(buffer)
    main_header = read_main_header(buffer, hdrl + len(HDRL))
    streams = find_stream_headers(buffer, hdrl, hdrl_end)

    found = {category: [] for category in StreamCategory}

    movie_list = _find_movie_list(buffer)
    if movie_list is None:
        logger.debug("No movi list found, only junk chunks are usable")
    else:
        _scan_movie_list(buffer, *movie_list, streams.video_compressed, found)

    stream_chunks = sorted(
        (chunk for category, chunks in found.items() for chunk in chunks),
        key=lambda chunk: chunk.data_offset,
    )
    found[StreamCategory.JUNK] = find_junk_chunks(buffer, stream_chunks)

    chunks = MappingProxyType({category: tuple(items) for category, items in found.items()})
    for category, items in chunks.items():
        logger.debug("Found %d %s chunks", len(items), category)

    return ChunkIndex(main_header=main_header, streams=streams, chunks=chunks)
