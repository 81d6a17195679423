"""
Core LSB steganography encoding/decoding over AVI chunks

A message is stored one bit per payload byte, most significant bit first,
and terminated by MESSAGE_END. It runs across chunks in index order and
across categories in the order the caller asks for.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .capacity import BITS_PER_BYTE, compute_capacity, unique_categories
from .errors import InsufficientSpaceError, MessageNotFoundError
from .streams import DEFAULT_CATEGORIES
from .utils import MESSAGE_END, decode_message, encode_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HideResult:
    """Outcome of a successful hide."""
    bytes_written: int
    chunks_used: int
    categories_used: tuple
    skipped: tuple


def writable_groups(data_size: int) -> int:
    """
    Number of 8-byte groups of a chunk that carry message bytes.

    The last full group of every chunk is held back.
    """
    return max(data_size // BITS_PER_BYTE - 1, 0)


def _as_array(buffer, writable: bool = False) -> np.ndarray:
    """View the carrier as uint8 without copying it."""
    carrier = np.frombuffer(buffer, dtype=np.uint8)
    if writable and not carrier.flags.writeable:
        raise TypeError("Carrier must be a writable buffer such as bytearray")
    return carrier


def _select_categories(index, categories, force: bool, report: bool = True) -> tuple:
    """Split categories into usable ones and compressed ones skipped without force."""
    allowed = []
    skipped = []
    for category in unique_categories(categories):
        if index.is_compressed(category):
            if not force:
                if report:
                    logger.warning(
                        "Writing to compressed %s stream is not allowed, "
                        "force is required to use it", category
                    )
                skipped.append(category)
                continue
            if report:
                logger.warning("Writing to compressed %s stream due to force", category)
        allowed.append(category)
    return allowed, skipped


def _plan_writes(index, categories, n_bytes: int) -> tuple:
    """
    Assign message bytes to chunks without touching the carrier.

    Returns:
        (plan, remaining) where plan is a list of (category, chunk, groups) and
        remaining is the number of bytes that found no room
    """
    plan = []
    remaining = n_bytes
    for category in categories:
        for chunk in index.chunks_for(category):
            if remaining == 0:
                return plan, 0
            groups = min(writable_groups(chunk.data_size), remaining)
            if groups:
                plan.append((category, chunk, groups))
                remaining -= groups
    return plan, remaining


def hide_message(buffer, index, message: str, force: bool = False,
                 categories=DEFAULT_CATEGORIES) -> HideResult:
    """
    Hide a message in the LSBs of the indexed chunks.

    The carrier is changed in place, and only once the whole message and
    its end marker are known to fit.

    Args:
        buffer: writable carrier holding the whole AVI file
        index: ChunkIndex built from ``buffer``
        message: text to hide, one byte per character
        force: allow writing into compressed streams
        categories: stream categories to use, in order

    Returns:
        HideResult

    Raises:
        InsufficientSpaceError: message does not fit, carrier untouched
        UnicodeEncodeError: message has characters above 0xFF
        TypeError: carrier is read-only
    """
    carrier = _as_array(buffer, writable=True)
    payload = encode_message(message)

    if MESSAGE_END in payload[:-1]:
        logger.warning("Message contains the end marker 0x%02x and will be cut short", MESSAGE_END)

    allowed, skipped = _select_categories(index, categories, force)
    available = sum(
        writable_groups(chunk.data_size)
        for category in allowed
        for chunk in index.chunks_for(category)
    )

    capacity = compute_capacity(index, allowed)
    logger.info("Available space: %d bytes, message: %d bytes", capacity.total_bytes, len(payload))
    if capacity.total_bytes <= len(payload):
        raise InsufficientSpaceError(required=len(payload), available=available)

    plan, remaining = _plan_writes(index, allowed, len(payload))
    if remaining:
        raise InsufficientSpaceError(required=len(payload), available=available)

    bits = np.unpackbits(np.frombuffer(payload, dtype=np.uint8))
    position = 0
    for _, chunk, groups in plan:
        n_bits = groups * BITS_PER_BYTE
        region = carrier[chunk.data_offset:chunk.data_offset + n_bits]
        region &= 0xFE
        region |= bits[position:position + n_bits]
        position += n_bits

    used = tuple(unique_categories(category for category, _, _ in plan))
    logger.info("Message hidden in %d chunks", len(plan))

    return HideResult(
        bytes_written=len(payload),
        chunks_used=len(plan),
        categories_used=used,
        skipped=tuple(skipped),
    )


def extract_message(buffer, index, categories=DEFAULT_CATEGORIES, force: bool = False) -> str:
    """
    Recover a message hidden by hide_message.

    Categories and force must match the ones used when hiding.

    Args:
        buffer: carrier holding the whole AVI file
        index: ChunkIndex built from ``buffer``
        categories: stream categories to read, in order
        force: read compressed streams as well; must be True to read a
            message that was hidden with force into a compressed stream

    Returns:
        The message, without its end marker

    Raises:
        MessageNotFoundError: no end marker in the selected chunks, also
            when the message was hidden with force and force is not passed
    """
    carrier = _as_array(buffer)
    allowed, _ = _select_categories(index, categories, force, report=False)

    parts = []
    for category in allowed:
        for chunk in index.chunks_for(category):
            n_bits = writable_groups(chunk.data_size) * BITS_PER_BYTE
            if not n_bits:
                continue

            letters = np.packbits(carrier[chunk.data_offset:chunk.data_offset + n_bits] & 1)
            end = np.flatnonzero(letters == MESSAGE_END)
            if end.size:
                parts.append(letters[:end[0]].tobytes())
                message = decode_message(b''.join(parts))
                logger.info("Extracted %d characters", len(message))
                return message
            parts.append(letters.tobytes())

    raise MessageNotFoundError("No end of message found in the selected streams")
