"""
Capacity accounting

One payload byte carries one message bit, so every full group of 8
payload bytes carries one message byte.
"""

from dataclasses import dataclass

from .streams import DEFAULT_CATEGORIES

BITS_PER_BYTE = 8


@dataclass(frozen=True)
class Capacity:
    """Usable space in message bytes, per category and in total."""
    per_category: dict
    total_bytes: int

    @property
    def total_bits(self) -> int:
        return self.total_bytes * BITS_PER_BYTE


def usable_size(data_size: int) -> int:
    """Payload size rounded down to a multiple of 8 (usable bits)."""
    return data_size - data_size % BITS_PER_BYTE


def category_bits(chunks) -> int:
    """Sum of usable bits over a sequence of chunks."""
    return sum(usable_size(chunk.data_size) for chunk in chunks)


def unique_categories(categories) -> list:
    """Drop repeated categories, keeping the first occurrence."""
    return list(dict.fromkeys(categories))


def compute_capacity(index, categories=DEFAULT_CATEGORIES) -> Capacity:
    """
    Calculate how many message bytes the given categories can hold.

    Args:
        index: ChunkIndex of the carrier
        categories: stream categories to account for

    Returns:
        Capacity with bytes per category and the aggregate
    """
    per_category = {}
    total_bits = 0
    for category in unique_categories(categories):
        bits = category_bits(index.chunks_for(category))
        per_category[category] = bits // BITS_PER_BYTE
        total_bits += bits

    return Capacity(per_category=per_category, total_bytes=total_bits // BITS_PER_BYTE)
