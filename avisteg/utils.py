"""
Utility functions for AVI steganography operations
"""

import os
from pathlib import Path

# Marks the end of a hidden message
MESSAGE_END = 0x03


def find(buffer, tag: bytes, start: int = 0, end: int = None) -> int:
    """
    Forward search for a byte sequence.

    Args:
        buffer: bytes-like object to search
        tag: byte sequence to look for (usually a FourCC)
        start: first offset to consider
        end: offset the match must end before, defaults to buffer length

    Returns:
        Offset of the first byte of the match, or -1
    """
    if end is None:
        end = len(buffer)
    if not hasattr(buffer, 'find'):
        buffer = bytes(buffer)
    return buffer.find(tag, start, end)


def encode_message(message: str) -> bytes:
    """
    Widen each character to one byte and append the end marker.

    Raises:
        UnicodeEncodeError: for characters above 0xFF
    """
    return message.encode('latin-1') + bytes([MESSAGE_END])


def decode_message(data: bytes) -> str:
    """Turn extracted bytes (without end marker) back into text."""
    return bytes(data).decode('latin-1')


def get_file_data(path: str) -> tuple:
    """Read file and return (data, filename)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, 'rb') as f:
        data = f.read()

    return data, path.name


def read_message(data: str) -> str:
    """Return ``data`` itself, or the text of the file it names."""
    if os.path.isfile(data):
        file_data, _ = get_file_data(data)
        return decode_message(file_data)
    return data


def save_file(data: bytes, path: str) -> str:
    """Save data to ``path`` without overwriting an existing file."""
    output_path = Path(path)

    if output_path.exists():
        base, ext = os.path.splitext(output_path.name)
        counter = 1
        while output_path.exists():
            output_path = output_path.with_name(f"{base}_{counter}{ext}")
            counter += 1

    with open(output_path, 'wb') as f:
        f.write(data)

    return str(output_path)


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ['KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} TB"
