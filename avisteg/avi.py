"""
AVI file steganography
Hides text in the junk, video and audio chunks of RIFF/AVI files
"""

from pathlib import Path

from .capacity import compute_capacity
from .core import extract_message, hide_message
from .headers import read_chunk_header
from .scanner import build_index
from .streams import DEFAULT_CATEGORIES
from .utils import read_message


def load_avi(avi_path: str) -> bytearray:
    """Read a whole AVI file into a mutable buffer."""
    path = Path(avi_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, 'rb') as f:
        return bytearray(f.read())


def save_avi(data, output_path: str) -> str:
    """Write an AVI buffer to disk."""
    with open(output_path, 'wb') as f:
        f.write(data)
    return str(output_path)


def get_avi_capacity(avi_path: str, categories=DEFAULT_CATEGORIES):
    """
    Get data capacity of an AVI file.

    Args:
        avi_path: path to AVI file
        categories: stream categories to account for

    Returns:
        Capacity (bytes per category and total)
    """
    avi = load_avi(avi_path)
    return compute_capacity(build_index(avi), categories)


def hide_in_avi(avi_path: str, data: str, output_path: str = None,
                categories=DEFAULT_CATEGORIES, force: bool = False) -> tuple:
    """
    Hide a text message in an AVI file.

    Args:
        avi_path: path to host AVI file
        data: message, or path of a text file holding it
        output_path: output AVI path (default: _original.avi)
        categories: stream categories to use, in order
        force: allow writing into compressed streams

    Returns:
        (output path, HideResult)
    """
    if not isinstance(data, str):
        raise TypeError("Data must be a string or file path")

    avi = load_avi(avi_path)
    message = read_message(data)

    index = build_index(avi)
    result = hide_message(avi, index, message, force=force, categories=categories)

    if output_path is None:
        base = Path(avi_path)
        output_path = str(base.parent / f"_{base.stem}.avi")

    return save_avi(avi, output_path), result


def extract_from_avi(avi_path: str, categories=DEFAULT_CATEGORIES, force: bool = False) -> str:
    """
    Extract a hidden message from an AVI file.

    Args:
        avi_path: path to stego AVI file
        categories: stream categories the message was hidden in, in order
        force: whether compressed streams were used when hiding

    Returns:
        Extracted message
    """
    avi = load_avi(avi_path)
    return extract_message(avi, build_index(avi), categories=categories, force=force)


def get_avi_info(avi_path: str) -> dict:
    """Summarise the headers and chunk layout of an AVI file."""
    avi = load_avi(avi_path)
    index = build_index(avi)
    riff = read_chunk_header(avi, 0)
    main = index.main_header
    streams = index.streams

    info = {
        'riff': riff.id.decode('latin-1'),
        'form': bytes(avi[8:12]).decode('latin-1'),
        'riff_size': riff.size,
        'file_size': len(avi),
        'width': main.width,
        'height': main.height,
        'total_frames': main.total_frames,
        'frames_per_second': main.frames_per_second,
        'streams': main.streams,
        'video_handler': streams.video.fcc_handler.decode('latin-1'),
        'video_rate': streams.video.rate_per_second,
        'video_compressed': streams.video_compressed,
        'audio_rate': streams.audio.rate_per_second,
        'audio_compressed': streams.audio_compressed,
        'chunks': {str(category): count for category, count in index.counts().items()},
    }
    if streams.bitmap_info is not None:
        info['bit_count'] = streams.bitmap_info.bit_count
        info['compression'] = streams.bitmap_info.compression_tag
    if streams.wave_format is not None:
        info['channels'] = streams.wave_format.channels
        info['samples_per_sec'] = streams.wave_format.samples_per_sec
    return info
