"""Pytest configuration and fixtures."""

import pytest

from avi_builder import UNCOMPRESSED, build_avi, chunk, payload, riff_list


@pytest.fixture
def junk_avi() -> bytearray:
    """AVI with one 64 byte JUNK chunk and an empty movi list."""
    return build_avi(junk=[64])


@pytest.fixture
def raw_avi() -> bytearray:
    """Uncompressed video and audio, interleaved in rec lists, plus junk."""
    return build_avi(
        movi=[
            riff_list(b'rec ', chunk(b'00db', payload(120)), chunk(b'01wb', payload(41))),
            riff_list(b'rec ', chunk(b'00db', payload(120)), chunk(b'01wb', payload(41))),
            chunk(b'00db', payload(64)),
        ],
        junk=[48],
        header_junk=[33],
        video_quality=UNCOMPRESSED,
        audio_quality=UNCOMPRESSED,
    )


@pytest.fixture
def compressed_avi() -> bytearray:
    """Compressed video (00dc) and compressed audio, plus junk."""
    return build_avi(
        movi=[chunk(b'00dc', payload(200)), chunk(b'01wb', payload(80)), chunk(b'00dc', payload(200))],
        junk=[32],
        video_quality=0,
        audio_quality=0,
    )


@pytest.fixture
def write_avi(tmp_path):
    """Write an AVI buffer to a temporary file and return its path."""
    def _write(data, name='carrier.avi') -> str:
        path = tmp_path / name
        path.write_bytes(bytes(data))
        return str(path)
    return _write
