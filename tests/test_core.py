"""Tests for the LSB hide/extract codec."""

import logging

import pytest

from avisteg import (
    InsufficientSpaceError,
    MessageNotFoundError,
    StreamCategory,
    build_index,
    extract_message,
    hide_message,
)
from avisteg.core import writable_groups

from avi_builder import UNCOMPRESSED, build_avi, chunk, payload

JUNK = [StreamCategory.JUNK]


def _bits(value: int) -> list:
    return [(value >> i) & 1 for i in range(7, -1, -1)]


class TestHide:
    """Test hide_message."""

    def test_hello_in_junk(self, junk_avi):
        """Test HELLO fits a single 64 byte junk chunk and comes back."""
        index = build_index(junk_avi)
        result = hide_message(junk_avi, index, "HELLO", categories=JUNK)
        assert result.bytes_written == 6
        assert result.chunks_used == 1
        assert result.categories_used == (StreamCategory.JUNK,)
        assert extract_message(junk_avi, build_index(junk_avi), JUNK) == "HELLO"

    def test_bit_order(self, junk_avi):
        """Test bits are written most significant first, one per byte."""
        index = build_index(junk_avi)
        junk, = index.chunks_for(StreamCategory.JUNK)
        hide_message(junk_avi, index, "H", categories=JUNK)
        start = junk.data_offset
        assert list(junk_avi[start:start + 8]) == _bits(ord('H'))
        assert list(junk_avi[start + 8:start + 16]) == _bits(0x03)

    def test_last_group_held_back(self, junk_avi):
        """Test the last group of a chunk is never written."""
        index = build_index(junk_avi)
        junk, = index.chunks_for(StreamCategory.JUNK)
        hide_message(junk_avi, index, "\xff" * 6, categories=JUNK)
        assert junk_avi[junk.data_end - 8:junk.data_end] == bytes(8)
        assert all(b == 1 for b in junk_avi[junk.data_offset:junk.data_offset + 48])

    def test_only_lsb_changes(self, raw_avi):
        """Test hiding only flips bit 0 of chunk payload bytes."""
        original = bytes(raw_avi)
        index = build_index(raw_avi)
        hide_message(raw_avi, index, "The quick brown fox", categories=[StreamCategory.VIDEO_UNCOMPRESSED])
        video = index.chunks_for(StreamCategory.VIDEO_UNCOMPRESSED)
        for offset, (before, after) in enumerate(zip(original, raw_avi)):
            if before != after:
                assert before ^ after == 1
                assert any(c.data_offset <= offset < c.data_end for c in video)

    def test_round_trip_across_chunks(self, raw_avi):
        """Test a message spanning several chunks and categories."""
        order = [StreamCategory.AUDIO, StreamCategory.VIDEO_UNCOMPRESSED, StreamCategory.JUNK]
        message = "Meet me at the usual place at 9"
        result = hide_message(raw_avi, build_index(raw_avi), message, categories=order)
        assert result.chunks_used > 2
        assert result.categories_used == (StreamCategory.AUDIO, StreamCategory.VIDEO_UNCOMPRESSED)
        assert extract_message(raw_avi, build_index(raw_avi), order) == message

    def test_stops_when_written(self, raw_avi):
        """Test later categories stay untouched once the message is in."""
        index = build_index(raw_avi)
        before = [bytes(raw_avi[c.data_offset:c.data_end]) for c in index.chunks_for(StreamCategory.JUNK)]
        hide_message(raw_avi, index, "short", categories=[StreamCategory.AUDIO, StreamCategory.JUNK])
        after = [bytes(raw_avi[c.data_offset:c.data_end]) for c in index.chunks_for(StreamCategory.JUNK)]
        assert before == after

    def test_empty_message(self, junk_avi):
        """Test an empty message stores just the end marker."""
        hide_message(junk_avi, build_index(junk_avi), "", categories=JUNK)
        assert extract_message(junk_avi, build_index(junk_avi), JUNK) == ""

    def test_latin1_characters(self, junk_avi):
        """Test characters up to 0xFF survive the round trip."""
        hide_message(junk_avi, build_index(junk_avi), "é\xff", categories=JUNK)
        assert extract_message(junk_avi, build_index(junk_avi), JUNK) == "é\xff"

    def test_wide_characters_rejected(self, junk_avi):
        """Test characters above 0xFF are rejected before writing."""
        original = bytes(junk_avi)
        with pytest.raises(UnicodeEncodeError):
            hide_message(junk_avi, build_index(junk_avi), "€", categories=JUNK)
        assert bytes(junk_avi) == original

    def test_read_only_buffer(self, junk_avi):
        """Test bytes cannot be used as carrier for hiding."""
        data = bytes(junk_avi)
        with pytest.raises(TypeError):
            hide_message(data, build_index(data), "hi", categories=JUNK)


class TestInsufficientSpace:
    """Test the capacity guard."""

    def test_largest_message_that_fits(self, junk_avi):
        """Test 6 characters plus end marker fit 8 bytes of capacity."""
        hide_message(junk_avi, build_index(junk_avi), "ABCDEF", categories=JUNK)
        assert extract_message(junk_avi, build_index(junk_avi), JUNK) == "ABCDEF"

    def test_capacity_not_exceeded(self, junk_avi):
        """Test the message plus end marker must stay below capacity."""
        original = bytes(junk_avi)
        with pytest.raises(InsufficientSpaceError) as exc:
            hide_message(junk_avi, build_index(junk_avi), "ABCDEFG", categories=JUNK)
        assert exc.value.required == 8
        assert bytes(junk_avi) == original

    def test_held_back_groups_checked(self):
        """Test many tiny chunks fail before anything is written."""
        avi = build_avi(junk=[8] * 10)
        original = bytes(avi)
        with pytest.raises(InsufficientSpaceError) as exc:
            hide_message(avi, build_index(avi), "abc", categories=JUNK)
        assert exc.value.available == 0
        assert bytes(avi) == original

    def test_no_chunks(self):
        """Test a file without usable chunks."""
        avi = build_avi(with_movi=False)
        with pytest.raises(InsufficientSpaceError):
            hide_message(avi, build_index(avi), "x")

    def test_is_value_error(self, junk_avi):
        """Test InsufficientSpaceError can be caught as ValueError."""
        with pytest.raises(ValueError):
            hide_message(junk_avi, build_index(junk_avi), "x" * 100, categories=JUNK)


class TestCompressionGate:
    """Test compressed streams need force."""

    def test_compressed_skipped(self, compressed_avi):
        """Test compressed video is skipped and left untouched without force."""
        index = build_index(compressed_avi)
        order = [StreamCategory.VIDEO_COMPRESSED, StreamCategory.JUNK]
        video = index.chunks_for(StreamCategory.VIDEO_COMPRESSED)
        before = [bytes(compressed_avi[c.data_offset:c.data_end]) for c in video]

        result = hide_message(compressed_avi, index, "hi", categories=order)

        assert result.skipped == (StreamCategory.VIDEO_COMPRESSED,)
        assert result.categories_used == (StreamCategory.JUNK,)
        assert [bytes(compressed_avi[c.data_offset:c.data_end]) for c in video] == before
        assert extract_message(compressed_avi, build_index(compressed_avi), order) == "hi"

    def test_skipped_category_has_no_capacity(self, compressed_avi):
        """Test a skipped category does not count towards capacity."""
        index = build_index(compressed_avi)
        with pytest.raises(InsufficientSpaceError):
            hide_message(compressed_avi, index, "a" * 20, categories=[StreamCategory.VIDEO_COMPRESSED])

    def test_skip_is_logged(self, compressed_avi, caplog):
        """Test skipping a compressed stream logs a warning."""
        with caplog.at_level(logging.WARNING, logger='avisteg.core'):
            hide_message(compressed_avi, build_index(compressed_avi), "hi",
                         categories=[StreamCategory.AUDIO, StreamCategory.JUNK])
        assert "compressed audio" in caplog.text

    def test_force_matches_uncompressed(self):
        """Test forced compressed video behaves like uncompressed video of the same size."""
        movi = [chunk(b'00dc', payload(200)), chunk(b'00dc', payload(160))]
        compressed = build_avi(movi=movi, video_quality=0)
        raw = build_avi(movi=movi, video_quality=UNCOMPRESSED)
        message = "forced into the video stream"

        hide_message(compressed, build_index(compressed), message, force=True,
                     categories=[StreamCategory.VIDEO_COMPRESSED])
        hide_message(raw, build_index(raw), message,
                     categories=[StreamCategory.VIDEO_UNCOMPRESSED])

        start = compressed.find(b'movi')
        assert compressed[start:] == raw[start:]
        assert extract_message(compressed, build_index(compressed),
                               [StreamCategory.VIDEO_COMPRESSED], force=True) == message

    def test_forced_audio(self, compressed_avi):
        """Test force allows hiding in compressed audio."""
        order = [StreamCategory.AUDIO]
        result = hide_message(compressed_avi, build_index(compressed_avi), "abc", force=True, categories=order)
        assert result.skipped == ()
        assert extract_message(compressed_avi, build_index(compressed_avi), order, force=True) == "abc"

    def test_uncompressed_file_skips_nothing(self, caplog):
        """Test an uncompressed file reports no skipped streams and logs no warning."""
        avi = build_avi(movi=[chunk(b'00db', payload(200))], junk=[64],
                        video_quality=UNCOMPRESSED, audio_quality=UNCOMPRESSED)
        with caplog.at_level(logging.WARNING, logger='avisteg.core'):
            result = hide_message(avi, build_index(avi), "x")
        assert result.skipped == ()
        assert "compressed" not in caplog.text

    def test_forced_message_needs_force_to_extract(self, compressed_avi):
        """Test a message forced into compressed video is not read without force."""
        order = [StreamCategory.VIDEO_COMPRESSED]
        hide_message(compressed_avi, build_index(compressed_avi), "abc", force=True, categories=order)
        with pytest.raises(MessageNotFoundError):
            extract_message(compressed_avi, build_index(compressed_avi), order)


class TestExtract:
    """Test extract_message."""

    def test_not_found(self, raw_avi):
        """Test a clean file has no message."""
        with pytest.raises(MessageNotFoundError):
            extract_message(raw_avi, build_index(raw_avi))

    def test_sentinel_collision(self, junk_avi):
        """Test a literal 0x03 in the message ends extraction early."""
        hide_message(junk_avi, build_index(junk_avi), "AB\x03CD", categories=JUNK)
        assert extract_message(junk_avi, build_index(junk_avi), JUNK) == "AB"

    def test_read_only_buffer(self, junk_avi):
        """Test extraction works on immutable bytes."""
        hide_message(junk_avi, build_index(junk_avi), "ok", categories=JUNK)
        data = bytes(junk_avi)
        assert extract_message(data, build_index(data), JUNK) == "ok"

    def test_wrong_order(self, raw_avi):
        """Test reading other categories than were written finds nothing."""
        hide_message(raw_avi, build_index(raw_avi), "secret", categories=[StreamCategory.AUDIO])
        with pytest.raises(MessageNotFoundError):
            extract_message(raw_avi, build_index(raw_avi), JUNK)


def test_writable_groups():
    """Test groups available to a chunk, last one held back."""
    assert writable_groups(0) == 0
    assert writable_groups(8) == 0
    assert writable_groups(17) == 1
    assert writable_groups(64) == 7
