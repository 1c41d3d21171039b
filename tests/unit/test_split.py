"""Tests for standard split functions."""

import pytest

from teestream.scan import (
    RUNE_ERROR,
    get_split_function,
    scan_bytes,
    scan_lines,
    scan_runes,
    scan_words,
)


class TestScanLines:
    """Tests for scan_lines."""

    def test_complete_line(self) -> None:
        """Test a newline-terminated line is returned without the newline."""
        assert scan_lines(b"hoge fuga\nfoo", False) == (10, b"hoge fuga")

    def test_strips_carriage_return(self) -> None:
        """Test CRLF line endings lose the CR."""
        assert scan_lines(b"abc\r\ndef", False) == (5, b"abc")

    def test_needs_more_input(self) -> None:
        """Test an unterminated line requests more input."""
        assert scan_lines(b"partial", False) == (0, None)

    def test_final_line_at_eof(self) -> None:
        """Test the last unterminated line is returned at EOF."""
        assert scan_lines(b"foo bar", True) == (7, b"foo bar")

    def test_empty_at_eof(self) -> None:
        """Test nothing is returned for an empty buffer at EOF."""
        assert scan_lines(b"", True) == (0, None)

    def test_empty_line(self) -> None:
        """Test blank lines produce empty tokens."""
        assert scan_lines(b"\nx", False) == (1, b"")


class TestScanWords:
    """Tests for scan_words."""

    def test_word_followed_by_space(self) -> None:
        """Test a word is returned with its trailing space consumed."""
        assert scan_words(b"hoge fuga", False) == (5, b"hoge")

    def test_skips_leading_space(self) -> None:
        """Test leading whitespace of any kind is skipped."""
        assert scan_words(b" \t\nfoo bar", False) == (7, b"foo")

    def test_unicode_space(self) -> None:
        """Test Unicode spaces such as U+3000 delimit words."""
        data = "こんにちは　世界".encode()
        advance, token = scan_words(data, False)
        assert token == "こんにちは".encode()
        assert advance == len("こんにちは　".encode())

    def test_no_break_space(self) -> None:
        """Test U+00A0 delimits words."""
        assert scan_words("a\u00a0b".encode(), False) == (3, b"a")

    def test_partial_word_skips_spaces_only(self) -> None:
        """Test an unfinished word consumes just the leading spaces."""
        assert scan_words(b"  foo", False) == (2, None)

    def test_last_word_at_eof(self) -> None:
        """Test the last word is returned at EOF."""
        assert scan_words(b"bar", True) == (3, b"bar")

    def test_only_spaces_at_eof(self) -> None:
        """Test trailing spaces at EOF produce no token."""
        assert scan_words(b"   ", True) == (3, None)


class TestScanBytesAndRunes:
    """Tests for scan_bytes and scan_runes."""

    def test_scan_bytes(self) -> None:
        """Test one byte per token."""
        assert scan_bytes(b"ab", False) == (1, b"a")
        assert scan_bytes(b"", True) == (0, None)

    def test_ascii_rune(self) -> None:
        """Test ASCII runes are one byte."""
        assert scan_runes(b"ab", False) == (1, b"a")

    def test_multibyte_rune(self) -> None:
        """Test a complete multibyte rune is returned whole."""
        data = "é!".encode()
        assert scan_runes(data, False) == (2, "é".encode())

    def test_incomplete_rune_needs_more(self) -> None:
        """Test a truncated but valid prefix requests more input."""
        data = "世".encode()[:2]
        assert scan_runes(data, False) == (0, None)

    def test_incomplete_rune_at_eof(self) -> None:
        """Test a truncated rune at EOF yields the replacement character."""
        data = "世".encode()[:2]
        assert scan_runes(data, True) == (1, RUNE_ERROR)

    def test_invalid_byte(self) -> None:
        """Test an invalid lead byte yields the replacement character."""
        assert scan_runes(b"\xffabc", False) == (1, RUNE_ERROR)

    def test_invalid_continuation(self) -> None:
        """Test a bad continuation byte yields the replacement character."""
        assert scan_runes(b"\xe4\x41\x41", False) == (1, RUNE_ERROR)


class TestGetSplitFunction:
    """Tests for split function lookup."""

    def test_lookup(self) -> None:
        """Test names resolve to the standard functions."""
        assert get_split_function("words") is scan_words
        assert get_split_function("LINES") is scan_lines

    def test_unknown(self) -> None:
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError):
            get_split_function("sentences")
