"""
Standard split functions for the Tokenizer.

A split function receives a read-only ``memoryview`` over the unconsumed
buffered bytes and whether the stream has ended, and returns ``(advance, token)``:

- ``(0, None)``: need more input
- ``(k, None)``: skip ``k`` bytes without producing a token
- ``(k, token)``: consume ``k`` bytes and produce ``token``

The view is only valid during the call; slices of it may be returned as
the token and are copied by the Tokenizer. Plain ``bytes`` work as input
too. Malformed input is reported by raising SplitFunctionError.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Callable

SplitData = bytes | memoryview
SplitFunc = Callable[[memoryview, bool], tuple[int, bytes | memoryview | None]]

#: UTF-8 encoding of U+FFFD, produced for invalid byte sequences.
RUNE_ERROR = "\ufffd".encode()

# Unicode White_Space characters in UTF-8, the same set as Go's unicode.IsSpace.
_SPACE = (
    rb"[\t\n\v\f\r ]"
    rb"|\xc2[\x85\xa0]"
    rb"|\xe1\x9a\x80"
    rb"|\xe2\x80[\x80-\x8a\xa8\xa9\xaf]"
    rb"|\xe2\x81\x9f"
    rb"|\xe3\x80\x80"
)
_SPACE_RE = re.compile(_SPACE)
_LEADING_SPACE_RE = re.compile(rb"(?:" + _SPACE + rb")*")
_NEWLINE_RE = re.compile(rb"\n")


def _drop_cr(line: SplitData) -> SplitData:
    if line[-1:] == b"\r":
        return line[:-1]
    return line


def scan_lines(data: SplitData, at_eof: bool) -> tuple[int, SplitData | None]:
    """Split on ``\\n``, stripping one trailing ``\\r`` from each line.

    The last line is returned even without a terminating newline. An empty
    final line is not returned.
    """
    if at_eof and not data:
        return 0, None
    match = _NEWLINE_RE.search(data)
    if match is not None:
        i = match.start()
        return i + 1, _drop_cr(data[:i])
    if at_eof:
        return len(data), _drop_cr(data)
    return 0, None


def scan_words(data: SplitData, at_eof: bool) -> tuple[int, SplitData | None]:
    """Split on runs of Unicode whitespace; never returns an empty token."""
    start = _LEADING_SPACE_RE.match(data).end()
    match = _SPACE_RE.search(data, start)
    if match is not None:
        return match.end(), data[start : match.start()]
    if at_eof and len(data) > start:
        return len(data), data[start:]
    # Skip the leading spaces already seen and wait for the rest of the word.
    return start, None


def scan_bytes(data: SplitData, at_eof: bool) -> tuple[int, SplitData | None]:
    """Return each byte as a token."""
    if not data:
        return 0, None
    return 1, data[:1]


def _rune_width(lead: int) -> int:
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 1


def scan_runes(data: SplitData, at_eof: bool) -> tuple[int, SplitData | None]:
    """Return each UTF-8 encoded code point as a token.

    Invalid sequences advance one byte and produce the encoding of U+FFFD,
    so the token stream cannot be told apart from a correct encoding of
    the replacement character.
    """
    if not data:
        return 0, None
    if data[0] < 0x80:
        return 1, data[:1]

    width = _rune_width(data[0])
    if width == 1:
        return 1, RUNE_ERROR

    if len(data) < width:
        if not at_eof:
            try:
                codecs.getincrementaldecoder("utf-8")().decode(data, final=False)
            except UnicodeDecodeError:
                return 1, RUNE_ERROR
            return 0, None
        return 1, RUNE_ERROR

    try:
        str(data[:width], "utf-8")
    except UnicodeDecodeError:
        return 1, RUNE_ERROR
    return width, data[:width]


SPLIT_FUNCTIONS: dict[str, SplitFunc] = {
    "bytes": scan_bytes,
    "lines": scan_lines,
    "runes": scan_runes,
    "words": scan_words,
}


def get_split_function(name: str) -> SplitFunc:
    """Look up a standard split function by name.

    Raises:
        KeyError: If ``name`` is not one of SPLIT_FUNCTIONS
    """
    try:
        return SPLIT_FUNCTIONS[name.lower()]
    except KeyError:
        raise KeyError(
            f"unknown split function {name!r}; expected one of {sorted(SPLIT_FUNCTIONS)}"
        ) from None
