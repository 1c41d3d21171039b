"""
Tokenization of byte streams.

- Tokenizer: lazy buffered scanner with pluggable split functions
- scan_words / scan_lines / scan_bytes / scan_runes: standard splits
"""

from teestream.scan.scanner import (
    INITIAL_BUFFER_SIZE,
    MAX_TOKEN_SIZE,
    ScannerState,
    Tokenizer,
)
from teestream.scan.split import (
    RUNE_ERROR,
    SPLIT_FUNCTIONS,
    SplitFunc,
    get_split_function,
    scan_bytes,
    scan_lines,
    scan_runes,
    scan_words,
)

__all__ = [
    "INITIAL_BUFFER_SIZE",
    "MAX_TOKEN_SIZE",
    "RUNE_ERROR",
    "SPLIT_FUNCTIONS",
    "ScannerState",
    "SplitFunc",
    "Tokenizer",
    "get_split_function",
    "scan_bytes",
    "scan_lines",
    "scan_runes",
    "scan_words",
]
