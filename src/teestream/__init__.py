"""teestream: read a byte stream once, replicate it to many sinks, tokenize it on the way.

Core pieces:
- Duplicator: a stream that writes every chunk it returns to a sink
- chain / DuplicatorChain: fan-out to N sinks with one pass over the source
- Tokenizer: lazy buffered scanner with pluggable split functions
- ReplicationPipeline: scoped replication with guaranteed resource release
"""
from __future__ import annotations

from teestream._features import HAS_HTTPX, require_extra
from teestream.errors import (
    ConfigError,
    CoordinationError,
    SinkWriteError,
    SourceReadError,
    SplitFunctionError,
    TeeStreamError,
    TokenTooLarge,
)
from teestream.pipeline import (
    ReplicationConfig,
    ReplicationPipeline,
    ReplicationStats,
    ReplicationStrategy,
)
from teestream.scan import (
    ScannerState,
    Tokenizer,
    scan_bytes,
    scan_lines,
    scan_runes,
    scan_words,
)
from teestream.stream import (
    BytesSink,
    BytesStream,
    Duplicator,
    DuplicatorChain,
    IterStream,
    ParallelDuplicator,
    Sink,
    Stream,
    chain,
    copy,
    copy_to_sinks,
    drain,
)
from teestream.sync import Once, WaitGroup

__version__ = "0.3.0"

__all__ = [
    "HAS_HTTPX",
    "BytesSink",
    "BytesStream",
    "ConfigError",
    "CoordinationError",
    "Duplicator",
    "DuplicatorChain",
    "IterStream",
    "Once",
    "ParallelDuplicator",
    "ReplicationConfig",
    "ReplicationPipeline",
    "ReplicationStats",
    "ReplicationStrategy",
    "ScannerState",
    "Sink",
    "SinkWriteError",
    "SourceReadError",
    "SplitFunctionError",
    "Stream",
    "TeeStreamError",
    "TokenTooLarge",
    "Tokenizer",
    "WaitGroup",
    "__version__",
    "chain",
    "copy",
    "copy_to_sinks",
    "drain",
    "require_extra",
    "scan_bytes",
    "scan_lines",
    "scan_runes",
    "scan_words",
]
