#!/usr/bin/env python3
"""
Replication strategy benchmarks.

Compares eager bulk copy against the incremental tee-through-chain (and the
parallel fan-out) when replicating one file into three.
"""

import os
import tempfile
import time
from pathlib import Path
from typing import Any

from teestream import (
    BytesSink,
    BytesStream,
    ReplicationConfig,
    ReplicationPipeline,
    ReplicationStrategy,
    Tokenizer,
    chain,
    scan_words,
)

SINK_NAMES = ("fileB.txt", "fileC.txt", "fileD.txt")


def make_source(directory: Path, size: int) -> Path:
    """Write ``size`` bytes of word-like text to fileA.txt."""
    path = directory / "fileA.txt"
    words = (f"word{i}" for i in range(size))
    data = " ".join(words).encode()[:size]
    path.write_bytes(data)
    return path


def benchmark_strategy(
    strategy: ReplicationStrategy,
    directory: Path,
    iterations: int = 20,
) -> dict[str, Any]:
    """Replicate fileA into three files ``iterations`` times."""
    source = directory / "fileA.txt"
    config = ReplicationConfig(strategy=strategy)
    total_bytes = 0

    start = time.perf_counter()
    for _ in range(iterations):
        src = source.open("rb")
        sinks = [(directory / name).open("wb") for name in SINK_NAMES]
        stats = ReplicationPipeline(src, sinks, config).run()
        total_bytes += stats.bytes_read
    elapsed = time.perf_counter() - start

    for name in SINK_NAMES:
        assert (directory / name).read_bytes() == source.read_bytes()

    return {
        "name": f"{strategy.value} (files)",
        "iterations": iterations,
        "bytes": total_bytes,
        "elapsed_seconds": elapsed,
        "throughput_mbps": total_bytes / elapsed / 1_000_000,
    }


def benchmark_tokenizing_tee(data: bytes, iterations: int = 20) -> dict[str, Any]:
    """Replicate in memory to three sinks while splitting into words."""
    tokens = 0
    start = time.perf_counter()
    for _ in range(iterations):
        sinks = [BytesSink() for _ in SINK_NAMES]
        head = chain(BytesStream(data), *sinks)
        tokens += sum(1 for _ in Tokenizer(head, scan_words))
    elapsed = time.perf_counter() - start

    return {
        "name": "tee + scan_words (memory)",
        "iterations": iterations,
        "bytes": len(data) * iterations,
        "tokens": tokens,
        "elapsed_seconds": elapsed,
        "throughput_mbps": len(data) * iterations / elapsed / 1_000_000,
    }


def run_benchmarks(size: int = 4 * 1024 * 1024) -> None:
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("Replication Benchmarks")
    print("=" * 60)
    print()

    with tempfile.TemporaryDirectory() as tmp:
        directory = Path(tmp)
        source = make_source(directory, size)
        results = [
            benchmark_strategy(strategy, directory)
            for strategy in (
                ReplicationStrategy.COPY,
                ReplicationStrategy.TEE,
                ReplicationStrategy.PARALLEL,
            )
        ]
        results.append(benchmark_tokenizing_tee(source.read_bytes()))

    for result in results:
        print(f"{result['name']}:")
        print(f"  Iterations: {result['iterations']}")
        print(f"  Elapsed: {result['elapsed_seconds']:.4f}s")
        print(f"  Throughput: {result['throughput_mbps']:.1f} MB/s")
        if "tokens" in result:
            print(f"  Tokens: {result['tokens']}")
        print()


if __name__ == "__main__":
    run_benchmarks(int(os.getenv("BENCH_SIZE", str(4 * 1024 * 1024))))
