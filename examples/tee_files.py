#!/usr/bin/env python3
"""
Fan out one file to several copies while printing it line by line.

Usage:
    python examples/tee_files.py fileA.txt fileB.txt fileC.txt fileD.txt
"""

import sys

from teestream import ReplicationPipeline, scan_lines


def main(argv: list[str]) -> int:
    if len(argv) < 3:
        print(__doc__)
        return 2

    source, *targets = argv[1:]
    src = open(source, "rb")
    sinks = [open(target, "wb") for target in targets]

    pipeline = ReplicationPipeline(src, sinks)
    for line in pipeline.texts(scan_lines):
        print(line)

    stats = pipeline.stats
    print(f"\n[{stats.bytes_read} bytes in {stats.reads} reads -> {stats.sinks} sinks]")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
