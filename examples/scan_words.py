#!/usr/bin/env python3
"""
Split an in-memory string into words and into lines.
"""

from teestream import BytesStream, Tokenizer, scan_lines, scan_words

SOURCE = b"hoge fuga\nfoo bar"


def main() -> None:
    print("Words:")
    for word in Tokenizer(BytesStream(SOURCE), scan_words).texts():
        print(f"  {word}")

    print("Lines:")
    for line in Tokenizer(BytesStream(SOURCE), scan_lines).texts():
        print(f"  {line}")


if __name__ == "__main__":
    main()
