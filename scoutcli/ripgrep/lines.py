# ripgrep/lines.py
from __future__ import annotations

import codecs
import re
from typing import Iterable, Iterator, List

_NEWLINE = re.compile(r"\r?\n")


class LineSplitter:
    """
    Incremental UTF-8 line splitter for subprocess output.

    feed() accepts raw byte chunks cut at arbitrary offsets (including inside a
    multi-byte character) and returns the complete lines seen so far; close()
    flushes whatever is left once the stream ends. Lines end at '\\n' or
    '\\r\\n'; empty lines are dropped.
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "replace"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
        self._buffer = ""

    def feed(self, chunk: bytes) -> List[str]:
        self._buffer += self._decoder.decode(chunk)
        parts = _NEWLINE.split(self._buffer)
        self._buffer = parts.pop()
        return [p for p in parts if p]

    def close(self) -> List[str]:
        self._buffer += self._decoder.decode(b"", final=True)
        rest, self._buffer = self._buffer, ""
        # a lone trailing '\r' belongs to a '\r\n' that never completed
        if rest.endswith("\r"):
            rest = rest[:-1]
        return [rest] if rest else []


def iter_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    splitter = LineSplitter()
    for chunk in chunks:
        yield from splitter.feed(chunk)
    yield from splitter.close()


def split_lines(data: bytes) -> List[str]:
    return list(iter_lines([data]))
