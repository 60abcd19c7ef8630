"""Line/column to flat-offset conversion with a per-filename LRU cache."""

from __future__ import annotations

from bisect import bisect_right
from collections import OrderedDict

from loguru import logger

DEFAULT_CACHE_SIZE: int = 10


class LineColumnFinder:
    """Converts between (line, column) positions and flat character offsets.

    Lines and columns are both 1-based here.  Lines are split on ``\\n``; a
    ``\\r`` before it is an ordinary character of the line.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [0]
        index = text.find("\n")
        while index != -1:
            starts.append(index + 1)
            index = text.find("\n", index + 1)
        self._line_starts = starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def _line_length(self, line: int) -> int:
        """Length of *line* (1-based) including its trailing newline, if any."""
        start = self._line_starts[line - 1]
        end = self._line_starts[line] if line < len(self._line_starts) else len(self._text)
        return end - start

    def to_index(self, line: int, column: int) -> int:
        """Flat offset of 1-based (*line*, *column*).

        Raises ``ValueError`` if the position lies outside the text.
        """
        if not 1 <= line <= len(self._line_starts):
            msg = f"Line {line} out of range (1..{len(self._line_starts)})"
            raise ValueError(msg)
        if not 1 <= column <= max(self._line_length(line), 1):
            msg = f"Column {column} out of range on line {line}"
            raise ValueError(msg)
        return self._line_starts[line - 1] + column - 1

    def from_index(self, index: int) -> tuple[int, int]:
        """Inverse of :meth:`to_index`: 1-based (line, column) of *index*."""
        if not 0 <= index <= len(self._text):
            msg = f"Index {index} out of range (0..{len(self._text)})"
            raise ValueError(msg)
        line = bisect_right(self._line_starts, index)
        return line, index - self._line_starts[line - 1] + 1


class LocationCache:
    """Bounded least-recently-used cache of ``LineColumnFinder`` per filename.

    Evicted entries are rebuilt transparently on the next lookup.  Callers
    must not change a file's text under the same filename while cached.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity < 1:
            msg = f"Cache capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: OrderedDict[str, LineColumnFinder] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, filename: object) -> bool:
        return filename in self._entries

    def get(self, filename: str, text: str) -> LineColumnFinder:
        """Return the finder for *filename*, building it from *text* on a miss."""
        cached = self._entries.get(filename)
        if cached is not None:
            self._entries.move_to_end(filename)
            return cached
        finder = LineColumnFinder(text)
        self._entries[filename] = finder
        if len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted location index for {}", evicted)
        return finder


def make_cache(size: int = DEFAULT_CACHE_SIZE) -> LocationCache:
    return LocationCache(size)
