"""buffer.py - Lock-guarded store for pending dabug lines.

LineBuffer holds the lines a Dabugger has produced while auto-flush is off.
Nothing is written until the owner flushes, at which point the whole buffer is
rendered as one aligned block and cleared.

Design decisions:
    - A plain list guarded by one ``threading.RLock``. The lock is public so the
      owning Dabugger can hold it across the full read-render-write-clear
      sequence of a flush; the buffer's own methods re-acquire it, which the
      re-entrant lock allows.
    - ``flash()`` combines snapshot and clear in one locked step so an append
      can never land between the read and the clear.
"""

import threading
from typing import List

from .source import Source


class Line:
    """One pending or emitted dabug record.

    Attributes:
        message (str): Free-text payload. Empty for a bare ``here()`` marker.
        source (Source): Call site that produced the line.
        prefix (str): Fully rendered left-hand decoration (line prefix, call
            site and contexts), fixed when the line was appended so later
            context or prefix changes do not alter it.
    """

    __slots__ = ("message", "source", "prefix")

    def __init__(self, message: str, source: Source, prefix: str = "") -> None:
        self.message = message
        self.source = source
        self.prefix = prefix

    def __repr__(self) -> str:  # pragma: no cover
        return f"Line({self.prefix!r}, {self.message!r})"


class LineBuffer:
    """Append-only list of pending Line objects, safe to share across threads.

    Example:
        >>> buf = LineBuffer()
        >>> buf.push(Line("first", Source("a.py", "f", 1)))
        >>> buf.push(Line("second", Source("a.py", "f", 2)))
        >>> len(buf)
        2
        >>> [line.message for line in buf.flash()]
        ['first', 'second']
        >>> len(buf)   # cleared after flash
        0
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._lines: List[Line] = []

    def push(self, line: Line) -> None:
        """Append ``line`` to the end of the buffer."""
        with self.lock:
            self._lines.append(line)

    def flash(self) -> List[Line]:
        """Return all pending lines in insertion order and clear the buffer."""
        with self.lock:
            lines = self._lines
            self._lines = []
        return lines

    def snapshot(self) -> List[Line]:
        """Return a copy of the pending lines without clearing the buffer."""
        with self.lock:
            return list(self._lines)

    def clear(self) -> None:
        """Discard all pending lines without returning them."""
        with self.lock:
            self._lines = []

    def __len__(self) -> int:
        return len(self._lines)
