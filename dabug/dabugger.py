"""dabugger.py - The Dabugger instance: buffering, flushing and emit operations.

A Dabugger owns a writer, a line prefix, a ContextStack and a LineBuffer.
Every emit operation resolves its call site once, renders the line prefix at
that instant, and then either writes the line straight away (auto-flush) or
buffers it until ``flush()`` writes the whole batch as one aligned block.

Typical usage:
    import io
    from dabug import Dabugger

    out = io.StringIO()
    d = Dabugger(writer=out)

    d.add_context("job", "sync")
    d.msg("fetched %d rows", 42)
    d.here()
    d.flush()      # one write: -----, two aligned lines, =====

Thread-safety:
    Appends, flushes and auto-flush switches all hold the buffer lock, so a
    flush never renders a half-appended line and an append never races with
    a clear. Setters and context mutations are unsynchronised plain
    assignments; configure an instance before sharing it between threads.
"""

import contextlib
import logging
import sys
import threading
from typing import Any, Iterator

from .buffer import Line, LineBuffer
from .context import ContextEntry, ContextStack, reset_context, store_in_context
from .formatter import (
    format_message,
    render_block,
    render_line,
    render_objects,
    render_prefix,
    render_stack,
)
from .source import Source, caller_frame, resolve

logger = logging.getLogger(__name__)

# Set while a write failure is being reported, so a logging handler that
# routes back into a Dabugger cannot recurse into another failing write.
_reporting = threading.local()


class Dabugger:
    """Buffered, context-annotated execution tracer.

    Attributes:
        writer: File-like object with a ``write(str)`` method. Defaults to
            ``sys.stdout``.
        line_prefix (str): Prepended to every rendered line and delimiter.
        contexts (ContextStack): Annotations rendered into each line prefix.

    Example:
        >>> import io
        >>> out = io.StringIO()
        >>> d = Dabugger(writer=out, auto_flush=True)
        >>> d.msg("value is %s", 3)
        >>> out.getvalue().endswith("- value is 3\\n")
        True
    """

    def __init__(
        self,
        writer: Any = None,
        line_prefix: str = "",
        auto_flush: bool = False,
    ) -> None:
        """Initialise the instance.

        Args:
            writer: Destination for rendered output. Defaults to
                ``sys.stdout``.
            line_prefix: String prepended to every line and delimiter.
            auto_flush: If True, each line is written as soon as it is
                produced; otherwise lines accumulate until ``flush()``.
        """
        self.writer = sys.stdout if writer is None else writer
        self.line_prefix = line_prefix
        self.contexts = ContextStack()
        self._auto_flush = auto_flush
        self._buffer = LineBuffer()

    # ---------------------------------------------------------------------- #
    # Configuration
    # ---------------------------------------------------------------------- #

    @property
    def auto_flush(self) -> bool:
        """True when lines are written as soon as they are produced."""
        return self._auto_flush

    @property
    def pending(self) -> int:
        """Number of buffered lines awaiting ``flush()``."""
        return len(self._buffer)

    def set_writer(self, writer: Any) -> None:
        """Send subsequent output to ``writer``."""
        self.writer = writer

    def set_line_prefix(self, prefix: str) -> None:
        """Use ``prefix`` for lines produced from now on.

        Lines already buffered keep the prefix they were rendered with; the
        delimiters of the next flush use the new one.
        """
        self.line_prefix = prefix

    def set_auto_flush(self, enabled: bool) -> None:
        """Switch between immediate and buffered output.

        Enabling auto-flush writes any pending lines first, so no buffered
        line is dropped by the switch.
        """
        with self._buffer.lock:
            self._auto_flush = enabled
            if enabled:
                self.flush()

    # ---------------------------------------------------------------------- #
    # Emitters
    # ---------------------------------------------------------------------- #

    def msg(self, format: str, *args: Any, stacklevel: int = 1) -> None:
        """Emit a message, %-formatted with ``args`` when any are given.

        A format string that does not match ``args`` does not raise; the line
        shows the raw format followed by the arguments.

        Args:
            format: Message text or %-style format string.
            *args: Values interpolated into ``format``.
            stacklevel: How many frames above this call the reported call
                site is. Wrappers that forward to ``msg`` pass 2 (or more).
        """
        source = resolve(stacklevel)
        self.append(format_message(format, args), source)

    def here(self, stacklevel: int = 1) -> None:
        """Emit a bare "reached here" marker with no message."""
        self.append("", resolve(stacklevel))

    def objs(self, *things: Any, stacklevel: int = 1) -> None:
        """Emit one line dumping each of ``things`` with its position.

        Example output::

            [0] Person(name='dave', loc='earth'), [1] {'a': 1}
        """
        source = resolve(stacklevel)
        self.append(render_objects(things), source)

    def stack(self, num: int = 0, stacklevel: int = 1) -> None:
        """Emit the current call stack, one line per stack-trace text line.

        Args:
            num: Emit only the first ``num`` lines (most recent call first).
                Zero or a negative number emits the whole stack.
            stacklevel: Frames above this call at which the stack starts.
        """
        source = resolve(stacklevel)
        frame = caller_frame(stacklevel)
        try:
            lines = render_stack(frame, num)
        finally:
            del frame
        for text in lines:
            self.append(text, source)

    def append(self, message: str, source: Source) -> None:
        """Render and write or buffer one line for an already-resolved call site.

        The prefix (line prefix, call site and current contexts) is fixed
        here, at append time.
        """
        prefix = render_prefix(self.line_prefix, source, self.contexts)
        line = Line(message, source, prefix)
        with self._buffer.lock:
            if self._auto_flush:
                self._write(render_line(line) + "\n")
                return
            self._buffer.push(line)

    # ---------------------------------------------------------------------- #
    # Contexts
    # ---------------------------------------------------------------------- #

    def add_context(self, key: str, value: Any) -> ContextEntry:
        """Annotate subsequent lines with ``key:value``."""
        return self.contexts.push(key, value)

    def remove_context(self, key: str) -> None:
        """Remove every context entry with the given key."""
        self.contexts.remove(key)

    def remove_all_context(self) -> None:
        self.contexts.clear()

    def remove_top_context(self) -> None:
        """Remove the most recently added context entry, if there is one."""
        self.contexts.pop()

    @contextlib.contextmanager
    def scoped_context(self, key: str, value: Any) -> Iterator[ContextEntry]:
        """Annotate lines emitted inside the ``with`` block with ``key:value``.

        On exit only this entry is removed, even if the block pushed or
        removed others.
        """
        entry = self.contexts.push(key, value)
        try:
            yield entry
        finally:
            self.contexts.discard(entry)

    # ---------------------------------------------------------------------- #
    # Flushing
    # ---------------------------------------------------------------------- #

    def flush(self) -> None:
        """Write all pending lines as one delimited, aligned block.

        Does nothing (not even delimiters) when no lines are pending. The
        buffer lock is held from reading the lines until the block is written
        and the buffer cleared.
        """
        with self._buffer.lock:
            lines = self._buffer.flash()
            if not lines:
                return
            self._write(render_block(lines, self.line_prefix))

    def clear(self) -> None:
        """Discard pending lines without writing them."""
        self._buffer.clear()

    # ---------------------------------------------------------------------- #
    # Request-scoped carrier
    # ---------------------------------------------------------------------- #

    def store_in_context(self):
        """Attach this instance to the current thread / asyncio Task context.

        Returns:
            A ``contextvars.Token`` for ``dabug.context.reset_context()``.
        """
        return store_in_context(self)

    @contextlib.contextmanager
    def attached(self) -> Iterator["Dabugger"]:
        """Attach this instance for the duration of a ``with`` block."""
        token = store_in_context(self)
        try:
            yield self
        finally:
            reset_context(token)

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _write(self, text: str) -> None:
        """Write ``text`` to the writer; a failing writer never reaches the caller."""
        try:
            self.writer.write(text)
        except (OSError, ValueError):
            if getattr(_reporting, "active", False):
                return
            _reporting.active = True
            try:
                logger.warning(
                    "dabug: failed to write to %r", self.writer, exc_info=True
                )
            finally:
                _reporting.active = False
