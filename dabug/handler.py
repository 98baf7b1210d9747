"""handler.py - Bridge from the standard logging module into dabug lines.

DabugHandler lets existing ``logging`` calls show up inline with ``dabug.msg``
and ``dabug.here`` output. Each record becomes one dabug line annotated with
the Dabugger's current contexts and the record's own call site, so in buffered
mode it is flushed in the same aligned block as everything else.

Typical usage:
    import logging
    import dabug
    from dabug import DabugHandler

    d = dabug.new()
    logging.getLogger().addHandler(DabugHandler(d))

    d.msg("starting")
    logging.getLogger(__name__).info("loaded config")
    d.flush()      # both lines, one block
"""

import logging
from typing import Optional

from . import core
from .dabugger import Dabugger
from .source import Source

_OWN_LOGGER = __name__.partition(".")[0]


class DabugHandler(logging.Handler):
    """A logging.Handler that appends records to a Dabugger.

    Attributes:
        _dabugger (Optional[Dabugger]): Target instance. When None, the
            process-wide default is looked up at emit time, so the handler
            follows ``dabug.set_default()``.

    Example:
        >>> import io, logging
        >>> out = io.StringIO()
        >>> handler = DabugHandler(Dabugger(writer=out, auto_flush=True))
        >>> log = logging.getLogger("doc")
        >>> log.addHandler(handler)
    """

    def __init__(
        self, dabugger: Optional[Dabugger] = None, level: int = logging.NOTSET
    ) -> None:
        super().__init__(level)
        self._dabugger = dabugger

    @property
    def dabugger(self) -> Dabugger:
        if self._dabugger is None:
            return core.get_default()
        return self._dabugger

    def emit(self, record: logging.LogRecord) -> None:
        """Append ``record`` to the target Dabugger as one line.

        Records from dabug's own loggers are skipped: they report failures
        of the very writer this handler would append to.
        """
        if record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + "."):
            return
        try:
            source = Source(record.filename, record.funcName or "", record.lineno)
            self.dabugger.append(self._to_message(record), source)
        except Exception:
            # Let the logging machinery report it; never break the caller.
            self.handleError(record)

    def _to_message(self, record: logging.LogRecord) -> str:
        """Render ``record`` as ``"[LEVEL] message"``.

        When the record carries exception info, the exception class and text
        are appended, e.g. ``"[ERROR] save failed ValueError: bad id"``.
        """
        text = f"[{record.levelname}] {record.getMessage()}"
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            text = f"{text} {type(exc).__name__}: {exc}"
        return text
