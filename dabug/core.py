"""core.py - Process-wide default Dabugger and the module-level facade.

The facade functions (``dabug.msg``, ``dabug.here``, ...) operate on one
default instance that prints immediately, with the line prefix ``"DABUG: "``.

The default is built lazily, under a lock, on first use. Anything that needs
it (including ``new()``, which copies its line prefix) goes through
``get_default()``, so the initialisation order is always the same. A program
that wants different defaults installs its own instance once at startup with
``set_default()``.

Every emitting facade function forwards to the instance with ``stacklevel=2``
because it adds exactly one frame between the caller and the instance method.
"""

import threading
from typing import Any, ContextManager, Optional

from . import context as _context
from .context import ContextEntry
from .dabugger import Dabugger

DEFAULT_LINE_PREFIX = "DABUG: "

_default: Optional[Dabugger] = None
_default_lock = threading.Lock()


def get_default() -> Dabugger:
    """Return the process-wide default Dabugger, creating it on first access."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Dabugger(line_prefix=DEFAULT_LINE_PREFIX, auto_flush=True)
    return _default


def set_default(dabugger: Optional[Dabugger]) -> None:
    """Install ``dabugger`` as the default used by the facade functions.

    Passing None drops the current default; the next access builds a fresh
    one with the standard settings.
    """
    global _default
    with _default_lock:
        _default = dabugger


def new(writer: Any = None) -> Dabugger:
    """Create an independent Dabugger with auto-flush disabled.

    The new instance copies the default's line prefix at construction time.
    Later prefix changes on either instance do not affect the other.
    """
    return Dabugger(writer=writer, line_prefix=get_default().line_prefix)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def set_writer(writer: Any) -> None:
    """Send the default instance's output to ``writer``."""
    get_default().set_writer(writer)


def set_line_prefix(prefix: str) -> None:
    """Set the prefix prepended to every line the default instance prints."""
    get_default().set_line_prefix(prefix)


def set_auto_flush(enabled: bool) -> None:
    """Switch the default instance between immediate and buffered output."""
    get_default().set_auto_flush(enabled)


# ---------------------------------------------------------------------------
# Emitters
# ---------------------------------------------------------------------------


def msg(format: str, *args: Any) -> None:
    """Emit a %-formatted message through the default instance."""
    get_default().msg(format, *args, stacklevel=2)


def here() -> None:
    """Emit a "reached here" marker through the default instance."""
    get_default().here(stacklevel=2)


def objs(*things: Any) -> None:
    """Dump ``things`` on one line through the default instance."""
    get_default().objs(*things, stacklevel=2)


def stack(num: int = 0) -> None:
    """Emit the first ``num`` call-stack lines; ``num <= 0`` emits them all."""
    get_default().stack(num, stacklevel=2)


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


def add_context(key: str, value: Any) -> ContextEntry:
    return get_default().add_context(key, value)


def remove_context(key: str) -> None:
    get_default().remove_context(key)


def remove_all_context() -> None:
    get_default().remove_all_context()


def remove_top_context() -> None:
    get_default().remove_top_context()


def scoped_context(key: str, value: Any) -> ContextManager[ContextEntry]:
    """Scope a ``key:value`` annotation to a ``with`` block on the default."""
    return get_default().scoped_context(key, value)


# ---------------------------------------------------------------------------
# Flushing
# ---------------------------------------------------------------------------


def flush() -> None:
    get_default().flush()


def clear() -> None:
    get_default().clear()


# ---------------------------------------------------------------------------
# Request-scoped carrier
# ---------------------------------------------------------------------------


def store_in_context(dabugger: Optional[Dabugger] = None):
    """Attach ``dabugger`` (default: the default instance) to the current context."""
    return _context.store_in_context(dabugger or get_default())


def from_context() -> Optional[Dabugger]:
    """Return the Dabugger attached to the current context, or None."""
    return _context.from_context()
