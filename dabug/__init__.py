"""dabug/__init__.py - Public API for the dabug package.

dabug is a small execution-tracing helper. Callers drop in ad-hoc lines
(messages, object dumps, "reached here" markers, stack dumps) that are stamped
with their call site and an active key/value context stack, then either print
them straight away or buffer them and flush one column-aligned block.

Quick start:
    import dabug

    # 1. The module-level functions print immediately, prefixed "DABUG: "
    dabug.msg("loaded %d users", 12)
    dabug.here()
    dabug.objs(user, {"retry": 3})

    # 2. Annotate everything that follows
    dabug.add_context("job", "sync")
    with dabug.scoped_context("batch", 7):
        dabug.msg("inside batch")
    dabug.remove_context("job")

    # 3. Buffer lines on an explicit instance and flush them as one block
    d = dabug.new()
    d.msg("step one")
    d.msg("step two")
    d.flush()
    # DABUG: -----
    # DABUG: sync.py:41 - step one
    # DABUG: sync.py:42 - step two
    # DABUG: =====

Exported names:
    Dabugger:       The tracer instance (writer, prefix, contexts, buffer).
    new:            Create a buffered instance inheriting the default's prefix.
    get_default:    The process-wide default instance used by the functions.
    set_default:    Install an explicitly configured default at startup.
    DabugHandler:   logging.Handler that routes log records into a Dabugger.
    trace:          Decorator that emits >>, << and !! lines per call.
    Source:         Resolved call-site record (file, function, line).
"""

from .core import (
    add_context,
    clear,
    flush,
    from_context,
    get_default,
    here,
    msg,
    new,
    objs,
    remove_all_context,
    remove_context,
    remove_top_context,
    scoped_context,
    set_auto_flush,
    set_default,
    set_line_prefix,
    set_writer,
    stack,
    store_in_context,
)
from .dabugger import Dabugger
from .handler import DabugHandler
from .instrument import trace
from .source import Source

__all__ = [
    "Dabugger",
    "DabugHandler",
    "Source",
    "trace",
    "new",
    "get_default",
    "set_default",
    "set_writer",
    "set_line_prefix",
    "set_auto_flush",
    "msg",
    "here",
    "objs",
    "stack",
    "add_context",
    "remove_context",
    "remove_all_context",
    "remove_top_context",
    "scoped_context",
    "flush",
    "clear",
    "store_in_context",
    "from_context",
]
