"""instrument.py - Optional @trace decorator emitting dabug lines per call.

The decorator records three kinds of line for each call to the wrapped
function, all attributed to the call site of the wrapped function:

    ``>>``  Entry, with every bound argument value.
    ``<<``  Normal return, with the return value.
    ``!!``  Unhandled exception, with its type and message (then re-raised).

Usage:
    from dabug import trace

    @trace                      # uses the process-wide default Dabugger
    def charge(user_id, amount):
        ...

    @trace(dabugger=job_dabugger)
    def reconcile(batch):
        ...
"""

import inspect
from functools import wraps
from typing import Callable, Optional

from . import core
from .dabugger import Dabugger


def _bound_args(func: Callable, args: tuple, kwargs: dict) -> str:
    try:
        bound = inspect.signature(func).bind(*args, **kwargs)
        bound.apply_defaults()
    except (TypeError, ValueError):
        # Builtins without a signature, or a call that does not bind.
        return "..."
    return ", ".join(f"{k}={v!r}" for k, v in bound.arguments.items())


def trace(func: Optional[Callable] = None, *, dabugger: Optional[Dabugger] = None):
    """Decorator that emits entry, return and exception lines for ``func``.

    Args:
        func: The callable to wrap. Supplied implicitly when used as ``@trace``.
        dabugger: Instance to emit through. Defaults to the process-wide
            default, looked up on every call.

    Returns:
        The wrapped callable (``functools.wraps`` preserves its metadata), or
        a decorator when called with only keyword arguments.

    Raises:
        Any exception raised by ``func`` is re-raised unchanged after the
        ``!!`` line is emitted.

    Example:
        >>> import io
        >>> out = io.StringIO()
        >>> d = Dabugger(writer=out, auto_flush=True)
        >>> @trace(dabugger=d)
        ... def divide(a, b):
        ...     return a / b
        >>> divide(10, 2)
        5.0
        >>> [line.split("- ", 1)[1] for line in out.getvalue().splitlines()]
        ['>> divide(a=10, b=2)', '<< 5.0']
    """
    if func is None:
        return lambda f: trace(f, dabugger=dabugger)

    @wraps(func)
    def wrapper(*args, **kwargs):
        target = dabugger or core.get_default()
        # stacklevel=2: skip this wrapper and report the wrapped function's caller.
        target.msg(
            ">> %s(%s)", func.__qualname__, _bound_args(func, args, kwargs), stacklevel=2
        )
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            target.msg("!! %s: %s", type(exc).__name__, exc, stacklevel=2)
            raise
        target.msg("<< %r", result, stacklevel=2)
        return result

    return wrapper
