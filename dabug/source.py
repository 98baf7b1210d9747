"""source.py - Call-site resolution for dabug lines.

Every dabug line records where it was emitted. ``resolve()`` walks the
interpreter stack from the public entry point that called it to the frame
that invoked that entry point, then shortens the file path relative to that
call site's own directory, so a line reads ``run.py:12`` rather than an
absolute path.

The number of frames to climb is passed explicitly as ``depth`` (exposed to
callers as ``stacklevel``, with the same meaning as in
``logging.Logger.log``). Each public entry point resolves its call site once,
at entry, so internal helpers can be rearranged without shifting the result.
"""

import inspect
import os
from types import FrameType
from typing import NamedTuple, Optional


class Source(NamedTuple):
    """An immutable call-site record.

    Attributes:
        file (str): Name of the calling file, shortened relative to its own
            directory.
        function (str): Qualified name of the calling function.
        line (int): Line number of the call.
    """

    file: str
    function: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


EMPTY_SOURCE = Source("", "", 0)


def _walk(frame: Optional[FrameType], depth: int) -> Optional[FrameType]:
    while frame is not None and depth > 0:
        frame = frame.f_back
        depth -= 1
    return frame


def _function_name(frame: FrameType) -> str:
    code = frame.f_code
    # co_qualname only exists on 3.11+
    return getattr(code, "co_qualname", code.co_name)


def shorten(path: str, base: str) -> str:
    """Return ``path`` relative to ``base`` when it lies beneath ``base``.

    Paths outside ``base`` are returned unchanged.

    Example:
        >>> shorten("/src/app/jobs/run.py", "/src/app")
        'jobs/run.py'
        >>> shorten("/opt/other.py", "/src/app")
        '/opt/other.py'
    """
    if base and path.startswith(base.rstrip(os.sep) + os.sep):
        return path[len(base.rstrip(os.sep)) + 1 :]
    return path


def caller_frame(depth: int = 1) -> Optional[FrameType]:
    """Return the frame ``depth`` levels above the function calling this one.

    ``depth=1`` is the caller's caller. Returns None when the stack is not
    that deep.
    """
    # One step from currentframe() reaches the function that called us.
    return _walk(inspect.currentframe(), depth + 1)


def resolve(depth: int = 1) -> Source:
    """Resolve the call site ``depth`` frames above the calling function.

    The calling function is treated as the public entry point: ``depth=1``
    names whoever called it, ``depth=2`` skips one more forwarding layer, and
    so on. The returned file path is shortened relative to the resolved
    frame's own directory, leaving the bare file name.

    Args:
        depth: Number of frames to climb above the entry point. Values below
            1 resolve to the entry point itself.

    Returns:
        The resolved ``Source``, or ``EMPTY_SOURCE`` if the stack is shallower
        than requested. Never raises.
    """
    entry = target = None
    try:
        entry = _walk(inspect.currentframe(), 1)
        if entry is None:
            return EMPTY_SOURCE
        target = _walk(entry, depth)
        if target is None:
            return EMPTY_SOURCE

        base = os.path.dirname(target.f_code.co_filename)
        return Source(
            file=shorten(target.f_code.co_filename, base),
            function=_function_name(target),
            line=target.f_lineno,
        )
    finally:
        # Frames reference their locals; drop them to avoid reference cycles.
        del entry, target
