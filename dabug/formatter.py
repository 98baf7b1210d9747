"""formatter.py - Rendering of dabug prefixes, lines, blocks and object dumps.

Buffered output format, for a line prefix ``P``::

    P-----
    P<file>:<line> (k1:v1) - first message
    P<file>:<line>          - second message
    P=====

Each line's prefix is padded to the widest prefix in the block so messages
line up in one column. A line without a message (a ``here()`` marker) renders
as its padded prefix alone.
"""

import dataclasses
import traceback
from collections.abc import Mapping
from types import FrameType
from typing import Any, Iterable, List, Optional, Sequence

from .buffer import Line
from .context import ContextStack
from .source import Source

SECTION_BEGIN = "-----"
SECTION_END = "====="
MESSAGE_SEPARATOR = "- "


def render_prefix(line_prefix: str, source: Source, contexts: ContextStack) -> str:
    """Return ``"<line_prefix><file>:<line><contexts> "``."""
    return f"{line_prefix}{source}{contexts.render()} "


def render_line(line: Line, width: int = 0) -> str:
    """Render one line, its prefix left-justified to ``width`` characters."""
    padded = line.prefix.ljust(width)
    if not line.message:
        return padded
    return f"{padded}{MESSAGE_SEPARATOR}{line.message}"


def render_block(lines: Sequence[Line], line_prefix: str) -> str:
    """Render ``lines`` between begin/end delimiters as one string.

    Args:
        lines: Pending lines in emission order. Must not be empty.
        line_prefix: Prefix for the delimiter lines. Callers pass the prefix
            current at flush time; the lines keep the prefix they were
            rendered with.

    Returns:
        The whole block, every line newline-terminated, ready for a single
        write.
    """
    width = max(len(line.prefix) for line in lines)
    rendered = [f"{line_prefix}{SECTION_BEGIN}"]
    rendered.extend(render_line(line, width) for line in lines)
    rendered.append(f"{line_prefix}{SECTION_END}")
    return "\n".join(rendered) + "\n"


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def format_message(format: str, args: tuple) -> str:
    """Interpolate ``args`` into ``format`` the way ``LogRecord`` does.

    Formatting is applied only when ``args`` is non-empty. A single non-empty
    mapping argument is used directly, so ``"%(name)s"`` placeholders work.
    A format string that does not match its arguments never raises: the raw
    format is returned followed by the arguments' repr.

    Example:
        >>> format_message("%d items", (3,))
        '3 items'
        >>> format_message("%d items", ("x",))
        "%d items ('x',)"
    """
    if not args:
        return format
    if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
        args = args[0]
    try:
        return format % args
    except (TypeError, ValueError, KeyError):
        return f"{format} {args!r}"


# ---------------------------------------------------------------------------
# Object dumps
# ---------------------------------------------------------------------------


def _fields(value: Any) -> Optional[List[tuple]]:
    """Return ``(name, value)`` pairs from ``__dict__`` and ``__slots__``."""
    names: List[str] = []
    if hasattr(value, "__dict__"):
        names.extend(vars(value))
    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(s for s in slots if s not in ("__dict__", "__weakref__"))
    if not names and not hasattr(value, "__dict__"):
        return None

    missing = object()
    pairs = []
    for name in dict.fromkeys(names):
        field = getattr(value, name, missing)
        if field is not missing:
            pairs.append((name, field))
    return pairs


# Exact types only: subclasses (namedtuples, OrderedDict, ...) keep their repr.
_CYCLE_MARKERS = {
    list: "[...]",
    tuple: "(...)",
    set: "{...}",
    frozenset: "frozenset(...)",
    dict: "{...}",
}


def _describe_container(value: Any, seen: set) -> str:
    cls = type(value)
    if cls is dict:
        body = ", ".join(
            f"{describe(k, seen)}: {describe(v, seen)}" for k, v in value.items()
        )
        return f"{{{body}}}"

    body = ", ".join(describe(item, seen) for item in value)
    if cls is list:
        return f"[{body}]"
    if cls is tuple:
        return f"({body},)" if len(value) == 1 else f"({body})"
    if not value:
        return f"{cls.__name__}()"
    if cls is set:
        return f"{{{body}}}"
    return f"frozenset({{{body}}})"


def _dataclass_fields(value: Any) -> Optional[List[tuple]]:
    if isinstance(value, type) or not dataclasses.is_dataclass(value):
        return None
    return [
        (f.name, getattr(value, f.name))
        for f in dataclasses.fields(value)
        if f.repr
    ]


def describe(value: Any, _seen: Optional[set] = None) -> str:
    """Return a verbose debug representation of ``value``.

    Lists, tuples, sets and dicts are rendered element by element, and
    dataclasses field by field, so plain objects nested inside them are
    expanded too. Other objects whose class defines its own ``__repr__`` use
    it. Plain objects, whose default repr shows only an address, are expanded
    to ``ClassName(field=value, ...)`` from their instance attributes.

    A value already being rendered higher up renders as ``[...]``, ``{...}``
    or ``ClassName(...)`` instead of recursing forever.

    Example:
        >>> class Person:
        ...     def __init__(self, name):
        ...         self.name = name
        >>> describe(Person("dave"))
        "Person(name='dave')"
        >>> describe([Person("dave"), 1])
        "[Person(name='dave'), 1]"
    """
    cls = type(value)
    fields = None
    if cls in _CYCLE_MARKERS:
        marker = _CYCLE_MARKERS[cls]
    else:
        fields = _dataclass_fields(value)
        if fields is None:
            if cls.__repr__ is not object.__repr__:
                return repr(value)
            fields = _fields(value)
            if fields is None:
                return repr(value)
        marker = f"{cls.__qualname__}(...)"

    seen = set() if _seen is None else _seen
    if id(value) in seen:
        return marker
    seen.add(id(value))
    try:
        if fields is None:
            return _describe_container(value, seen)
        body = ", ".join(f"{name}={describe(field, seen)}" for name, field in fields)
        return f"{cls.__qualname__}({body})"
    finally:
        seen.discard(id(value))


def render_objects(values: Iterable[Any]) -> str:
    """Render ``values`` as ``"[0] <describe(v0)>, [1] <describe(v1)>, ..."``."""
    return ", ".join(f"[{i}] {describe(v)}" for i, v in enumerate(values))


# ---------------------------------------------------------------------------
# Stack dumps
# ---------------------------------------------------------------------------


def render_stack(frame: Optional[FrameType], num: int = 0) -> List[str]:
    """Return the call stack ending at ``frame`` as individual text lines.

    Frames are listed most recent call first, so the first lines describe the
    code nearest the caller.

    Args:
        frame: Innermost frame to include. None yields an empty list.
        num: Number of lines to keep from the top. ``num <= 0`` keeps all.
    """
    if frame is None:
        return []
    summary = traceback.extract_stack(frame)
    summary.reverse()
    text = "".join(traceback.format_list(summary)).rstrip("\n")
    lines = text.split("\n")
    if num > 0:
        lines = lines[:num]
    return lines
