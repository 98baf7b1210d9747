"""context.py - Key/value context stack and the request-scoped carrier.

ContextStack holds the annotations rendered into every dabug line prefix:

    Context entries: Ordered key/value pairs, rendered left to right as
                     ``" (k1:v1, k2:v2)"``. Keys need not be unique.

    Carrier:         A ``contextvars.ContextVar`` that lets a Dabugger travel
                     with the current thread or asyncio Task, so nested code can
                     find the same instance without a global reference.

ContextStack is not locked. Every mutation swaps in a new tuple, so a reader on
another thread always sees a complete snapshot, but an instance's contexts are
expected to have a single writer. Configure contexts before fanning out work,
or give each worker its own Dabugger.
"""

import contextvars
from typing import Any, Iterator, NamedTuple, Optional, Tuple


class ContextEntry(NamedTuple):
    """One key/value annotation on a ContextStack."""

    key: str
    value: Any


class ContextStack:
    """Ordered stack of ContextEntry annotations.

    Example:
        >>> stack = ContextStack()
        >>> stack.push("user", 42)
        ContextEntry(key='user', value=42)
        >>> stack.push("job", "sync")
        ContextEntry(key='job', value='sync')
        >>> stack.render()
        ' (user:42, job:sync)'
        >>> stack.remove("user")
        >>> stack.render()
        ' (job:sync)'
    """

    def __init__(self) -> None:
        self._entries: Tuple[ContextEntry, ...] = ()

    def push(self, key: str, value: Any) -> ContextEntry:
        """Append a key/value pair to the top of the stack.

        Returns:
            The pushed entry, which can later be passed to ``discard()``.
        """
        entry = ContextEntry(key, value)
        self._entries = self._entries + (entry,)
        return entry

    def remove(self, key: str) -> None:
        """Remove every entry whose key equals ``key``."""
        self._entries = tuple(e for e in self._entries if e.key != key)

    def discard(self, entry: ContextEntry) -> None:
        """Remove one specific entry (by identity), wherever it sits.

        Does nothing if the entry has already been removed.
        """
        for i in range(len(self._entries) - 1, -1, -1):
            if self._entries[i] is entry:
                self._entries = self._entries[:i] + self._entries[i + 1 :]
                return

    def pop(self) -> Optional[ContextEntry]:
        """Remove and return the most recently pushed entry.

        Returns:
            The removed entry, or None if the stack was already empty.
        """
        entries = self._entries
        if not entries:
            return None
        self._entries = entries[:-1]
        return entries[-1]

    def clear(self) -> None:
        """Remove all entries."""
        self._entries = ()

    def render(self) -> str:
        """Render the stack as ``" (k1:v1, k2:v2)"``, or ``""`` when empty."""
        entries = self._entries
        if not entries:
            return ""
        return " (" + ", ".join(f"{e.key}:{e.value}" for e in entries) + ")"

    def __iter__(self) -> Iterator[ContextEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)


# ---------------------------------------------------------------------------
# Request-scoped carrier.
#
# Each thread and asyncio Task sees its own value, and child Tasks inherit the
# value that was current when they were created.
# ---------------------------------------------------------------------------
_dabugger_var: contextvars.ContextVar = contextvars.ContextVar("dabug_instance")


def store_in_context(dabugger: Any) -> contextvars.Token:
    """Attach ``dabugger`` to the current execution context.

    Returns:
        A token that ``reset_context()`` accepts to restore the previous value.
    """
    return _dabugger_var.set(dabugger)


def from_context() -> Optional[Any]:
    """Return the Dabugger attached to the current context, or None.

    Callers that need an instance regardless should fall back explicitly,
    e.g. ``from_context() or get_default()``.
    """
    return _dabugger_var.get(None)


def reset_context(token: contextvars.Token) -> None:
    """Restore the carrier to the value it held before ``store_in_context()``."""
    _dabugger_var.reset(token)
