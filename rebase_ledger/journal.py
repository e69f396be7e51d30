"""
journal.py - Undo Log for All-or-Nothing Operations

Every stateful component (RebaseToken, NativeCurrency, Vault) records how to
undo each write it makes while an atomic() scope is open. If the scope exits
with an exception, the writes made inside it are undone in reverse order and
the exception propagates. Scopes nest: an inner failure unwinds only back to
where the inner scope started, and a failure in an outer scope (the vault,
after the ledger burn already succeeded) unwinds the inner work too.

Components that take part in the same operation each open their own scope:

    with token.atomic(), currency.atomic():
        token.burn(...)
        currency.send(...)      # raises -> both scopes roll back

Outside any scope writes are not journaled; public entry points always open a
scope before writing.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, List, MutableMapping, TypeVar

K = TypeVar("K")
V = TypeVar("V")

_MISSING = object()


class Journal:
    """Stack of undo actions with nested savepoints."""

    def __init__(self):
        self._undo: List[Callable[[], None]] = []
        self._depth = 0

    @property
    def active(self) -> bool:
        return self._depth > 0

    def record(self, undo: Callable[[], None]) -> None:
        if self._depth:
            self._undo.append(undo)

    def record_item(self, mapping: MutableMapping[K, V], key: K) -> None:
        """Remember the current value of mapping[key] (or its absence)."""
        if not self._depth:
            return
        previous = mapping.get(key, _MISSING)
        if previous is _MISSING:
            self._undo.append(lambda: mapping.pop(key, None))
        else:
            self._undo.append(lambda: mapping.__setitem__(key, previous))

    def record_list_length(self, items: List) -> None:
        """Remember a list's length so appends can be truncated away."""
        if not self._depth:
            return
        length = len(items)
        self._undo.append(lambda: items.__delitem__(slice(length, None)))

    def record_attr(self, obj: object, attr: str) -> None:
        if not self._depth:
            return
        previous = getattr(obj, attr)
        self._undo.append(lambda: setattr(obj, attr, previous))

    def _rollback_to(self, mark: int) -> None:
        while len(self._undo) > mark:
            self._undo.pop()()

    @contextmanager
    def scope(self) -> Iterator[None]:
        mark = len(self._undo)
        self._depth += 1
        try:
            yield
        except BaseException:
            self._rollback_to(mark)
            raise
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._undo.clear()

    def __len__(self) -> int:
        return len(self._undo)
