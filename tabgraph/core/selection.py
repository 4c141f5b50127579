from __future__ import annotations

from collections.abc import Iterable

from ..utils.iterables import unique_iter
from .structure import SelectionKind

__all__ = [
    "Selection",
]


class Selection:
    """Ordered, duplicate-free set of node or edge ids.

    A graph without any selection holds ``None``; a ``Selection`` with no ids is
    an existing but empty selection (e.g. after ``clear_selection()``).
    Instances are immutable: every operation returns a new ``Selection``.

    Parameters
    ----------
    kind : SelectionKind or str
        ``"nodes"`` or ``"edges"``.
    ids : Iterable[int], optional
        Member ids. Order of first appearance is kept.

    """

    def __init__(self, kind, ids: Iterable[int] = ()):
        self._kind = SelectionKind(kind)
        self._ids = tuple(unique_iter(int(i) for i in ids))

    @property
    def kind(self) -> SelectionKind:
        return self._kind

    @property
    def ids(self) -> tuple[int, ...]:
        return self._ids

    def is_empty(self) -> bool:
        return not self._ids

    def replace(self, ids: Iterable[int]) -> "Selection":
        return Selection(self._kind, ids)

    def invert(self, universe: Iterable[int]) -> "Selection":
        """Complement against ``universe`` (the ids of the scoped table, in table order)."""
        members = set(self._ids)
        return Selection(self._kind, (i for i in universe if i not in members))

    def cleared(self) -> "Selection":
        return Selection(self._kind, ())

    def discard(self, ids: Iterable[int]) -> "Selection":
        gone = set(ids)
        return Selection(self._kind, (i for i in self._ids if i not in gone))

    def __contains__(self, item) -> bool:
        return item in self._ids

    def __iter__(self):
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return self._kind == other._kind and self._ids == other._ids

    def __hash__(self) -> int:
        return hash((self._kind, self._ids))

    def __repr__(self) -> str:
        return f"<Selection | {self._kind.value}={list(self._ids)}>"
