from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from .stimulus import LETTERS

logger = logging.getLogger(__name__)


class MasteryTable(Mapping[str, int]):
    """Read-only letter -> practice count table covering exactly a..z.

    Updates go through ``record_practice``, which returns a new table; a table
    held by someone else never changes underneath them.
    """

    __slots__ = ("_scores",)

    def __init__(self, scores: Mapping[str, int] | None = None) -> None:
        base = {letter: 0 for letter in LETTERS}
        if scores is not None:
            for letter, score in scores.items():
                if letter not in base:
                    raise ValueError(f"untracked letter: {letter!r}")
                if int(score) < 0:
                    raise ValueError("scores must be >= 0")
                base[letter] = int(score)
        self._scores = MappingProxyType(base)

    def __getitem__(self, letter: str) -> int:
        return self._scores[letter]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def __repr__(self) -> str:
        return f"MasteryTable({dict(self._scores)!r})"

    def score(self, letter: str) -> int:
        return self._scores.get(letter, 0)

    def total(self) -> int:
        return sum(self._scores.values())


def new_mastery_table() -> MasteryTable:
    return MasteryTable()


def record_practice(table: MasteryTable, letter: str) -> MasteryTable:
    """Return ``table`` with ``letter``'s count increased by one."""

    if letter not in table:
        logger.warning("record_practice called with untracked letter %r; ignoring", letter)
        return table
    scores = dict(table)
    scores[letter] += 1
    return MasteryTable(scores)


def ranked(table: MasteryTable) -> list[tuple[str, int]]:
    """Letters in presentation priority: lowest count first, ties alphabetical."""

    return sorted(table.items(), key=lambda item: (item[1], item[0]))


def select_next(table: MasteryTable) -> str:
    letter, _ = ranked(table)[0]
    return letter
