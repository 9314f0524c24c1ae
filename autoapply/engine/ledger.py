"""
Outcome Ledger: append-only record of one ItemAttemptOutcome per item-attempt.

Counts are derived from the entries, never tracked separately. Each entry is
keyed by the item's per-run key; a second record for the same key is refused,
which is what keeps a repeated pass over one item from being counted twice.
"""

from __future__ import annotations

from typing import Callable, Iterator

from ..core.errors import DuplicateOutcomeError
from ..reporting.schemas import ItemAttemptOutcome, ItemKey


Listener = Callable[["OutcomeLedger", ItemAttemptOutcome], None]


class OutcomeLedger:
    def __init__(self) -> None:
        self._entries: list[ItemAttemptOutcome] = []
        self._keys: set[ItemKey] = set()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Call `listener(ledger, outcome)` after every append."""
        self._listeners.append(listener)

    def has(self, key: ItemKey) -> bool:
        return key in self._keys

    def append(self, outcome: ItemAttemptOutcome) -> None:
        key = outcome.key
        if key in self._keys:
            raise DuplicateOutcomeError(f"outcome already recorded for item {key}")
        self._keys.add(key)
        self._entries.append(outcome)
        for listener in self._listeners:
            listener(self, outcome)

    @property
    def entries(self) -> tuple[ItemAttemptOutcome, ...]:
        return tuple(self._entries)

    @property
    def succeeded(self) -> int:
        return sum(1 for e in self._entries if e.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for e in self._entries if not e.succeeded)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ItemAttemptOutcome]:
        return iter(self._entries)
