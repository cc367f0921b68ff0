"""In-memory bank registry store.

Populated once at startup by the loaders, then only read by request
workers. Writes take a lock; reads are single dict lookups.
"""

from __future__ import annotations

import threading
from collections import Counter

from ibanctl.domain.bank_codes import BankEntry


class InMemoryBankStore:
    """Bank entries keyed by ``(country, bank_code)``.

    The first entry stored for a key wins; registries list branch offices
    after the head office and only the head office is kept.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], BankEntry] = {}
        self._lock = threading.Lock()

    def add(self, entry: BankEntry) -> bool:
        """Store *entry*. Returns False if its key was already present."""
        key = (entry.country.upper(), entry.bank_code)
        with self._lock:
            if key in self._entries:
                return False
            self._entries[key] = entry
            return True

    def find(self, country: str, bank_code: str) -> BankEntry | None:
        return self._entries.get((country.upper(), bank_code))

    def countries(self) -> dict[str, int]:
        """Entry counts per country, for startup logging."""
        with self._lock:
            return dict(Counter(country for country, _ in self._entries))

    def __len__(self) -> int:
        return len(self._entries)
