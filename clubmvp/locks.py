"""In-process serialization of recompute runs per (club, formula)."""

import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Iterator


class RecomputeLocks:
    """
    Registry of one lock per (club_id, formula_id).

    Two recomputes of overlapping scopes under the same formula version race
    between one run's delete and the other's insert; holding the key's lock
    for the whole load-evaluate-replace section serializes them. This only
    covers threads of one process.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = defaultdict(threading.Lock)

    def lock_for(self, club_id: str, formula_id: str) -> threading.Lock:
        with self._guard:
            return self._locks[(club_id, formula_id)]

    @contextmanager
    def hold(self, club_id: str, formula_id: str) -> Iterator[None]:
        lock = self.lock_for(club_id, formula_id)
        with lock:
            yield


default_locks = RecomputeLocks()
