"""Base class for stores holding one whole collection in memory.

Mutations build a new list and hand it to ``_commit``, which swaps it in and
persists the full collection under ``storage_key``.
"""
from __future__ import annotations
import copy
import logging
import threading
from typing import Callable, List, Optional

from fieldops.services.storage import KeyValueStorage
from fieldops.utils.clock import utcnow_iso

log = logging.getLogger('fieldops.stores')


class CollectionStore:
    storage_key: str = ''

    def __init__(self, storage: KeyValueStorage, clock: Callable[[], str] = utcnow_iso, lock: Optional[threading.RLock] = None):
        self._storage = storage
        self._clock = clock
        self._lock = lock or threading.RLock()
        self._items: List[dict] = []

    def load(self):
        data = self._storage.get_item(self.storage_key)
        self._items = data if isinstance(data, list) else []
        log.debug('Loaded %d %s', len(self._items), self.storage_key)
        return self

    @property
    def items(self) -> List[dict]:
        return copy.deepcopy(self._items)

    def _commit(self, items: List[dict]):
        self._items = items
        self._storage.set_item(self.storage_key, items)

    def _find(self, item_id: str) -> Optional[dict]:
        return next((item for item in self._items if item.get('id') == item_id), None)

    def get(self, item_id: str) -> Optional[dict]:
        found = self._find(item_id)
        return copy.deepcopy(found) if found is not None else None


__all__ = ['CollectionStore']
