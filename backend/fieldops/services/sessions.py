"""Session bookkeeping behind the ``auth`` storage key.

Session tokens are stateless; logging out records the token id here and the
JWT blocklist loader consults ``is_revoked``.
"""
from __future__ import annotations
import logging
import threading
from typing import Optional

from fieldops.constants.statuses import KEY_AUTH
from fieldops.services.storage import KeyValueStorage

log = logging.getLogger('fieldops.sessions')


class SessionRegistry:
    def __init__(self, storage: KeyValueStorage, lock: Optional[threading.RLock] = None):
        self._storage = storage
        self._lock = lock or threading.RLock()
        self._revoked = set()

    def load(self):
        data = self._storage.get_item(KEY_AUTH) or {}
        self._revoked = set(data.get('revoked', [])) if isinstance(data, dict) else set()
        return self

    def revoke(self, jti: str, user_id: Optional[str] = None):
        with self._lock:
            self._revoked.add(jti)
            self._storage.set_item(KEY_AUTH, {'revoked': sorted(self._revoked)})
        log.info('User logged out: %s', user_id)

    def is_revoked(self, jti: str) -> bool:
        return jti in self._revoked


__all__ = ['SessionRegistry']
