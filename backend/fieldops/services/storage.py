"""Opaque key-value storage for whole collections.

Every store persists by overwriting its blob (``set_item``) after each
mutation and reads it once at startup (``get_item``). Failures are logged and
swallowed: the in-memory state stays authoritative and unsaved changes are
lost on restart.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from fieldops.models.storage import KVEntry

log = logging.getLogger('fieldops.storage')


class KeyValueStorage:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def get_item(self, key: str) -> Optional[Any]:
        try:
            with self._sessions() as session:
                entry = session.execute(select(KVEntry).where(KVEntry.key == key)).scalar_one_or_none()
                if entry is None:
                    return None
                # detach from the ORM row so callers own a plain copy
                return json.loads(json.dumps(entry.value))
        except SQLAlchemyError:
            log.exception('Error loading %s from storage', key)
            return None

    def set_item(self, key: str, value: Any) -> bool:
        payload = json.loads(json.dumps(value))
        try:
            with self._sessions.begin() as session:
                entry = session.get(KVEntry, key)
                if entry is None:
                    session.add(KVEntry(key=key, value=payload))
                else:
                    entry.value = payload
            return True
        except SQLAlchemyError:
            log.exception('Error saving %s to storage', key)
            return False

    def remove_item(self, key: str) -> bool:
        try:
            with self._sessions.begin() as session:
                entry = session.get(KVEntry, key)
                if entry is not None:
                    session.delete(entry)
            return True
        except SQLAlchemyError:
            log.exception('Error removing %s from storage', key)
            return False

    def keys(self):
        with self._sessions() as session:
            return sorted(session.execute(select(KVEntry.key)).scalars().all())


__all__ = ['KeyValueStorage']
