"""Application-level state container.

One ``Workspace`` per Flask app: it owns the storage handle, the shared lock
and clock, and every store. Stores receive their collaborators explicitly;
there are no module-level singletons.
"""
from __future__ import annotations
import logging
import threading
from typing import Callable

from fieldops.services.dashboard import compute_dashboard_stats
from fieldops.services.messages import MessageStore
from fieldops.services.notifications import NotificationStore
from fieldops.services.projects import ProjectStore
from fieldops.services.sessions import SessionRegistry
from fieldops.services.stock import StockStore
from fieldops.services.storage import KeyValueStorage
from fieldops.services.users import UserDirectory
from fieldops.utils.clock import utcnow_iso

log = logging.getLogger('fieldops.workspace')


class Workspace:
    def __init__(self, storage: KeyValueStorage, clock: Callable[[], str] = utcnow_iso):
        self.storage = storage
        self.clock = clock
        self.lock = threading.RLock()
        self.sessions = SessionRegistry(storage, self.lock)
        self.users = UserDirectory(storage, clock, self.lock)
        self.notifications = NotificationStore(storage, clock, self.lock)
        self.messages = MessageStore(storage, clock, self.lock, self.users, self.notifications)
        self.projects = ProjectStore(storage, clock, self.lock, self.notifications)
        self.stock = StockStore(storage, clock, self.lock)

    def load(self):
        """Read every persisted collection; missing or unreadable blobs start empty."""
        for store in (self.sessions, self.users, self.notifications, self.messages, self.projects, self.stock):
            store.load()
        log.info('Workspace loaded: %d users, %d projects, %d stock items',
                 len(self.users.users), len(self.projects.projects), len(self.stock.stock_items))
        return self

    def dashboard_stats(self) -> dict:
        return compute_dashboard_stats(self.projects.projects, self.stock.stock_items, self.users.users)


__all__ = ['Workspace']
