"""Append-only notification log, most recent first. Only ``read`` ever changes."""
from __future__ import annotations
import logging
from typing import List, Optional

from fieldops.constants.statuses import KEY_NOTIFICATIONS, NotificationType
from fieldops.errors import NotFound
from fieldops.services.collection import CollectionStore
from fieldops.services.policy import authorize
from fieldops.utils.clock import new_id
from fieldops.utils.validation import require_text, validate_status

log = logging.getLogger('fieldops.notifications')


class NotificationStore(CollectionStore):
    storage_key = KEY_NOTIFICATIONS

    @property
    def notifications(self) -> List[dict]:
        return self.items

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.get('read'))

    def add_notification(self, data: dict) -> dict:
        """Record a system event. Internal producers call this directly, no actor gate."""
        notification = {
            'id': new_id('notif'),
            'title': require_text(data, 'title'),
            'message': require_text(data, 'message'),
            'type': validate_status(data.get('type') or NotificationType.SYSTEM, NotificationType.ALL, 'type'),
            'read': False,
            'created_at': self._clock(),
        }
        if data.get('related_id'):
            notification['related_id'] = data['related_id']
        if data.get('sender_id'):
            notification['sender_id'] = data['sender_id']
        with self._lock:
            self._commit([notification] + self._items)
        log.info('Notification added: %s', notification['title'])
        return dict(notification)

    def mark_notification_read(self, actor: Optional[dict], notification_id: str) -> dict:
        authorize(actor, 'viewNotifications')
        with self._lock:
            if self._find(notification_id) is None:
                raise NotFound(description='Notification not found')
            self._commit([{**n, 'read': True} if n['id'] == notification_id else n for n in self._items])
        return self.get(notification_id)

    def mark_all_read(self, actor: Optional[dict]) -> int:
        authorize(actor, 'viewNotifications')
        with self._lock:
            changed = self.unread_count
            self._commit([{**n, 'read': True} for n in self._items])
        return changed

    def clear_all_notifications(self, actor: Optional[dict]) -> None:
        authorize(actor, 'viewNotifications')
        with self._lock:
            self._commit([])
        log.info('Notifications cleared by %s', actor.get('id'))


__all__ = ['NotificationStore']
