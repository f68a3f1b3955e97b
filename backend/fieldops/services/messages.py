"""Messages between pairs of users.

The log is append-only; ``read`` is the only mutable field. Conversations are
derived from the log on every read and never stored.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from fieldops.constants.statuses import KEY_MESSAGES, NotificationType
from fieldops.errors import NotFound, ValidationError
from fieldops.services.attachments import normalize_attachments
from fieldops.services.collection import CollectionStore
from fieldops.services.policy import authorize
from fieldops.utils.clock import new_id

log = logging.getLogger('fieldops.messages')

PREVIEW_LENGTH = 50


def _involves(message: dict, user_id: str) -> bool:
    return message.get('sender_id') == user_id or message.get('receiver_id') == user_id


class MessageStore(CollectionStore):
    storage_key = KEY_MESSAGES

    def __init__(self, storage, clock, lock, directory, notifications):
        super().__init__(storage, clock, lock)
        self._directory = directory
        self._notifications = notifications

    @property
    def messages(self) -> List[dict]:
        return self.items

    def send_message(self, actor: Optional[dict], receiver_id: str, content: str, attachments=None) -> dict:
        authorize(actor, 'sendMessages')
        if self._directory.get_user_by_id(receiver_id) is None:
            raise NotFound(description='Receiver not found')
        text = (content or '').strip()
        files = normalize_attachments(attachments, actor['id'], self._clock)
        if not text and not files:
            raise ValidationError(description='content required')
        message = {
            'id': new_id('msg'),
            'sender_id': actor['id'],
            'sender_name': actor.get('name', ''),
            'receiver_id': receiver_id,
            'content': text,
            'attachments': files,
            'read': False,
            'created_at': self._clock(),
        }
        with self._lock:
            self._commit(self._items + [message])
        log.info('Message sent to: %s', receiver_id)
        preview = text[:PREVIEW_LENGTH] + ('...' if len(text) > PREVIEW_LENGTH else '')
        self._notifications.add_notification({
            'title': 'New Message',
            'message': f"{actor.get('name', '')}: {preview or 'attachment'}",
            'type': NotificationType.MESSAGE,
            'related_id': receiver_id,
            'sender_id': actor['id'],
        })
        return dict(message)

    def get_messages_for_user(self, actor: Optional[dict], other_user_id: str) -> List[dict]:
        authorize(actor)
        me = actor['id']
        thread = [
            m for m in self.items
            if (m['sender_id'] == me and m['receiver_id'] == other_user_id)
            or (m['sender_id'] == other_user_id and m['receiver_id'] == me)
        ]
        return sorted(thread, key=lambda m: m['created_at'])

    def mark_message_as_read(self, actor: Optional[dict], message_id: str) -> dict:
        authorize(actor)
        with self._lock:
            message = self._find(message_id)
            if message is None or not _involves(message, actor['id']):
                raise NotFound(description='Message not found')
            if not message.get('read'):
                self._commit([{**m, 'read': True} if m['id'] == message_id else m for m in self._items])
        return self.get(message_id)

    def get_unread_messages_count(self, actor: Optional[dict], from_user_id: Optional[str] = None) -> int:
        if not actor:
            return 0
        return sum(
            1 for m in self._items
            if m['receiver_id'] == actor['id']
            and not m.get('read')
            and (from_user_id is None or m['sender_id'] == from_user_id)
        )

    def conversations(self, actor: Optional[dict]) -> List[dict]:
        """Latest message per counterpart, newest conversation first."""
        if not actor:
            return []
        me = actor['id']
        latest = {}
        for message in self.items:
            if not _involves(message, me):
                continue
            other = message['receiver_id'] if message['sender_id'] == me else message['sender_id']
            current = latest.get(other)
            # on equal timestamps the first log entry stays
            if current is None or message['created_at'] > current['created_at']:
                latest[other] = message
        rows = [
            {'other_user_id': other, 'last_message': message, 'user': self._directory.get_user_by_id(other)}
            for other, message in latest.items()
        ]
        rows.sort(key=lambda r: r['last_message']['created_at'], reverse=True)
        return rows


__all__ = ['MessageStore']
