"""User directory: identities, roles and permission maps.

Every mutation requires a ``developer`` caller. Developer accounts are
immutable to everyone but themselves and can never be deactivated or deleted.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from fieldops.constants.permissions import ALL_PERMISSION_FLAGS, ROLES, ROLE_DEVELOPER, ROLE_EMPLOYEE, default_permissions_for
from fieldops.constants.statuses import KEY_USERS
from fieldops.errors import DuplicateEmail, Forbidden, NotFound, ValidationError
from fieldops.services.collection import CollectionStore
from fieldops.services.policy import authorize
from fieldops.utils.clock import new_id
from fieldops.utils.validation import require_text, validate_status

log = logging.getLogger('fieldops.users')

UPDATABLE_FIELDS = ('name', 'email', 'role', 'avatar', 'external_id', 'is_active')


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class UserDirectory(CollectionStore):
    storage_key = KEY_USERS

    # --- read views ---

    @property
    def users(self) -> List[dict]:
        return self.items

    @property
    def employees(self) -> List[dict]:
        return [u for u in self.items if u.get('role') == ROLE_EMPLOYEE]

    @property
    def non_dev_users(self) -> List[dict]:
        return [u for u in self.items if u.get('role') != ROLE_DEVELOPER]

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        return self.get(user_id)

    def find_by_email(self, email: str) -> Optional[dict]:
        if not email:
            return None
        wanted = _normalize_email(email)
        found = next((u for u in self._items if _normalize_email(u.get('email', '')) == wanted), None)
        return self.get(found['id']) if found else None

    # --- mutations ---

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        wanted = _normalize_email(email)
        return any(
            _normalize_email(u.get('email', '')) == wanted and u.get('id') != exclude_id
            for u in self._items
        )

    def _build_user(self, data: dict) -> dict:
        name = require_text(data, 'name')
        email = require_text(data, 'email')
        role = validate_status(data.get('role') or ROLE_EMPLOYEE, ROLES, 'role')
        user = {
            'id': new_id('user'),
            'name': name,
            'email': email,
            'role': role,
            'permissions': default_permissions_for(role),
            'is_active': True,
            'created_at': self._clock(),
        }
        if data.get('avatar'):
            user['avatar'] = data['avatar']
        if data.get('external_id'):
            user['external_id'] = data['external_id']
        return user

    def create_user(self, actor: Optional[dict], data: dict) -> dict:
        authorize(actor, role=ROLE_DEVELOPER)
        with self._lock:
            user = self._build_user(data or {})
            if self._email_taken(user['email']):
                log.info('User with email %s already exists', user['email'])
                raise DuplicateEmail()
            self._commit(self._items + [user])
        log.info('User created: %s', user['name'])
        return self.get(user['id'])

    def ensure_developer(self, name: str, email: str) -> dict:
        """Bootstrap path: return the user with ``email``, creating a developer if absent."""
        with self._lock:
            existing = self.find_by_email(email)
            if existing:
                return existing
            user = self._build_user({'name': name, 'email': email, 'role': ROLE_DEVELOPER})
            self._commit(self._items + [user])
        log.info('Developer account created: %s', email)
        return self.get(user['id'])

    def _editable_target(self, actor: dict, user_id: str) -> dict:
        target = self._find(user_id)
        if target is None:
            raise NotFound(description='User not found')
        if target.get('role') == ROLE_DEVELOPER and user_id != actor.get('id'):
            raise Forbidden(description='Developer accounts can only be edited by themselves')
        return target

    def update_user(self, actor: Optional[dict], user_id: str, updates: dict) -> dict:
        authorize(actor, role=ROLE_DEVELOPER)
        with self._lock:
            target = self._editable_target(actor, user_id)
            changes = {k: v for k, v in (updates or {}).items() if k in UPDATABLE_FIELDS}
            if 'name' in changes:
                changes['name'] = require_text(changes, 'name')
            if 'email' in changes:
                changes['email'] = require_text(changes, 'email')
                if self._email_taken(changes['email'], exclude_id=user_id):
                    raise DuplicateEmail()
            if 'role' in changes:
                validate_status(changes['role'], ROLES, 'role')
                if changes['role'] != target.get('role'):
                    # a role change resets the flag map to the new role's preset
                    changes['permissions'] = default_permissions_for(changes['role'])
            if 'is_active' in changes:
                changes['is_active'] = bool(changes['is_active'])
                if not changes['is_active'] and ROLE_DEVELOPER in (target.get('role'), changes.get('role')):
                    raise Forbidden(description='Developer accounts cannot be deactivated')
            updated = [{**u, **changes} if u['id'] == user_id else u for u in self._items]
            self._commit(updated)
        log.info('User updated: %s', user_id)
        return self.get(user_id)

    def toggle_user_active(self, actor: Optional[dict], user_id: str) -> dict:
        authorize(actor, role=ROLE_DEVELOPER)
        with self._lock:
            target = self._find(user_id)
            if target is None:
                raise NotFound(description='User not found')
            if target.get('role') == ROLE_DEVELOPER:
                raise Forbidden(description='Developer accounts cannot be deactivated')
            return self.update_user(actor, user_id, {'is_active': not target.get('is_active', True)})

    def delete_user(self, actor: Optional[dict], user_id: str) -> None:
        authorize(actor, role=ROLE_DEVELOPER)
        with self._lock:
            target = self._find(user_id)
            if target is None:
                raise NotFound(description='User not found')
            if target.get('role') == ROLE_DEVELOPER:
                raise Forbidden(description='Cannot delete developer account')
            if user_id == actor.get('id'):
                raise Forbidden(description='Cannot delete yourself')
            self._commit([u for u in self._items if u['id'] != user_id])
        log.info('User deleted: %s', user_id)

    def update_user_permissions(self, actor: Optional[dict], user_id: str, permissions: dict) -> dict:
        authorize(actor, role=ROLE_DEVELOPER)
        if not isinstance(permissions, dict):
            raise ValidationError(description='permissions must be an object')
        unknown = sorted(set(permissions) - set(ALL_PERMISSION_FLAGS))
        if unknown:
            raise ValidationError(description=f'Unknown permission flags: {unknown}')
        with self._lock:
            self._editable_target(actor, user_id)
            flags = {k: bool(v) for k, v in permissions.items()}
            updated = [
                {**u, 'permissions': {**(u.get('permissions') or {}), **flags}} if u['id'] == user_id else u
                for u in self._items
            ]
            self._commit(updated)
        log.info('Permissions updated for user: %s', user_id)
        return self.get(user_id)

    def login_as_user(self, actor: Optional[dict], user_id: str) -> dict:
        """Impersonation: hand back the target so the caller can assume its session."""
        authorize(actor, role=ROLE_DEVELOPER)
        target = self.get(user_id)
        if target is None:
            raise NotFound(description='User not found')
        log.info('User %s logged in as %s', actor.get('id'), target['name'])
        return target


__all__ = ['UserDirectory']
