"""Single authorization gate for every mutating entry point.

Stores call ``authorize`` before touching their collections; the HTTP layer
uses the same function (through ``require_permissions``) for read-only views.
"""
from __future__ import annotations
import logging
from typing import Optional

from fieldops.constants.permissions import ROLE_DEVELOPER
from fieldops.errors import Forbidden, Unauthorized

log = logging.getLogger('fieldops.policy')


def has_permission(user: Optional[dict], flag: str) -> bool:
    if not user or not user.get('is_active', True):
        return False
    return (user.get('permissions') or {}).get(flag) is True


def has_role(user: Optional[dict], role: str) -> bool:
    return bool(user) and user.get('role') == role


def is_developer(user: Optional[dict]) -> bool:
    return has_role(user, ROLE_DEVELOPER)


def authorize(actor: Optional[dict], flag: Optional[str] = None, role: Optional[str] = None) -> dict:
    """Return the actor when it holds ``flag`` and ``role``; raise otherwise."""
    if not actor:
        raise Unauthorized()
    if not actor.get('is_active', True):
        log.info('Inactive user %s denied', actor.get('id'))
        raise Forbidden(description='Account disabled')
    if role is not None and not has_role(actor, role):
        log.info('User %s lacks role %s', actor.get('id'), role)
        raise Forbidden(description=f'Only {role} users may do this')
    if flag is not None and not has_permission(actor, flag):
        log.info('User %s lacks permission %s', actor.get('id'), flag)
        raise Forbidden(description=f'Missing permission {flag}')
    return actor


__all__ = ['has_permission', 'has_role', 'is_developer', 'authorize']
