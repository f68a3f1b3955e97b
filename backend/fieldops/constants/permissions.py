"""Central definitions of permission flags and role presets.
Extend cautiously; never rename a flag silently since stored user records keep the old key.
"""
from __future__ import annotations
from typing import Dict, List

from fieldops.errors import ValidationError

ROLE_DEVELOPER = 'developer'
ROLE_MANAGER = 'manager'
ROLE_EMPLOYEE = 'employee'
ROLES = (ROLE_DEVELOPER, ROLE_MANAGER, ROLE_EMPLOYEE)

# Flags grouped by screen / domain
PERMISSION_GROUPS: Dict[str, List[str]] = {
    'dashboard': ['viewDashboard'],
    'projects': ['viewProjects', 'createProjects', 'editProjects', 'deleteProjects'],
    'tasks': ['viewTasks', 'createTasks', 'editTasks', 'deleteTasks', 'assignTasks'],
    'workflow': ['viewWorkflow', 'editWorkflow'],
    'stock': ['viewStock', 'editStock', 'addStock', 'deleteStock'],
    'calendar': ['viewCalendar'],
    'employees': ['viewEmployees', 'manageEmployees'],
    'files': ['viewFiles', 'uploadFiles', 'downloadFiles', 'deleteFiles', 'sendFiles'],
    'reports': ['viewReports', 'createReports'],
    'settings': ['viewSettings'],
    'admin': ['managePermissions', 'viewAdminPanel'],
    'messages': ['sendMessages', 'receiveMessages'],
    'notifications': ['viewNotifications'],
}


def build_all_permission_flags() -> List[str]:
    flags: List[str] = []
    for group_flags in PERMISSION_GROUPS.values():
        flags.extend(group_flags)
    return flags

ALL_PERMISSION_FLAGS = build_all_permission_flags()

ROLE_PRESETS: Dict[str, List[str]] = {
    # Manager: every operational flag, no permission administration
    ROLE_MANAGER: [f for f in ALL_PERMISSION_FLAGS if f not in ('managePermissions', 'viewAdminPanel')],
    ROLE_EMPLOYEE: [
        'viewDashboard',
        'viewProjects',
        'viewTasks', 'editTasks',
        'viewWorkflow',
        'viewStock',
        'viewCalendar',
        'viewFiles', 'uploadFiles', 'downloadFiles',
        'viewReports', 'createReports',
        'viewSettings',
        'sendMessages', 'receiveMessages',
        'viewNotifications',
    ],
    ROLE_DEVELOPER: ['*'],
}


def default_permissions_for(role: str) -> Dict[str, bool]:
    """Return the full boolean flag map a new user of ``role`` starts with."""
    if role not in ROLE_PRESETS:
        raise ValidationError(description=f'Unknown role {role!r}')
    granted = ROLE_PRESETS[role]
    if '*' in granted:
        return {flag: True for flag in ALL_PERMISSION_FLAGS}
    return {flag: flag in granted for flag in ALL_PERMISSION_FLAGS}
