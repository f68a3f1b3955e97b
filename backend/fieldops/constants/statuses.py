"""Status and type vocabularies shared by the stores and the API."""
from __future__ import annotations


class ProjectStatus:
    IN_PROGRESS = 'in_progress'
    PAUSED = 'paused'
    COMPLETED = 'completed'
    ALL = (IN_PROGRESS, PAUSED, COMPLETED)


class TaskStatus:
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    PAUSED = 'paused'
    COMPLETED = 'completed'
    ALL = (PENDING, IN_PROGRESS, PAUSED, COMPLETED)


class StockStatus:
    AVAILABLE = 'available'
    LOW = 'low'
    OUT_OF_STOCK = 'out_of_stock'
    ALL = (AVAILABLE, LOW, OUT_OF_STOCK)


class NotificationType:
    TASK = 'task'
    PROJECT = 'project'
    FILE = 'file'
    SYSTEM = 'system'
    MESSAGE = 'message'
    REPORT = 'report'
    ALL = (TASK, PROJECT, FILE, SYSTEM, MESSAGE, REPORT)

# Storage keys, one JSON blob per collection
KEY_AUTH = 'auth'
KEY_USERS = 'users'
KEY_MESSAGES = 'messages'
KEY_PROJECTS = 'projects'
KEY_STOCK = 'stock'
KEY_NOTIFICATIONS = 'notifications'
