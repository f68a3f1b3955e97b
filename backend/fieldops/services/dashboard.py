"""Read-side aggregation over projects, stock and users.

Pure functions, recomputed on every read; nothing is cached.
"""
from __future__ import annotations
from typing import Dict, Iterable

from fieldops.constants.permissions import ROLE_EMPLOYEE
from fieldops.constants.statuses import ProjectStatus, StockStatus, TaskStatus


def count_by_status(rows: Iterable[dict], statuses: Iterable[str]) -> Dict[str, int]:
    counts = {status: 0 for status in statuses}
    for row in rows:
        status = row.get('status')
        if status in counts:
            counts[status] += 1
    return counts


def compute_dashboard_stats(projects: Iterable[dict], stock_items: Iterable[dict], users: Iterable[dict] = ()) -> dict:
    projects = list(projects)
    all_tasks = [t for p in projects for s in p.get('workflow', []) for t in s.get('tasks', [])]
    project_counts = count_by_status(projects, ProjectStatus.ALL)
    task_counts = count_by_status(all_tasks, TaskStatus.ALL)
    total_tasks = len(all_tasks)
    completed_tasks = task_counts[TaskStatus.COMPLETED]
    return {
        'total_projects': len(projects),
        'active_projects': project_counts[ProjectStatus.IN_PROGRESS],
        'completed_projects': project_counts[ProjectStatus.COMPLETED],
        'paused_projects': project_counts[ProjectStatus.PAUSED],
        'total_tasks': total_tasks,
        'tasks_by_status': task_counts,
        'completed_tasks': completed_tasks,
        'pending_tasks': task_counts[TaskStatus.PENDING] + task_counts[TaskStatus.IN_PROGRESS],
        'task_completion_rate': round(completed_tasks / total_tasks, 4) if total_tasks else 0.0,
        'total_employees': sum(1 for u in users if u.get('role') == ROLE_EMPLOYEE),
        'low_stock_items': sum(
            1 for i in stock_items if i.get('status') in (StockStatus.LOW, StockStatus.OUT_OF_STOCK)
        ),
    }

__all__ = ['compute_dashboard_stats', 'count_by_status']
