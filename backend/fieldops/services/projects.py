"""Project -> WorkflowStage -> Task -> TaskReport hierarchy.

Projects own their stages and stages own their tasks: deleting a parent drops
its children. Every mutation replaces the whole project record and refreshes
its ``updated_at``. Task numbers are unique per project across all stages and
are never handed out twice, even after the highest-numbered task is deleted.
"""
from __future__ import annotations
import copy
import logging
from typing import Callable, List, Optional

from fieldops.constants.statuses import KEY_PROJECTS, NotificationType, ProjectStatus, TaskStatus
from fieldops.errors import Forbidden, NotFound, ValidationError
from fieldops.services.attachments import normalize_attachments
from fieldops.services.collection import CollectionStore
from fieldops.services.policy import authorize, has_permission
from fieldops.utils.clock import new_id
from fieldops.utils.fsm import TransitionValidator
from fieldops.utils.validation import coerce_float, coerce_int, id_list, require_text, validate_status

log = logging.getLogger('fieldops.projects')

PROJECT_FSM = TransitionValidator.unrestricted(ProjectStatus.ALL)
TASK_FSM = TransitionValidator.unrestricted(TaskStatus.ALL)

PROJECT_FIELDS = ('name', 'number', 'location', 'start_date', 'status', 'assigned_employees', 'files')
STAGE_FIELDS = ('name', 'order')
TASK_FIELDS = ('description', 'status', 'assigned_to', 'attachments')

# toggle pairs: current -> next
PAUSE_TOGGLE = {TaskStatus.PAUSED: TaskStatus.IN_PROGRESS}
COMPLETION_TOGGLE = {TaskStatus.COMPLETED: TaskStatus.PENDING}


def _location(raw) -> dict:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(description='location must be an object')
    return {
        'address': str(raw.get('address') or ''),
        'latitude': coerce_float(raw.get('latitude', 0), 'latitude'),
        'longitude': coerce_float(raw.get('longitude', 0), 'longitude'),
    }


def _all_tasks(project: dict) -> List[dict]:
    return [t for stage in project.get('workflow', []) for t in stage.get('tasks', [])]


def _stage(project: dict, stage_id: str) -> dict:
    stage = next((s for s in project['workflow'] if s['id'] == stage_id), None)
    if stage is None:
        raise NotFound(description='Workflow stage not found')
    return stage


def _task(stage: dict, task_id: str) -> dict:
    task = next((t for t in stage['tasks'] if t['id'] == task_id), None)
    if task is None:
        raise NotFound(description='Task not found')
    return task


class ProjectStore(CollectionStore):
    storage_key = KEY_PROJECTS

    def __init__(self, storage, clock, lock, notifications):
        super().__init__(storage, clock, lock)
        self._notifications = notifications

    @property
    def projects(self) -> List[dict]:
        return self.items

    def get_project(self, project_id: str) -> Optional[dict]:
        return self.get(project_id)

    def _mutate(self, project_id: str, mutate: Callable[[dict], object]):
        """Apply ``mutate`` to a copy of the project, stamp it and persist the collection."""
        with self._lock:
            current = self._find(project_id)
            if current is None:
                raise NotFound(description='Project not found')
            project = copy.deepcopy(current)
            result = mutate(project)
            project['updated_at'] = self._clock()
            self._commit([project if p['id'] == project_id else p for p in self._items])
        return copy.deepcopy(result)

    # --- projects ---

    def create_project(self, actor: Optional[dict], data: dict) -> dict:
        authorize(actor, 'createProjects')
        data = data or {}
        now = self._clock()
        project = {
            'id': new_id('proj'),
            'name': require_text(data, 'name'),
            'number': require_text(data, 'number'),
            'location': _location(data.get('location')),
            'start_date': data.get('start_date') or now[:10],
            'status': validate_status(data.get('status') or ProjectStatus.IN_PROGRESS, ProjectStatus.ALL),
            'workflow': [],
            'assigned_employees': id_list(data.get('assigned_employees'), 'assigned_employees'),
            'files': [],
            'last_task_number': 0,
            'created_at': now,
            'updated_at': now,
        }
        with self._lock:
            self._commit(self._items + [project])
        log.info('Project created: %s', project['name'])
        return copy.deepcopy(project)

    def update_project(self, actor: Optional[dict], project_id: str, updates: dict) -> dict:
        authorize(actor, 'editProjects')
        changes = {k: v for k, v in (updates or {}).items() if k in PROJECT_FIELDS}
        if 'name' in changes:
            changes['name'] = require_text(changes, 'name')
        if 'number' in changes:
            changes['number'] = require_text(changes, 'number')
        if 'location' in changes:
            changes['location'] = _location(changes['location'])
        if 'assigned_employees' in changes:
            changes['assigned_employees'] = id_list(changes['assigned_employees'], 'assigned_employees')
        if 'files' in changes:
            changes['files'] = normalize_attachments(changes['files'], actor['id'], self._clock)

        def apply(project):
            if 'status' in changes:
                PROJECT_FSM.assert_can_transition(project['status'], changes['status'])
            project.update(changes)
            return project

        project = self._mutate(project_id, apply)
        log.info('Project updated: %s', project_id)
        return project

    def launch_project(self, actor: Optional[dict], project_id: str) -> dict:
        project = self.update_project(actor, project_id, {'status': ProjectStatus.IN_PROGRESS})
        self._notifications.add_notification({
            'title': 'Project launched',
            'message': f"{project['name']} in progress",
            'type': NotificationType.PROJECT,
            'related_id': project_id,
            'sender_id': actor['id'],
        })
        return project

    def delete_project(self, actor: Optional[dict], project_id: str) -> None:
        authorize(actor, 'deleteProjects')
        with self._lock:
            if self._find(project_id) is None:
                raise NotFound(description='Project not found')
            self._commit([p for p in self._items if p['id'] != project_id])
        log.info('Project deleted: %s', project_id)

    # --- workflow stages ---

    def add_workflow_stage(self, actor: Optional[dict], project_id: str, name: str) -> dict:
        authorize(actor, 'editWorkflow')
        stage_name = require_text({'name': name}, 'name')

        def apply(project):
            # order is not renumbered on delete, gaps and repeats are tolerated
            stage = {'id': new_id('stage'), 'name': stage_name, 'order': len(project['workflow']) + 1, 'tasks': []}
            project['workflow'].append(stage)
            return stage

        stage = self._mutate(project_id, apply)
        log.info('Workflow stage added: %s', stage_name)
        return stage

    def update_workflow_stage(self, actor: Optional[dict], project_id: str, stage_id: str, updates: dict) -> dict:
        authorize(actor, 'editWorkflow')
        changes = {k: v for k, v in (updates or {}).items() if k in STAGE_FIELDS}
        if 'name' in changes:
            changes['name'] = require_text(changes, 'name')
        if 'order' in changes:
            changes['order'] = coerce_int(changes['order'], 'order', minimum=1)

        def apply(project):
            stage = _stage(project, stage_id)
            stage.update(changes)
            return stage

        stage = self._mutate(project_id, apply)
        log.info('Workflow stage updated: %s', stage_id)
        return stage

    def delete_workflow_stage(self, actor: Optional[dict], project_id: str, stage_id: str) -> None:
        authorize(actor, 'editWorkflow')

        def apply(project):
            _stage(project, stage_id)
            project['workflow'] = [s for s in project['workflow'] if s['id'] != stage_id]

        self._mutate(project_id, apply)
        log.info('Workflow stage deleted: %s', stage_id)

    # --- tasks ---

    def add_task(self, actor: Optional[dict], project_id: str, stage_id: str, data: dict) -> dict:
        authorize(actor, 'createTasks')
        data = data or {}
        description = require_text(data, 'description')
        status = validate_status(data.get('status') or TaskStatus.PENDING, TaskStatus.ALL)
        assigned_to = id_list(data.get('assigned_to'), 'assigned_to')
        if assigned_to:
            authorize(actor, 'assignTasks')

        def apply(project):
            stage = _stage(project, stage_id)
            highest = max((t['number'] for t in _all_tasks(project)), default=0)
            number = max(highest, project.get('last_task_number', 0)) + 1
            now = self._clock()
            task = {
                'id': new_id('task'),
                'number': number,
                'description': description,
                'status': status,
                'assigned_to': assigned_to,
                'project_id': project_id,
                'stage_id': stage_id,
                'comments': [],
                'attachments': normalize_attachments(data.get('attachments'), actor['id'], self._clock),
                'reports': [],
                'created_at': now,
                'updated_at': now,
            }
            stage['tasks'].append(task)
            project['last_task_number'] = number
            return task

        task = self._mutate(project_id, apply)
        log.info('Task added: %s', description)
        return task

    def update_task(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str, updates: dict) -> dict:
        authorize(actor, 'editTasks')
        changes = {k: v for k, v in (updates or {}).items() if k in TASK_FIELDS}
        if 'description' in changes:
            changes['description'] = require_text(changes, 'description')
        if 'assigned_to' in changes:
            changes['assigned_to'] = id_list(changes['assigned_to'], 'assigned_to')
        if 'attachments' in changes:
            changes['attachments'] = normalize_attachments(changes['attachments'], actor['id'], self._clock)

        def apply(project):
            task = _task(_stage(project, stage_id), task_id)
            if 'status' in changes:
                TASK_FSM.assert_can_transition(task['status'], changes['status'])
            if 'assigned_to' in changes and changes['assigned_to'] != task['assigned_to'] \
                    and not has_permission(actor, 'assignTasks'):
                raise Forbidden(description='Missing permission assignTasks')
            task.update(changes)
            task['updated_at'] = self._clock()
            return task

        task = self._mutate(project_id, apply)
        log.info('Task updated: %s', task_id)
        return task

    def _toggle_task(self, actor, project_id, stage_id, task_id, pairs: dict, fallback: str) -> dict:
        authorize(actor, 'editTasks')

        def apply(project):
            task = _task(_stage(project, stage_id), task_id)
            task['status'] = pairs.get(task['status'], fallback)
            task['updated_at'] = self._clock()
            return task

        return self._mutate(project_id, apply)

    def toggle_task_pause(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str) -> dict:
        """paused -> in_progress, anything else -> paused."""
        return self._toggle_task(actor, project_id, stage_id, task_id, PAUSE_TOGGLE, TaskStatus.PAUSED)

    def toggle_task_completion(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str) -> dict:
        """completed -> pending, anything else -> completed."""
        return self._toggle_task(actor, project_id, stage_id, task_id, COMPLETION_TOGGLE, TaskStatus.COMPLETED)

    def delete_task(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str) -> None:
        authorize(actor, 'deleteTasks')

        def apply(project):
            stage = _stage(project, stage_id)
            _task(stage, task_id)
            stage['tasks'] = [t for t in stage['tasks'] if t['id'] != task_id]

        self._mutate(project_id, apply)
        log.info('Task deleted: %s', task_id)

    def add_task_report(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str, content: str, attachments=None) -> dict:
        authorize(actor, 'createReports')
        text = require_text({'content': content}, 'content')
        files = normalize_attachments(attachments, actor['id'], self._clock)

        def apply(project):
            task = _task(_stage(project, stage_id), task_id)
            report = {
                'id': new_id('report'),
                'task_id': task_id,
                'user_id': actor['id'],
                'user_name': actor.get('name', ''),
                'content': text,
                'attachments': files,
                'created_at': self._clock(),
            }
            task.setdefault('reports', []).append(report)
            task['updated_at'] = self._clock()
            return {'report': report, 'description': task['description']}

        result = self._mutate(project_id, apply)
        log.info('Report added to task: %s', task_id)
        self._notifications.add_notification({
            'title': 'Report',
            'message': f"{actor.get('name', '')} submitted a report for \"{result['description']}\"",
            'type': NotificationType.REPORT,
            'related_id': task_id,
            'sender_id': actor['id'],
        })
        return result['report']

    def add_task_comment(self, actor: Optional[dict], project_id: str, stage_id: str, task_id: str, content: str, attachments=None) -> dict:
        authorize(actor, 'editTasks')
        text = require_text({'content': content}, 'content')
        files = normalize_attachments(attachments, actor['id'], self._clock)

        def apply(project):
            task = _task(_stage(project, stage_id), task_id)
            comment = {
                'id': new_id('comment'),
                'user_id': actor['id'],
                'user_name': actor.get('name', ''),
                'content': text,
                'attachments': files,
                'created_at': self._clock(),
            }
            task.setdefault('comments', []).append(comment)
            task['updated_at'] = self._clock()
            return comment

        return self._mutate(project_id, apply)

    def get_task_by_id(self, task_id: str) -> Optional[dict]:
        for project in self._items:
            for stage in project.get('workflow', []):
                for task in stage.get('tasks', []):
                    if task['id'] == task_id:
                        return copy.deepcopy({'task': task, 'project': project, 'stage': stage})
        return None


__all__ = ['ProjectStore', 'PROJECT_FSM', 'TASK_FSM']
