from flask import Blueprint
from fieldops import get_workspace
from fieldops.decorators.auth import require_permissions
from fieldops.errors import NotFound

tasks_bp = Blueprint('tasks', __name__)


@tasks_bp.get('/<task_id>')
@require_permissions('viewTasks')
def get_task(task_id: str):
    found = get_workspace().projects.get_task_by_id(task_id)
    if found is None:
        raise NotFound(description='Task not found')
    project, stage = found['project'], found['stage']
    return {
        'task': found['task'],
        'project': {'id': project['id'], 'name': project['name'], 'number': project['number'], 'status': project['status']},
        'stage': {'id': stage['id'], 'name': stage['name'], 'order': stage['order']},
    }
