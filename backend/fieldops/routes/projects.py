from flask import Blueprint, request
from fieldops import get_workspace
from fieldops.constants.statuses import ProjectStatus
from fieldops.decorators.auth import login_required, require_permissions, current_actor
from fieldops.errors import NotFound
from fieldops.utils.filters import apply_filters
from fieldops.utils.listing import list_response
from fieldops.utils.sorting import apply_multi_sort

proj_bp = Blueprint('projects', __name__)

PROJECT_FILTERS = {
    'status': {'validate': lambda v: v in ProjectStatus.ALL, 'match': lambda p, v: p.get('status') == v},
    'assigned_to': {'match': lambda p, v: v in p.get('assigned_employees', [])},
    'q': {'match': lambda p, v: v.lower() in p.get('name', '').lower() or v.lower() in p.get('number', '').lower()},
}


def _body() -> dict:
    return request.get_json(silent=True) or {}


@proj_bp.get('')
@require_permissions('viewProjects')
def list_projects():
    rows = apply_filters(get_workspace().projects.projects, PROJECT_FILTERS, request.args)
    rows = apply_multi_sort(rows, request.args.get('sort'), {'name', 'number', 'status', 'start_date', 'updated_at'}, 'id')
    return list_response(rows, 'updated_at')


@proj_bp.post('')
@login_required
def create_project():
    return get_workspace().projects.create_project(current_actor(), _body()), 201


@proj_bp.get('/<project_id>')
@require_permissions('viewProjects')
def get_project(project_id: str):
    project = get_workspace().projects.get_project(project_id)
    if project is None:
        raise NotFound(description='Project not found')
    return project


@proj_bp.patch('/<project_id>')
@login_required
def update_project(project_id: str):
    return get_workspace().projects.update_project(current_actor(), project_id, _body())


@proj_bp.delete('/<project_id>')
@login_required
def delete_project(project_id: str):
    get_workspace().projects.delete_project(current_actor(), project_id)
    return '', 204


@proj_bp.post('/<project_id>/launch')
@login_required
def launch_project(project_id: str):
    return get_workspace().projects.launch_project(current_actor(), project_id)


# --- workflow stages ---

@proj_bp.post('/<project_id>/stages')
@login_required
def add_stage(project_id: str):
    return get_workspace().projects.add_workflow_stage(current_actor(), project_id, _body().get('name')), 201


@proj_bp.patch('/<project_id>/stages/<stage_id>')
@login_required
def update_stage(project_id: str, stage_id: str):
    return get_workspace().projects.update_workflow_stage(current_actor(), project_id, stage_id, _body())


@proj_bp.delete('/<project_id>/stages/<stage_id>')
@login_required
def delete_stage(project_id: str, stage_id: str):
    get_workspace().projects.delete_workflow_stage(current_actor(), project_id, stage_id)
    return '', 204


# --- tasks ---

@proj_bp.post('/<project_id>/stages/<stage_id>/tasks')
@login_required
def add_task(project_id: str, stage_id: str):
    return get_workspace().projects.add_task(current_actor(), project_id, stage_id, _body()), 201


@proj_bp.patch('/<project_id>/stages/<stage_id>/tasks/<task_id>')
@login_required
def update_task(project_id: str, stage_id: str, task_id: str):
    return get_workspace().projects.update_task(current_actor(), project_id, stage_id, task_id, _body())


@proj_bp.delete('/<project_id>/stages/<stage_id>/tasks/<task_id>')
@login_required
def delete_task(project_id: str, stage_id: str, task_id: str):
    get_workspace().projects.delete_task(current_actor(), project_id, stage_id, task_id)
    return '', 204


@proj_bp.post('/<project_id>/stages/<stage_id>/tasks/<task_id>/toggle-pause')
@login_required
def toggle_pause(project_id: str, stage_id: str, task_id: str):
    return get_workspace().projects.toggle_task_pause(current_actor(), project_id, stage_id, task_id)


@proj_bp.post('/<project_id>/stages/<stage_id>/tasks/<task_id>/toggle-complete')
@login_required
def toggle_complete(project_id: str, stage_id: str, task_id: str):
    return get_workspace().projects.toggle_task_completion(current_actor(), project_id, stage_id, task_id)


@proj_bp.post('/<project_id>/stages/<stage_id>/tasks/<task_id>/reports')
@login_required
def add_report(project_id: str, stage_id: str, task_id: str):
    data = _body()
    report = get_workspace().projects.add_task_report(
        current_actor(), project_id, stage_id, task_id, data.get('content'), data.get('attachments')
    )
    return report, 201


@proj_bp.post('/<project_id>/stages/<stage_id>/tasks/<task_id>/comments')
@login_required
def add_comment(project_id: str, stage_id: str, task_id: str):
    data = _body()
    comment = get_workspace().projects.add_task_comment(
        current_actor(), project_id, stage_id, task_id, data.get('content'), data.get('attachments')
    )
    return comment, 201
