from flask import Blueprint, request
from fieldops import get_workspace
from fieldops.constants.permissions import default_permissions_for
from fieldops.decorators.auth import login_required, require_permissions, current_actor
from fieldops.errors import NotFound
from fieldops.routes.auth import issue_session
from fieldops.services.policy import authorize
from fieldops.utils.filters import apply_filters, parse_bool
from fieldops.utils.listing import list_response
from fieldops.utils.sorting import apply_multi_sort

users_bp = Blueprint('users', __name__)

USER_FILTERS = {
    'role': {'match': lambda u, v: u.get('role') == v},
    'is_active': {'coerce': parse_bool, 'match': lambda u, v: bool(u.get('is_active')) == v},
    'exclude_developers': {'coerce': parse_bool, 'match': lambda u, v: not v or u.get('role') != 'developer'},
}


@users_bp.get('')
@require_permissions('viewEmployees')
def list_users():
    rows = apply_filters(get_workspace().users.users, USER_FILTERS, request.args)
    rows = apply_multi_sort(rows, request.args.get('sort'), {'name', 'email', 'role', 'created_at'}, 'id')
    return list_response(rows, 'created_at')


@users_bp.get('/employees')
@require_permissions('viewEmployees')
def list_employees():
    return list_response(get_workspace().users.employees, 'created_at')


@users_bp.post('')
@login_required
def create_user():
    user = get_workspace().users.create_user(current_actor(), request.get_json(silent=True) or {})
    return user, 201


@users_bp.get('/<user_id>')
@login_required
def get_user(user_id: str):
    actor = current_actor()
    if user_id != actor['id']:
        authorize(actor, 'viewEmployees')
    user = get_workspace().users.get_user_by_id(user_id)
    if user is None:
        raise NotFound(description='User not found')
    return user


@users_bp.patch('/<user_id>')
@login_required
def update_user(user_id: str):
    return get_workspace().users.update_user(current_actor(), user_id, request.get_json(silent=True) or {})


@users_bp.post('/<user_id>/toggle-active')
@login_required
def toggle_user_active(user_id: str):
    return get_workspace().users.toggle_user_active(current_actor(), user_id)


@users_bp.delete('/<user_id>')
@login_required
def delete_user(user_id: str):
    get_workspace().users.delete_user(current_actor(), user_id)
    return '', 204


@users_bp.put('/<user_id>/permissions')
@login_required
def update_user_permissions(user_id: str):
    data = request.get_json(silent=True) or {}
    return get_workspace().users.update_user_permissions(current_actor(), user_id, data.get('permissions', data))


@users_bp.post('/<user_id>/login-as')
@login_required
def login_as_user(user_id: str):
    actor = current_actor()
    target = get_workspace().users.login_as_user(actor, user_id)
    return {'access_token': issue_session(target, impersonated_by=actor['id']), 'user': target}


@users_bp.get('/roles/<role>/permissions')
@login_required
def role_default_permissions(role: str):
    return {'role': role, 'permissions': default_permissions_for(role)}
