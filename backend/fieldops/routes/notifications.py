from flask import Blueprint, request
from fieldops import get_workspace
from fieldops.constants.statuses import NotificationType
from fieldops.decorators.auth import require_permissions, current_actor
from fieldops.utils.filters import apply_filters, parse_bool
from fieldops.utils.listing import list_response

notif_bp = Blueprint('notifications', __name__)

NOTIFICATION_FILTERS = {
    'type': {'validate': lambda v: v in NotificationType.ALL, 'match': lambda n, v: n.get('type') == v},
    'read': {'coerce': parse_bool, 'match': lambda n, v: bool(n.get('read')) == v},
}


@notif_bp.get('')
@require_permissions('viewNotifications')
def list_notifications():
    # stored most recent first; no re-sorting
    rows = apply_filters(get_workspace().notifications.notifications, NOTIFICATION_FILTERS, request.args)
    return list_response(rows, 'created_at')


@notif_bp.get('/unread-count')
@require_permissions('viewNotifications')
def unread_count():
    return {'count': get_workspace().notifications.unread_count}


@notif_bp.post('/<notification_id>/read')
@require_permissions('viewNotifications')
def mark_read(notification_id: str):
    return get_workspace().notifications.mark_notification_read(current_actor(), notification_id)


@notif_bp.post('/read-all')
@require_permissions('viewNotifications')
def mark_all_read():
    return {'updated': get_workspace().notifications.mark_all_read(current_actor())}


@notif_bp.delete('')
@require_permissions('viewNotifications')
def clear_all():
    get_workspace().notifications.clear_all_notifications(current_actor())
    return '', 204
