from flask import Blueprint, request
from fieldops import get_workspace
from fieldops.decorators.auth import login_required, require_permissions, current_actor

msg_bp = Blueprint('messages', __name__)


@msg_bp.post('')
@login_required
def send_message():
    data = request.get_json(silent=True) or {}
    message = get_workspace().messages.send_message(
        current_actor(), data.get('receiver_id'), data.get('content'), data.get('attachments')
    )
    return message, 201


@msg_bp.get('/with/<user_id>')
@require_permissions('receiveMessages')
def thread_with(user_id: str):
    return {'data': get_workspace().messages.get_messages_for_user(current_actor(), user_id)}


@msg_bp.post('/<message_id>/read')
@login_required
def mark_read(message_id: str):
    return get_workspace().messages.mark_message_as_read(current_actor(), message_id)


@msg_bp.get('/unread-count')
@login_required
def unread_count():
    from_user_id = request.args.get('from_user_id')
    count = get_workspace().messages.get_unread_messages_count(current_actor(), from_user_id)
    return {'count': count, 'from_user_id': from_user_id}


@msg_bp.get('/conversations')
@login_required
def conversations():
    return {'data': get_workspace().messages.conversations(current_actor())}
