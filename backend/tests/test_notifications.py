import pytest
from fieldops.errors import Forbidden, NotFound, ValidationError


def test_add_notification_prepends(workspace):
    first = workspace.notifications.add_notification({'title': 'A', 'message': 'one'})
    second = workspace.notifications.add_notification({'title': 'B', 'message': 'two', 'type': 'task', 'related_id': 't1'})
    ids = [n['id'] for n in workspace.notifications.notifications]
    assert ids == [second['id'], first['id']]
    assert first['type'] == 'system'
    assert second['related_id'] == 't1'
    assert workspace.notifications.unread_count == 2


def test_add_notification_validation(workspace):
    with pytest.raises(ValidationError):
        workspace.notifications.add_notification({'title': 'A'})
    with pytest.raises(ValidationError):
        workspace.notifications.add_notification({'title': 'A', 'message': 'm', 'type': 'alarm'})


def test_mark_read_and_clear(workspace, manager, employee):
    note = workspace.notifications.add_notification({'title': 'A', 'message': 'one'})
    workspace.notifications.add_notification({'title': 'B', 'message': 'two'})
    assert workspace.notifications.mark_notification_read(employee, note['id'])['read'] is True
    assert workspace.notifications.unread_count == 1
    with pytest.raises(NotFound):
        workspace.notifications.mark_notification_read(employee, 'notif-missing')
    assert workspace.notifications.mark_all_read(manager) == 1
    assert workspace.notifications.unread_count == 0
    workspace.notifications.clear_all_notifications(manager)
    assert workspace.notifications.notifications == []


def test_clear_requires_permission(workspace, employee):
    with pytest.raises(Forbidden):
        workspace.notifications.clear_all_notifications({**employee, 'permissions': {}})


def test_notifications_api(client, workspace, manager, login):
    workspace.notifications.add_notification({'title': 'A', 'message': 'one', 'type': 'task'})
    note = workspace.notifications.add_notification({'title': 'B', 'message': 'two'})
    headers = login('mia@example.com')
    assert client.get('/notifications/unread-count', headers=headers).get_json()['count'] == 2
    listing = client.get('/notifications?type=task', headers=headers).get_json()
    assert [n['title'] for n in listing['data']] == ['A']
    assert client.post(f"/notifications/{note['id']}/read", headers=headers).status_code == 200
    unread = client.get('/notifications?read=false', headers=headers).get_json()
    assert [n['title'] for n in unread['data']] == ['A']
    assert client.post('/notifications/read-all', headers=headers).get_json()['updated'] == 1
    assert client.delete('/notifications', headers=headers).status_code == 204
    assert client.get('/notifications', headers=headers).get_json()['data'] == []
