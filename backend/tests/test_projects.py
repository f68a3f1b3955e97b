import pytest
from fieldops.errors import Forbidden, NotFound, ValidationError


@pytest.fixture()
def project(workspace, manager):
    return workspace.projects.create_project(manager, {'name': 'Tower', 'number': 'P-100', 'status': 'in_progress'})


def test_project_stage_task_lifecycle(workspace, manager, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    first = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'Mount unit'})
    second = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'Wire unit'})
    assert first['number'] == 1
    assert second['number'] == 2
    workspace.projects.delete_workflow_stage(manager, project['id'], stage['id'])
    assert workspace.projects.get_project(project['id'])['workflow'] == []


def test_create_project_defaults_and_validation(workspace, manager):
    project = workspace.projects.create_project(manager, {'name': 'Yard', 'number': 'P-2'})
    assert project['status'] == 'in_progress'
    assert project['workflow'] == []
    assert project['location'] == {'address': '', 'latitude': 0.0, 'longitude': 0.0}
    with pytest.raises(ValidationError):
        workspace.projects.create_project(manager, {'name': 'No number'})
    with pytest.raises(ValidationError):
        workspace.projects.create_project(manager, {'name': 'Bad', 'number': 'P-3', 'status': 'archived'})


def test_employee_cannot_create_project(workspace, employee):
    with pytest.raises(Forbidden):
        workspace.projects.create_project(employee, {'name': 'X', 'number': 'X-1'})


def test_task_numbers_span_stages_and_are_not_reused(workspace, manager, project):
    install = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    test = workspace.projects.add_workflow_stage(manager, project['id'], 'Test')
    assert test['order'] == 2
    a = workspace.projects.add_task(manager, project['id'], install['id'], {'description': 'A'})
    b = workspace.projects.add_task(manager, project['id'], test['id'], {'description': 'B'})
    assert (a['number'], b['number']) == (1, 2)
    workspace.projects.delete_task(manager, project['id'], test['id'], b['id'])
    c = workspace.projects.add_task(manager, project['id'], test['id'], {'description': 'C'})
    assert c['number'] == 3


def test_mutations_refresh_updated_at(workspace, manager, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    after_stage = workspace.projects.get_project(project['id'])['updated_at']
    assert after_stage > project['updated_at']
    task = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'A'})
    updated = workspace.projects.update_task(manager, project['id'], stage['id'], task['id'], {'status': 'in_progress'})
    assert updated['status'] == 'in_progress'
    assert updated['updated_at'] > task['updated_at']
    assert workspace.projects.get_project(project['id'])['updated_at'] > after_stage


def test_update_task_assignment_requires_assign_permission(workspace, developer, manager, employee, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    task = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'A', 'assigned_to': [employee['id']]})
    assert task['assigned_to'] == [employee['id']]
    with pytest.raises(Forbidden):
        workspace.projects.update_task(employee, project['id'], stage['id'], task['id'], {'assigned_to': []})
    edited = workspace.projects.update_task(employee, project['id'], stage['id'], task['id'], {'description': 'A2'})
    assert edited['description'] == 'A2'
    with pytest.raises(ValidationError):
        workspace.projects.update_task(manager, project['id'], stage['id'], task['id'], {'status': 'done'})


def test_toggles(workspace, manager, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    task = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'A'})
    args = (manager, project['id'], stage['id'], task['id'])
    assert workspace.projects.toggle_task_pause(*args)['status'] == 'paused'
    assert workspace.projects.toggle_task_pause(*args)['status'] == 'in_progress'
    assert workspace.projects.toggle_task_completion(*args)['status'] == 'completed'
    assert workspace.projects.toggle_task_completion(*args)['status'] == 'pending'


def test_reports_and_comments(workspace, manager, employee, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    task = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'Mount unit'})
    report = workspace.projects.add_task_report(employee, project['id'], stage['id'], task['id'], 'Done on site')
    assert report['user_name'] == 'Eli'
    assert report['task_id'] == task['id']
    note = workspace.notifications.notifications[0]
    assert note['type'] == 'report'
    assert note['related_id'] == task['id']
    comment = workspace.projects.add_task_comment(employee, project['id'], stage['id'], task['id'], 'Need ladder')
    found = workspace.projects.get_task_by_id(task['id'])
    assert [r['id'] for r in found['task']['reports']] == [report['id']]
    assert [c['id'] for c in found['task']['comments']] == [comment['id']]
    with pytest.raises(ValidationError):
        workspace.projects.add_task_report(employee, project['id'], stage['id'], task['id'], '')


def test_get_task_by_id(workspace, manager, project):
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    task = workspace.projects.add_task(manager, project['id'], stage['id'], {'description': 'A'})
    found = workspace.projects.get_task_by_id(task['id'])
    assert found['project']['id'] == project['id']
    assert found['stage']['id'] == stage['id']
    assert workspace.projects.get_task_by_id('task-missing') is None


def test_missing_parents_raise_not_found(workspace, manager, project):
    with pytest.raises(NotFound):
        workspace.projects.add_workflow_stage(manager, 'proj-missing', 'X')
    with pytest.raises(NotFound):
        workspace.projects.add_task(manager, project['id'], 'stage-missing', {'description': 'A'})
    with pytest.raises(NotFound):
        workspace.projects.delete_project(manager, 'proj-missing')


def test_launch_and_stage_update(workspace, manager, project):
    workspace.projects.update_project(manager, project['id'], {'status': 'paused'})
    launched = workspace.projects.launch_project(manager, project['id'])
    assert launched['status'] == 'in_progress'
    assert workspace.notifications.notifications[0]['type'] == 'project'
    stage = workspace.projects.add_workflow_stage(manager, project['id'], 'Install')
    renamed = workspace.projects.update_workflow_stage(manager, project['id'], stage['id'], {'name': 'Fit', 'order': 3})
    assert (renamed['name'], renamed['order']) == ('Fit', 3)


def test_returned_records_are_copies(workspace, manager, project):
    listed = workspace.projects.projects
    listed[0]['name'] = 'tampered'
    assert workspace.projects.get_project(project['id'])['name'] == 'Tower'


def test_projects_api_flow(client, manager, employee, login):
    mia = login('mia@example.com')
    resp = client.post('/projects', json={'name': 'Depot', 'number': 'D-1'}, headers=mia)
    assert resp.status_code == 201
    pid = resp.get_json()['id']
    sid = client.post(f'/projects/{pid}/stages', json={'name': 'Install'}, headers=mia).get_json()['id']
    task = client.post(f'/projects/{pid}/stages/{sid}/tasks', json={'description': 'Mount'}, headers=mia)
    assert task.status_code == 201
    tid = task.get_json()['id']
    resp = client.post(f'/projects/{pid}/stages/{sid}/tasks/{tid}/toggle-complete', headers=mia)
    assert resp.get_json()['status'] == 'completed'
    eli = login('eli@example.com')
    resp = client.get(f'/tasks/{tid}', headers=eli)
    assert resp.status_code == 200
    assert resp.get_json()['project']['number'] == 'D-1'
    assert client.get('/tasks/task-missing', headers=eli).status_code == 404
    assert client.post('/projects', json={'name': 'N', 'number': 'N-1'}, headers=eli).status_code == 403
    listing = client.get('/projects?status=in_progress', headers=eli).get_json()
    assert [p['id'] for p in listing['data']] == [pid]
    assert client.get('/projects?status=bogus', headers=eli).status_code == 400
    assert client.delete(f'/projects/{pid}', headers=mia).status_code == 204
    assert client.get(f'/projects/{pid}', headers=mia).status_code == 404
