def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_domain_error_shape(client, manager, login):
    resp = client.post('/projects', json={'name': 'No number'}, headers=login('mia@example.com'))
    assert resp.status_code == 400
    assert resp.get_json()['error'] == {'status': 400, 'title': 'Bad Request', 'detail': 'number required'}


def test_duplicate_email_is_conflict(client, developer, employee, login):
    resp = client.post('/users', json={'name': 'Eli', 'email': 'eli@example.com'}, headers=login('dev@example.com'))
    assert resp.status_code == 409
    assert resp.get_json()['error']['title'] == 'Conflict'


def test_internal_error_shape(client, workspace, employee, login, monkeypatch):
    headers = login('eli@example.com')

    def boom():
        raise RuntimeError('explode')
    monkeypatch.setattr(workspace, 'dashboard_stats', boom)
    resp = client.get('/dashboard/stats', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'


def test_healthz(client):
    assert client.get('/healthz').get_json() == {'status': 'ok'}
