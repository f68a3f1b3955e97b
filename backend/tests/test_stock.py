import pytest
from fieldops.errors import Forbidden, NotFound, ValidationError
from fieldops.services.stock import derive_stock_status


def test_status_derivation():
    assert derive_stock_status(0, 5) == 'out_of_stock'
    assert derive_stock_status(5, 5) == 'low'
    assert derive_stock_status(6, 5) == 'available'
    assert derive_stock_status(0, 0) == 'out_of_stock'


def test_quantity_changes_follow_threshold(workspace, manager):
    item = workspace.stock.add_stock_item(manager, {'name': 'Cable', 'quantity': 5, 'min_quantity': 5})
    assert item['status'] == 'low'
    item = workspace.stock.update_stock_item(manager, item['id'], {'quantity': 0})
    assert item['status'] == 'out_of_stock'
    item = workspace.stock.update_stock_item(manager, item['id'], {'quantity': 1})
    assert item['status'] == 'low'


def test_add_defaults(workspace, manager):
    item = workspace.stock.add_stock_item(manager, {'name': 'Bolts', 'quantity': 40})
    assert item['min_quantity'] == 5
    assert item['unit'] == 'unit'
    assert item['category'] == 'General'
    assert item['status'] == 'available'
    assert item['last_updated']


def test_status_ignores_client_value(workspace, manager):
    item = workspace.stock.add_stock_item(manager, {'name': 'Pipe', 'quantity': 10, 'min_quantity': 2, 'status': 'low'})
    assert item['status'] == 'available'
    updated = workspace.stock.update_stock_item(manager, item['id'], {'min_quantity': 10, 'status': 'available'})
    assert updated['status'] == 'low'
    assert updated['last_updated'] > item['last_updated']


def test_negative_quantity_rejected_but_adjust_clamps(workspace, manager):
    with pytest.raises(ValidationError):
        workspace.stock.add_stock_item(manager, {'name': 'Glue', 'quantity': -1})
    item = workspace.stock.add_stock_item(manager, {'name': 'Glue', 'quantity': 3})
    with pytest.raises(ValidationError):
        workspace.stock.update_stock_item(manager, item['id'], {'quantity': -2})
    adjusted = workspace.stock.adjust_stock_quantity(manager, item['id'], -10)
    assert adjusted['quantity'] == 0
    assert adjusted['status'] == 'out_of_stock'
    assert workspace.stock.adjust_stock_quantity(manager, item['id'], 7)['quantity'] == 7


def test_permissions_and_missing_items(workspace, manager, employee):
    with pytest.raises(Forbidden):
        workspace.stock.add_stock_item(employee, {'name': 'Tape', 'quantity': 1})
    item = workspace.stock.add_stock_item(manager, {'name': 'Tape', 'quantity': 1})
    with pytest.raises(Forbidden):
        workspace.stock.delete_stock_item(employee, item['id'])
    with pytest.raises(NotFound):
        workspace.stock.update_stock_item(manager, 'stock-missing', {'quantity': 1})
    workspace.stock.delete_stock_item(manager, item['id'])
    assert workspace.stock.get(item['id']) is None


def test_low_stock_view(workspace, manager):
    workspace.stock.add_stock_item(manager, {'name': 'A', 'quantity': 50})
    low = workspace.stock.add_stock_item(manager, {'name': 'B', 'quantity': 2})
    out = workspace.stock.add_stock_item(manager, {'name': 'C', 'quantity': 0})
    assert {i['id'] for i in workspace.stock.low_stock_items} == {low['id'], out['id']}


def test_stock_api(client, manager, employee, login):
    mia = login('mia@example.com')
    resp = client.post('/stock', json={'name': 'Cable', 'quantity': 5, 'min_quantity': 5, 'category': 'Electrical'}, headers=mia)
    assert resp.status_code == 201
    item_id = resp.get_json()['id']
    resp = client.post(f'/stock/{item_id}/adjust', json={'delta': -5}, headers=mia)
    assert resp.get_json()['status'] == 'out_of_stock'
    eli = login('eli@example.com')
    assert client.post(f'/stock/{item_id}/adjust', json={'delta': 1}, headers=eli).status_code == 403
    low = client.get('/stock/low', headers=eli).get_json()
    assert [i['id'] for i in low['data']] == [item_id]
    listing = client.get('/stock?category=Electrical&sort=-quantity', headers=eli).get_json()
    assert listing['pagination']['total'] == 1
    assert client.post(f'/stock/{item_id}/adjust', json={'delta': 'x'}, headers=mia).status_code == 400
    assert client.delete(f'/stock/{item_id}', headers=mia).status_code == 204
    assert client.get(f'/stock/{item_id}', headers=mia).status_code == 404


def test_fractional_quantities_rejected(workspace, manager):
    with pytest.raises(ValidationError):
        workspace.stock.add_stock_item(manager, {'name': 'Sand', 'quantity': 2.9})
    item = workspace.stock.add_stock_item(manager, {'name': 'Sand', 'quantity': 3.0})
    assert item['quantity'] == 3
    with pytest.raises(ValidationError):
        workspace.stock.adjust_stock_quantity(manager, item['id'], 0.5)
