from flask import Blueprint, request
from fieldops import get_workspace
from fieldops.constants.statuses import StockStatus
from fieldops.decorators.auth import login_required, require_permissions, current_actor
from fieldops.errors import NotFound
from fieldops.utils.filters import apply_filters
from fieldops.utils.listing import list_response
from fieldops.utils.sorting import apply_multi_sort

stock_bp = Blueprint('stock', __name__)

STOCK_FILTERS = {
    'status': {'validate': lambda v: v in StockStatus.ALL, 'match': lambda i, v: i.get('status') == v},
    'category': {'match': lambda i, v: i.get('category') == v},
    'q': {'match': lambda i, v: v.lower() in i.get('name', '').lower()},
}


@stock_bp.get('')
@require_permissions('viewStock')
def list_stock():
    rows = apply_filters(get_workspace().stock.stock_items, STOCK_FILTERS, request.args)
    rows = apply_multi_sort(rows, request.args.get('sort'), {'name', 'quantity', 'category', 'status', 'last_updated'}, 'id')
    return list_response(rows, 'last_updated')


@stock_bp.get('/low')
@require_permissions('viewStock')
def list_low_stock():
    return list_response(get_workspace().stock.low_stock_items, 'last_updated')


@stock_bp.post('')
@login_required
def add_item():
    return get_workspace().stock.add_stock_item(current_actor(), request.get_json(silent=True) or {}), 201


@stock_bp.get('/<item_id>')
@require_permissions('viewStock')
def get_item(item_id: str):
    item = get_workspace().stock.get(item_id)
    if item is None:
        raise NotFound(description='Stock item not found')
    return item


@stock_bp.patch('/<item_id>')
@login_required
def update_item(item_id: str):
    return get_workspace().stock.update_stock_item(current_actor(), item_id, request.get_json(silent=True) or {})


@stock_bp.post('/<item_id>/adjust')
@login_required
def adjust_item(item_id: str):
    data = request.get_json(silent=True) or {}
    return get_workspace().stock.adjust_stock_quantity(current_actor(), item_id, data.get('delta'))


@stock_bp.delete('/<item_id>')
@login_required
def delete_item(item_id: str):
    get_workspace().stock.delete_stock_item(current_actor(), item_id)
    return '', 204
