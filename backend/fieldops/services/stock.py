from __future__ import annotations
import logging
from typing import List, Optional

from fieldops.constants.statuses import KEY_STOCK, StockStatus
from fieldops.errors import NotFound
from fieldops.services.collection import CollectionStore
from fieldops.services.policy import authorize
from fieldops.utils.clock import new_id
from fieldops.utils.validation import coerce_int, require_text

log = logging.getLogger('fieldops.stock')

DEFAULT_MIN_QUANTITY = 5
DEFAULT_UNIT = 'unit'
DEFAULT_CATEGORY = 'General'
UPDATABLE_FIELDS = ('name', 'quantity', 'min_quantity', 'unit', 'category')


def derive_stock_status(quantity: int, min_quantity: int) -> str:
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_quantity:
        return StockStatus.LOW
    return StockStatus.AVAILABLE


class StockStore(CollectionStore):
    storage_key = KEY_STOCK

    @property
    def stock_items(self) -> List[dict]:
        return self.items

    @property
    def low_stock_items(self) -> List[dict]:
        return [i for i in self.items if i.get('status') in (StockStatus.LOW, StockStatus.OUT_OF_STOCK)]

    def add_stock_item(self, actor: Optional[dict], data: dict) -> dict:
        authorize(actor, 'addStock')
        data = data or {}
        quantity = coerce_int(data.get('quantity', 0), 'quantity', minimum=0)
        min_quantity = coerce_int(data.get('min_quantity', DEFAULT_MIN_QUANTITY), 'min_quantity', minimum=0)
        item = {
            'id': new_id('stock'),
            'name': require_text(data, 'name'),
            'quantity': quantity,
            'min_quantity': min_quantity,
            'unit': (data.get('unit') or DEFAULT_UNIT).strip(),
            'category': (data.get('category') or DEFAULT_CATEGORY).strip(),
            'status': derive_stock_status(quantity, min_quantity),
            'last_updated': self._clock(),
        }
        with self._lock:
            self._commit(self._items + [item])
        log.info('Stock item added: %s', item['name'])
        return dict(item)

    def update_stock_item(self, actor: Optional[dict], item_id: str, updates: dict) -> dict:
        authorize(actor, 'editStock')
        changes = {k: v for k, v in (updates or {}).items() if k in UPDATABLE_FIELDS}
        if 'name' in changes:
            changes['name'] = require_text(changes, 'name')
        if 'quantity' in changes:
            changes['quantity'] = coerce_int(changes['quantity'], 'quantity', minimum=0)
        if 'min_quantity' in changes:
            changes['min_quantity'] = coerce_int(changes['min_quantity'], 'min_quantity', minimum=0)
        with self._lock:
            item = self._find(item_id)
            if item is None:
                raise NotFound(description='Stock item not found')
            merged = {**item, **changes}
            # status always follows the merged quantity / threshold pair
            merged['status'] = derive_stock_status(merged['quantity'], merged['min_quantity'])
            merged['last_updated'] = self._clock()
            self._commit([merged if i['id'] == item_id else i for i in self._items])
        log.info('Stock item updated: %s', item_id)
        return dict(merged)

    def adjust_stock_quantity(self, actor: Optional[dict], item_id: str, delta: int) -> dict:
        """Apply a +/- delta, clamping the result at zero."""
        authorize(actor, 'editStock')
        delta = coerce_int(delta, 'delta')
        with self._lock:
            item = self._find(item_id)
            if item is None:
                raise NotFound(description='Stock item not found')
            return self.update_stock_item(actor, item_id, {'quantity': max(0, item['quantity'] + delta)})

    def delete_stock_item(self, actor: Optional[dict], item_id: str) -> None:
        authorize(actor, 'deleteStock')
        with self._lock:
            if self._find(item_id) is None:
                raise NotFound(description='Stock item not found')
            self._commit([i for i in self._items if i['id'] != item_id])
        log.info('Stock item deleted: %s', item_id)


__all__ = ['StockStore', 'derive_stock_status']
