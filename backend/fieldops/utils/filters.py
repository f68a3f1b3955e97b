from __future__ import annotations
from typing import Any, Dict, List
from fieldops.errors import ValidationError


def apply_filters(rows: List[dict], specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]) -> List[dict]:
    """Generic filter builder over in-memory rows.

    specs: { param_name: { 'match': callable(row, value)->bool, 'coerce': type/func, 'validate': callable(optional) } }
    """
    for name, meta in specs.items():
        if name not in params or params[name] is None:
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except Exception:
                raise ValidationError(description=f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            raise ValidationError(description=f'{name} invalid')
        rows = [row for row in rows if meta['match'](row, val)]
    return rows


def parse_bool(value: str) -> bool:
    lowered = str(value).lower()
    if lowered in ('1', 'true', 'yes'):
        return True
    if lowered in ('0', 'false', 'no'):
        return False
    raise ValueError(value)

__all__ = ['apply_filters', 'parse_bool']
