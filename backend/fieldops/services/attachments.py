"""File attachment metadata. Files themselves are never transferred."""
from __future__ import annotations
from typing import Any, Callable, List, Optional

from fieldops.errors import ValidationError
from fieldops.utils.clock import new_id
from fieldops.utils.validation import coerce_int


def normalize_attachments(raw: Optional[Any], uploaded_by: str, clock: Callable[[], str]) -> List[dict]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError(description='attachments must be a list')
    out = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get('name') or not entry.get('url'):
            raise ValidationError(description='attachment name and url required')
        out.append({
            'id': entry.get('id') or new_id('file'),
            'name': str(entry['name']),
            'type': str(entry.get('type') or 'application/octet-stream'),
            'size': coerce_int(entry.get('size', 0), 'attachment size', minimum=0),
            'url': str(entry['url']),
            'uploaded_by': entry.get('uploaded_by') or uploaded_by,
            'created_at': entry.get('created_at') or clock(),
        })
    return out

__all__ = ['normalize_attachments']
