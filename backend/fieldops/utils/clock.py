from __future__ import annotations
from datetime import datetime, timezone
from uuid import uuid4

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%fZ'


def utcnow_iso() -> str:
    """Fixed-width UTC timestamp; lexical order equals chronological order."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


def new_id(prefix: str) -> str:
    return f'{prefix}-{uuid4().hex[:16]}'

__all__ = ['utcnow_iso', 'new_id', 'TIMESTAMP_FORMAT']
