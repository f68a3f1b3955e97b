from __future__ import annotations
from typing import List
from fieldops.errors import ValidationError


def apply_multi_sort(rows: List[dict], sort_expr: str | None, allowed: set, tie_breaker: str) -> List[dict]:
    """Apply multi-field sort to a list of records.
    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: field keys that may be sorted on.
    tie_breaker: key appended for deterministic ordering.
    """
    clauses = []
    for raw in (sort_expr or '').split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        if key not in allowed:
            raise ValidationError(description=f'Invalid sort field {key}')
        clauses.append((key, desc))
    clauses.append((tie_breaker, False))
    out = list(rows)
    # stable sorts applied from the least significant key outwards
    for key, desc in reversed(clauses):
        out.sort(key=lambda r: (r.get(key) is None, r.get(key) if r.get(key) is not None else ''), reverse=desc)
    return out

__all__ = ['apply_multi_sort']
