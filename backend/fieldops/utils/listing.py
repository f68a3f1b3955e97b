"""List responses over in-memory collections: pagination, ETag, conditional GET."""
from __future__ import annotations
from typing import List, Optional, Tuple
from flask import request, make_response
from fieldops.errors import ValidationError
import hashlib
import json

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def normalize_pagination(limit_raw, offset_raw):
    try:
        limit = int(limit_raw) if limit_raw is not None else DEFAULT_LIMIT
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    limit = max(1, min(limit, MAX_LIMIT))
    offset = max(0, offset)
    return limit, offset


def apply_pagination(rows: List[dict]) -> Tuple[List[dict], int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        raise ValidationError(description=str(e))
    return rows[offset:offset + limit], len(rows), limit, offset


def compute_etag(rows: List[dict], total: int, limit: int, offset: int) -> str:
    body = json.dumps(rows, sort_keys=True, separators=(',', ':'))
    seed = f"{body}|{total}|{limit}|{offset}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def make_cached_list_response(rows: list, total: int, limit: int, offset: int, latest_ts: Optional[str] = None):
    etag = compute_etag(rows, total, limit, offset)
    resp = make_response(build_list_payload(rows, total, limit, offset))
    resp.headers['ETag'] = etag
    if latest_ts:
        resp.headers['X-Last-Modified-ISO'] = latest_ts
    return resp, etag


def handle_conditional(etag_value: str):
    """Return a 304 response when If-None-Match carries the current ETag, else None."""
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag_value:
        resp = make_response('', 304)
        resp.headers['ETag'] = etag_value
        return resp
    return None


def list_response(rows: List[dict], timestamp_field: Optional[str] = None):
    """Paginate ``rows`` and answer with either the page or a 304."""
    page, total, limit, offset = apply_pagination(rows)
    latest_ts = max((r.get(timestamp_field) or '' for r in rows), default=None) if timestamp_field else None
    resp, etag = make_cached_list_response(page, total, limit, offset, latest_ts or None)
    cond = handle_conditional(etag)
    if cond:
        return cond
    return resp

__all__ = ['normalize_pagination', 'apply_pagination', 'compute_etag', 'build_list_payload',
           'make_cached_list_response', 'handle_conditional', 'list_response']
