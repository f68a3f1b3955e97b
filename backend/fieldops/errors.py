"""Typed domain errors.

Each error is a werkzeug HTTPException so the app-wide handler renders it with
the matching status code, while services stay importable without a request.
"""
from __future__ import annotations
from werkzeug import exceptions


class ValidationError(exceptions.BadRequest):
    description = 'Invalid input'


class Unauthorized(exceptions.Unauthorized):
    description = 'Authentication required'


class Forbidden(exceptions.Forbidden):
    description = 'Missing permission'


class NotFound(exceptions.NotFound):
    description = 'Resource not found'


class DuplicateEmail(exceptions.Conflict):
    description = 'A user with this email already exists'


__all__ = ['ValidationError', 'Unauthorized', 'Forbidden', 'NotFound', 'DuplicateEmail']
