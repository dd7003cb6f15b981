from __future__ import annotations
"""Domain exceptions shared by the access and pricing engines.

Engines raise these instead of calling flask.abort so they stay usable outside a
request context; the app factory maps them onto the standard JSON error shape.
"""


class BackofficeError(Exception):
    status = 500
    title = 'Internal Server Error'

    def __init__(self, detail: str = ''):
        super().__init__(detail)
        self.detail = detail


class AuthorizationError(BackofficeError):
    status = 403
    title = 'Forbidden'


class ValidationError(BackofficeError):
    status = 400
    title = 'Bad Request'


class NotFoundError(BackofficeError):
    status = 404
    title = 'Not Found'


class MatrixDefinitionError(Exception):
    """Static permission table is malformed (raised at import/startup)."""


__all__ = ['BackofficeError', 'AuthorizationError', 'ValidationError', 'NotFoundError', 'MatrixDefinitionError']
