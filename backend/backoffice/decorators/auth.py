from functools import wraps
from typing import Optional
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from backoffice import get_access_resolver
from backoffice.errors import AuthorizationError
from backoffice.services.access import satisfies_role


def current_role() -> Optional[str]:
    return get_jwt().get('role')


def require_role(*roles: str):
    """Allow the view when the caller's role satisfies any of the given roles.

    Administrator satisfies every requirement (see services.access.satisfies_role).
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = current_role()
            if not any(satisfies_role(r, role) for r in roles):
                raise AuthorizationError('Missing role')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_access(path: str):
    """Guard a view with the same decision used for navigation to `path`."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            get_access_resolver().require(path, current_role())
            return fn(*args, **kwargs)
        return wrapper
    return outer
