from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from backoffice import get_access_resolver
from backoffice.decorators.auth import current_role
from backoffice.errors import ValidationError

access_bp = Blueprint('access', __name__)


@access_bp.post('/check')
@jwt_required()
def check():
    """Navigation guard: may the caller open `path`? Denial is a normal 200 answer."""
    path = (request.json or {}).get('path')
    if not isinstance(path, str) or not path:
        raise ValidationError('path required')
    role = current_role()
    return {'path': path, 'role': role, 'allowed': get_access_resolver().can_access(path, role)}


@access_bp.get('/menu')
@jwt_required()
def menu():
    return {'data': get_access_resolver().accessible_resources(current_role())}
