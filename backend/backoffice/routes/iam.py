from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select, or_
from backoffice.models.authz import User
from backoffice import get_db, get_access_resolver
from backoffice.config.pagination import normalize_pagination, build_list_payload
from backoffice.constants.permissions import ROLE_ADMIN, ALL_ROLES
from backoffice.decorators.audit import audit_log
from backoffice.decorators.auth import require_role
from backoffice.errors import ValidationError, NotFoundError

iam_bp = Blueprint('iam', __name__)


def _user_json(u: User):
    return {'id': u.id, 'name': u.name, 'username': u.username, 'email': u.email, 'role': u.role, 'is_active': u.is_active}


@iam_bp.post('/auth/login')
def login():
    data = request.json or {}
    login_name = data.get('username') or data.get('email')
    password = data.get('password')
    if not login_name or not password:
        abort(400, description='username & password required')
    session = get_db()
    user = session.execute(
        select(User).where(or_(User.username == login_name, User.email == login_name))
    ).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        abort(401, description='invalid credentials')
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
    return {'access_token': token}


@iam_bp.get('/auth/me')
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise NotFoundError('user not found')
    body = _user_json(user)
    # role is re-read from the DB so a role change shows up before the token expires
    body['resources'] = get_access_resolver().accessible_resources(user.role)
    return body


@iam_bp.get('/users')
@require_role(ROLE_ADMIN)
def list_users():
    session = get_db()
    q = session.query(User)
    limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    total = q.count()
    rows = q.order_by(User.id.asc()).offset(offset).limit(limit).all()
    return build_list_payload([_user_json(u) for u in rows], total, limit, offset)


@iam_bp.put('/users/<int:user_id>/role')
@require_role(ROLE_ADMIN)
@audit_log('USER.ROLE.SET', entity='User', entity_id_key='id', meta_keys=['role'])
def set_user_role(user_id: int):
    session = get_db()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise NotFoundError('user not found')
    role = (request.json or {}).get('role')
    if role not in ALL_ROLES:
        raise ValidationError(f'role must be one of {list(ALL_ROLES)}')
    if user.role == ROLE_ADMIN and role != ROLE_ADMIN:
        remaining = session.query(User).filter(User.role == ROLE_ADMIN, User.is_active.is_(True), User.id != user.id).count()
        if remaining == 0:
            raise ValidationError('Cannot remove last Administrator')
    user.role = role
    session.commit()
    return _user_json(user)
