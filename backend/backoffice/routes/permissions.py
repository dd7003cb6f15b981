from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity
from backoffice import get_access_resolver, get_override_store
from backoffice.constants.permissions import ROLE_ADMIN, ALL_ROLES, CUSTOMIZABLE_ROLES, ALL_CATEGORIES
from backoffice.decorators.audit import audit_log
from backoffice.decorators.auth import require_role, require_access
from backoffice.errors import ValidationError

perm_bp = Blueprint('permissions', __name__)

# the settings screen itself; readable by every role unless customized away
PERMISSIONS_PAGE = '/admin/permissions'


@perm_bp.get('')
@require_access(PERMISSIONS_PAGE)
def list_overrides():
    """Stored customizations only; roles missing here use the defaults."""
    return get_override_store().all()


@perm_bp.get('/matrix')
@require_access(PERMISSIONS_PAGE)
def permission_matrix():
    resolver = get_access_resolver()
    matrix = resolver.matrix
    effective = {role: resolver.effective_permissions(role) for role in CUSTOMIZABLE_ROLES}
    defaults = {role: matrix.default_permissions(role) for role in CUSTOMIZABLE_ROLES}
    stored = get_override_store().all()
    rows = []
    for rule in matrix.functionalities():
        rows.append({
            'key': rule.key,
            'path': rule.path,
            'description': rule.description,
            'category': rule.category,
            'defaults': {role: defaults[role][rule.key] for role in CUSTOMIZABLE_ROLES},
            'effective': {role: effective[role][rule.key] for role in CUSTOMIZABLE_ROLES},
        })
    return {
        'categories': list(ALL_CATEGORIES),
        'roles': list(CUSTOMIZABLE_ROLES),
        'customized': sorted(stored.keys()),
        'data': rows,
    }


@perm_bp.get('/report')
@require_access(PERMISSIONS_PAGE)
def access_report():
    """Side-by-side list of what each role can reach."""
    resolver = get_access_resolver()
    return {role: resolver.accessible_resources(role) for role in ALL_ROLES}


@perm_bp.post('')
@require_role(ROLE_ADMIN)
@audit_log(
    'PERMISSIONS.SAVE',
    entity='Role',
    entity_id_key='role',
    meta_builder=lambda data, rv, a, kw: {'count': len(data.get('permissions', {}))},
)
def save_overrides():
    data = request.json or {}
    role = data.get('role')
    if not role:
        raise ValidationError('role required')
    if 'permissions' not in data:
        raise ValidationError('permissions required')
    actor = get_jwt_identity()
    grants = get_override_store().save(role, data['permissions'], actor_id=int(actor) if actor else None)
    return {'role': role, 'permissions': grants}


@perm_bp.delete('/<role>')
@require_role(ROLE_ADMIN)
@audit_log('PERMISSIONS.RESET', entity='Role', entity_id_key='role', meta_keys=['removed'])
def reset_overrides(role: str):
    removed = get_override_store().reset_to_default(role)
    return {'role': role, 'removed': removed}
