from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from backoffice import get_db
from backoffice.models.audit import AuditLog


def current_actor():
    """(user_id, role) of the JWT in the current request, or (None, None) outside one."""
    try:
        claims = get_jwt() or {}
        ident = get_jwt_identity()
    except RuntimeError:
        # no JWT verified in this context (scripts, tests calling services directly)
        return None, None
    actor = int(ident) if ident is not None else None
    return actor, claims.get('role')


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Stage an audit log entry in the current DB session.

    Parameters:
      action: short action code e.g. PERMISSIONS.SAVE, PERMISSIONS.RESET
      entity: optional entity name (Role, User)
      entity_id: optional key string (role name, user id)
      meta: additional JSON-safe dictionary
    """
    session = get_db()
    actor, role = current_actor()
    log = AuditLog(
        actor_user_id=actor or 0,
        actor_role=role,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=meta or {},
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
