from __future__ import annotations
"""Audit logging decorator for mutating route handlers.

Usage:

@audit_log('PERMISSIONS.SAVE', entity='Role', entity_id_key='role',
           meta_builder=lambda data, rv, args, kwargs: {'count': len(data.get('permissions', {}))})
def save_permissions(): ...

@audit_log('PERMISSIONS.RESET', entity='Role', entity_id_arg='role')
def reset_permissions(role): ...

Parameters:
  action: required audit action code
  entity: optional entity label
  entity_id_key: key in the returned JSON object whose value becomes entity_id
  entity_id_arg: view keyword argument used when entity_id_key is absent
  meta_keys: keys projected from the returned JSON into meta
  meta_builder: callable (data, rv, args, kwargs) -> dict; overrides meta_keys

Only successful returns are audited: if the view raises, nothing is recorded.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional

from backoffice.services.audit import add_audit
from backoffice import get_db

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Flask views return dict, (dict, status) or (dict, status, headers)."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            try:
                data = _extract_payload(rv)
                if not isinstance(data, dict):
                    data = {}
                entity_id = None
                if entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                elif entity_id_arg and entity_id_arg in kwargs:
                    entity_id = kwargs.get(entity_id_arg)
                meta = None
                if meta_builder:
                    meta = meta_builder(data, rv, args, kwargs)
                elif meta_keys:
                    meta = {k: data.get(k) for k in meta_keys if k in data}
                add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except Exception:
                # the change itself is already committed; a failed audit write must not turn it into a 500
                logger.exception('Failed to record audit entry %s', action)
                get_db().rollback()
            return rv
        return wrapper
    return outer
