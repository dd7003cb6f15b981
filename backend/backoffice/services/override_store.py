from __future__ import annotations
"""Persistence for per-role permission overrides.

One PermissionOverride row per customizable role holds the full {rule key: bool}
map. Saves replace the map wholesale inside a single transaction; the Administrator
role can never be written because its access is hard-wired in the resolver.
"""
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError

from backoffice.constants.permissions import ROLE_ADMIN, ALL_ROLES, CUSTOMIZABLE_ROLES
from backoffice.errors import AuthorizationError, ValidationError
from backoffice.models.permission_override import PermissionOverride
from backoffice.services.matrix import PermissionMatrix, default_matrix

logger = logging.getLogger(__name__)


def assert_customizable_role(role: Optional[str]) -> str:
    if role == ROLE_ADMIN:
        raise AuthorizationError('Administrator permissions cannot be modified')
    if role not in ALL_ROLES:
        raise ValidationError(f'Unknown role {role!r}')
    return role


class PermissionOverrideStore:
    def __init__(self, session_factory: Callable[[], Any], matrix: Optional[PermissionMatrix] = None):
        self._session = session_factory
        self.matrix = matrix or default_matrix()

    def _fetch(self, session, role: str, for_update: bool = False) -> Optional[PermissionOverride]:
        stmt = select(PermissionOverride).where(PermissionOverride.role_name == role)
        if for_update:
            stmt = stmt.with_for_update()
        # always reload: another admin may have written since this session cached the row
        stmt = stmt.execution_options(populate_existing=True)
        return session.execute(stmt).scalar_one_or_none()

    def get(self, role: Optional[str]) -> Optional[Dict[str, bool]]:
        if role not in CUSTOMIZABLE_ROLES:
            return None
        row = self._fetch(self._session(), role)
        if row is None:
            return None
        return dict(row.permissions or {})

    def all(self) -> Dict[str, Dict[str, bool]]:
        session = self._session()
        rows = session.execute(
            select(PermissionOverride).order_by(PermissionOverride.role_name.asc()).execution_options(populate_existing=True)
        ).scalars().all()
        return {r.role_name: dict(r.permissions or {}) for r in rows if r.role_name in CUSTOMIZABLE_ROLES}

    def save(self, role: Optional[str], permissions: Mapping[str, Any], actor_id: Optional[int] = None) -> Dict[str, bool]:
        assert_customizable_role(role)
        grants = self.matrix.normalize_grants(permissions)
        session = self._session()
        try:
            self._upsert(session, role, grants, actor_id)
            session.commit()
        except IntegrityError:
            # concurrent first save for the same role: the other insert won, update it instead
            session.rollback()
            self._upsert(session, role, grants, actor_id)
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.info('Saved permission override for role %s (%d entries)', role, len(grants))
        return grants

    def _upsert(self, session, role: str, grants: Dict[str, bool], actor_id: Optional[int]):
        row = self._fetch(session, role, for_update=True)
        if row is None:
            session.add(PermissionOverride(role_name=role, permissions=dict(grants), updated_by=actor_id))
        else:
            # new dict instance so the JSON column is flagged dirty
            row.permissions = dict(grants)
            row.updated_by = actor_id
        session.flush()

    def reset_to_default(self, role: Optional[str]) -> bool:
        """Delete the role's override. Returns whether a row existed."""
        assert_customizable_role(role)
        session = self._session()
        try:
            result = session.execute(delete(PermissionOverride).where(PermissionOverride.role_name == role))
            session.commit()
        except Exception:
            session.rollback()
            raise
        removed = bool(result.rowcount)
        logger.info('Reset permissions of role %s to defaults (removed=%s)', role, removed)
        return removed


class CachedOverrides:
    """Per-role read cache in front of PermissionOverrideStore.

    Entries expire after ttl seconds; writes made through this wrapper invalidate the
    role immediately so the next decision sees them. ttl <= 0 disables caching.
    """

    def __init__(self, store: PermissionOverrideStore, ttl: float = 30, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Optional[Dict[str, bool]]]] = {}

    def get(self, role: Optional[str]) -> Optional[Dict[str, bool]]:
        if self.ttl <= 0:
            return self.store.get(role)
        now = self._clock()
        hit = self._entries.get(role)
        if hit is not None and now - hit[0] < self.ttl:
            return hit[1]
        value = self.store.get(role)
        self._entries[role] = (now, value)
        return value

    def all(self) -> Dict[str, Dict[str, bool]]:
        return self.store.all()

    def invalidate(self, role: Optional[str] = None) -> None:
        if role is None:
            self._entries.clear()
        else:
            self._entries.pop(role, None)

    def save(self, role: Optional[str], permissions: Mapping[str, Any], actor_id: Optional[int] = None) -> Dict[str, bool]:
        try:
            return self.store.save(role, permissions, actor_id=actor_id)
        finally:
            self.invalidate(role)

    def reset_to_default(self, role: Optional[str]) -> bool:
        try:
            return self.store.reset_to_default(role)
        finally:
            self.invalidate(role)


__all__ = ['PermissionOverrideStore', 'CachedOverrides', 'assert_customizable_role']
