from __future__ import annotations
"""Single allow/deny decision point for navigation targets and API actions.

    path --(matrix.resolve)--> rule --(rule.key)--> override for role?  -> use it
                                                    no override        -> matrix default

Administrator bypasses everything; an absent role is always denied. Overrides are
injected (anything exposing get(role)) so the resolver carries no global state.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from backoffice.constants.permissions import ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER, ALL_ROLES
from backoffice.errors import AuthorizationError
from backoffice.services.matrix import PermissionMatrix, PermissionRule, default_matrix

logger = logging.getLogger(__name__)


class OverrideSource(Protocol):
    def get(self, role: Optional[str]) -> Optional[Mapping[str, bool]]: ...


class StaticOverrides:
    """In-memory override source, e.g. a snapshot loaded once per request."""

    def __init__(self, overrides: Optional[Mapping[str, Mapping[str, bool]]] = None):
        self._overrides = {role: dict(grants) for role, grants in (overrides or {}).items()}

    def get(self, role: Optional[str]) -> Optional[Mapping[str, bool]]:
        return self._overrides.get(role)


# Which held roles satisfy a role requirement. Administrator is a superset of
# everything; Registrar and User are not ordered relative to each other.
_ROLE_SATISFIED_BY = {
    ROLE_ADMIN: {ROLE_ADMIN},
    ROLE_REGISTRAR: {ROLE_REGISTRAR, ROLE_ADMIN},
    ROLE_USER: {ROLE_USER, ROLE_ADMIN},
}


def satisfies_role(required: str, role: Optional[str]) -> bool:
    return role in _ROLE_SATISFIED_BY.get(required, ())


class AccessResolver:
    def __init__(self, matrix: Optional[PermissionMatrix] = None, overrides: Optional[OverrideSource] = None):
        self.matrix = matrix or default_matrix()
        self.overrides = overrides if overrides is not None else StaticOverrides()

    def _decide(self, rule: PermissionRule, role: str, grants: Optional[Mapping[str, bool]]) -> bool:
        if grants is not None and rule.key in grants:
            return bool(grants[rule.key])
        return rule.allows(role)

    def can_access(self, path: Optional[str], role: Optional[str]) -> bool:
        if not role:
            return False
        if role == ROLE_ADMIN:
            return True
        if role not in ALL_ROLES:
            logger.warning('Access check with unknown role %r denied', role)
            return False
        rule = self.matrix.resolve(path)
        if rule is None:
            return False
        return self._decide(rule, role, self.overrides.get(role))

    def require(self, path: Optional[str], role: Optional[str]) -> None:
        if not role:
            raise AuthorizationError('Authentication required')
        if not self.can_access(path, role):
            logger.info('Access denied: role=%s path=%s', role, path)
            raise AuthorizationError('Access denied')

    def effective_permissions(self, role: Optional[str]) -> Dict[str, bool]:
        if role == ROLE_ADMIN:
            return {r.key: True for r in self.matrix.rules}
        if role not in ALL_ROLES:
            return {r.key: False for r in self.matrix.rules}
        grants = self.overrides.get(role)
        return {r.key: self._decide(r, role, grants) for r in self.matrix.rules}

    def accessible_resources(self, role: Optional[str]) -> List[Dict[str, Any]]:
        """Override-aware menu entries for a role, in table order."""
        if not role:
            return []
        allowed = self.effective_permissions(role)
        return [
            {'key': r.key, 'path': r.path, 'description': r.description}
            for r in self.matrix.rules if allowed.get(r.key)
        ]


__all__ = ['AccessResolver', 'StaticOverrides', 'OverrideSource', 'satisfies_role']
