from __future__ import annotations
"""Compiled default permission matrix.

Resolution order for a path (first hit wins):
  1. exact literal match on a rule path
  2. parameterized match ('/brands/:id/edit' vs '/brands/42/edit')
  3. longest whole-segment prefix among non-parameterized rules
  4. nothing -> deny
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from backoffice.constants.permissions import ALL_ROLES, ALL_CATEGORIES, ROUTE_PERMISSIONS
from backoffice.errors import MatrixDefinitionError, ValidationError
from backoffice.utils.paths import (
    Segment, compile_pattern, is_parameterized, matches_pattern, is_segment_prefix,
    normalize_path, split_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionRule:
    key: str
    path: str
    allowed_roles: FrozenSet[str]
    description: str
    category: Optional[str]
    segments: Tuple[Segment, ...]

    @property
    def parameterized(self) -> bool:
        return is_parameterized(self.segments)

    def allows(self, role: Optional[str]) -> bool:
        return role in self.allowed_roles

    def as_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'path': self.path,
            'description': self.description,
            'category': self.category,
            'roles': sorted(self.allowed_roles),
        }


class PermissionMatrix:
    def __init__(self, table: Iterable[Mapping[str, Any]] = ROUTE_PERMISSIONS):
        self.rules: Tuple[PermissionRule, ...] = tuple(self._compile(table))
        self._by_path = {}
        for rule in self.rules:
            # first registration of a path wins, mirroring table order
            self._by_path.setdefault(rule.path, rule)
        self._by_key = {r.key: r for r in self.rules}
        self._param_rules = [r for r in self.rules if r.parameterized]
        # longest path string first so the first prefix hit is the best one
        self._prefix_rules = sorted(
            (r for r in self.rules if not r.parameterized and r.segments),
            key=lambda r: len(r.path),
            reverse=True,
        )
        logger.debug('Permission matrix compiled with %d rules', len(self.rules))

    @staticmethod
    def _compile(table: Iterable[Mapping[str, Any]]) -> List[PermissionRule]:
        compiled: List[PermissionRule] = []
        seen_keys = set()
        for entry in table:
            key = entry.get('key')
            if not key or not isinstance(key, str):
                raise MatrixDefinitionError(f'Permission rule without key: {entry!r}')
            if key in seen_keys:
                raise MatrixDefinitionError(f'Duplicate permission rule key {key!r}')
            seen_keys.add(key)
            roles = frozenset(entry.get('roles') or ())
            unknown = roles - set(ALL_ROLES)
            if unknown:
                raise MatrixDefinitionError(f'Unknown roles {sorted(unknown)} in rule {key!r}')
            category = entry.get('category')
            if category is not None and category not in ALL_CATEGORIES:
                raise MatrixDefinitionError(f'Unknown category {category!r} in rule {key!r}')
            path = entry.get('path')
            compiled.append(PermissionRule(
                key=key,
                path=path,
                allowed_roles=roles,
                description=entry.get('description') or key,
                category=category,
                segments=compile_pattern(path),
            ))
        return compiled

    def get(self, key: str) -> Optional[PermissionRule]:
        return self._by_key.get(key)

    def resolve(self, path: Optional[str]) -> Optional[PermissionRule]:
        path = normalize_path(path)
        exact = self._by_path.get(path)
        if exact is not None:
            return exact
        parts = split_path(path)
        for rule in self._param_rules:
            if matches_pattern(rule.segments, parts):
                return rule
        for rule in self._prefix_rules:
            if is_segment_prefix(rule.segments, parts):
                return rule
        return None

    def is_allowed_by_default(self, path: Optional[str], role: Optional[str]) -> bool:
        rule = self.resolve(path)
        return rule is not None and rule.allows(role)

    def accessible_resources(self, role: Optional[str]) -> List[Dict[str, str]]:
        return [{'path': r.path, 'description': r.description} for r in self.rules if r.allows(role)]

    def functionalities(self) -> List[PermissionRule]:
        """Rules de-duplicated by description, first occurrence wins."""
        seen = set()
        out = []
        for rule in self.rules:
            if rule.description in seen:
                continue
            seen.add(rule.description)
            out.append(rule)
        return out

    def default_permissions(self, role: Optional[str]) -> Dict[str, bool]:
        return {r.key: r.allows(role) for r in self.rules}

    def normalize_grants(self, grants: Mapping[str, Any]) -> Dict[str, bool]:
        """Translate a {rule key | description: bool} payload into {rule key: bool}.

        Descriptions are accepted for older clients and expand to every rule that
        carries the label. Keys take precedence when both forms name the same rule.
        """
        if not isinstance(grants, Mapping):
            raise ValidationError('permissions must be an object')
        by_key: Dict[str, bool] = {}
        by_description: Dict[str, bool] = {}
        unknown = []
        for label, value in grants.items():
            if not isinstance(value, bool):
                raise ValidationError(f'permission {label!r} must be boolean')
            if label in self._by_key:
                by_key[label] = value
                continue
            matched = [r.key for r in self.rules if r.description == label]
            if not matched:
                unknown.append(label)
                continue
            for key in matched:
                by_description[key] = value
        if unknown:
            raise ValidationError(f'Unknown permissions: {sorted(unknown)}')
        by_description.update(by_key)
        return by_description


_default_matrix: Optional[PermissionMatrix] = None


def default_matrix() -> PermissionMatrix:
    """Matrix built from the compiled-in table, created once per process."""
    global _default_matrix
    if _default_matrix is None:
        _default_matrix = PermissionMatrix()
    return _default_matrix


__all__ = ['PermissionRule', 'PermissionMatrix', 'default_matrix']
