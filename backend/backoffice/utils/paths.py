from __future__ import annotations
"""Route pattern compilation and matching.

Patterns look like '/brands/:id/edit'. They are compiled once into a tuple of
LiteralSegment / ParamSegment values and matched segment by segment, so '/m' is
never treated as a prefix of '/models'.
"""
from dataclasses import dataclass
from typing import Tuple, Union, Optional
import re

from backoffice.errors import MatrixDefinitionError

PARAM_MARKER = ':'
_PARAM_NAME = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


@dataclass(frozen=True)
class LiteralSegment:
    value: str

    def matches(self, segment: str) -> bool:
        return segment == self.value


@dataclass(frozen=True)
class ParamSegment:
    name: str

    def matches(self, segment: str) -> bool:
        # split('/') already guarantees no slash inside a segment
        return segment != ''


Segment = Union[LiteralSegment, ParamSegment]


def normalize_path(path: Optional[str]) -> str:
    """Drop query/fragment and a trailing slash; empty input becomes '/'."""
    if not path:
        return '/'
    path = path.split('#', 1)[0].split('?', 1)[0]
    if not path.startswith('/'):
        path = '/' + path
    if len(path) > 1:
        path = path.rstrip('/') or '/'
    return path


def split_path(path: str) -> Tuple[str, ...]:
    """'/a/b' -> ('a', 'b'); '/' -> ()."""
    if path == '/':
        return ()
    return tuple(path.lstrip('/').split('/'))


def compile_pattern(pattern: str) -> Tuple[Segment, ...]:
    if not isinstance(pattern, str) or not pattern.startswith('/'):
        raise MatrixDefinitionError(f'Route pattern must start with "/": {pattern!r}')
    if pattern != '/' and pattern.endswith('/'):
        raise MatrixDefinitionError(f'Route pattern must not end with "/": {pattern!r}')
    segments = []
    seen_params = set()
    for raw in split_path(pattern):
        if raw == '':
            raise MatrixDefinitionError(f'Empty segment in route pattern {pattern!r}')
        if raw.startswith(PARAM_MARKER):
            name = raw[len(PARAM_MARKER):]
            if not _PARAM_NAME.match(name):
                raise MatrixDefinitionError(f'Malformed parameter {raw!r} in route pattern {pattern!r}')
            if name in seen_params:
                raise MatrixDefinitionError(f'Duplicate parameter {raw!r} in route pattern {pattern!r}')
            seen_params.add(name)
            segments.append(ParamSegment(name))
        else:
            if PARAM_MARKER in raw:
                raise MatrixDefinitionError(f'Misplaced parameter marker in {raw!r} of {pattern!r}')
            segments.append(LiteralSegment(raw))
    return tuple(segments)


def is_parameterized(segments: Tuple[Segment, ...]) -> bool:
    return any(isinstance(s, ParamSegment) for s in segments)


def matches_pattern(segments: Tuple[Segment, ...], path_segments: Tuple[str, ...]) -> bool:
    if len(segments) != len(path_segments):
        return False
    return all(seg.matches(part) for seg, part in zip(segments, path_segments))


def is_segment_prefix(segments: Tuple[Segment, ...], path_segments: Tuple[str, ...]) -> bool:
    """True when a literal-only pattern is a whole-segment prefix of the path.

    The root pattern (no segments) is deliberately excluded: '/' only ever matches
    itself through exact matching.
    """
    if not segments or len(segments) > len(path_segments):
        return False
    return all(seg.matches(part) for seg, part in zip(segments, path_segments))


__all__ = [
    'LiteralSegment', 'ParamSegment', 'Segment', 'normalize_path', 'split_path',
    'compile_pattern', 'is_parameterized', 'matches_pattern', 'is_segment_prefix',
]
