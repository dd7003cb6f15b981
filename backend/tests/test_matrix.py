import pytest
from backoffice.constants.permissions import ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER, ROUTE_PERMISSIONS
from backoffice.errors import MatrixDefinitionError, ValidationError
from backoffice.services.matrix import PermissionMatrix, default_matrix
from backoffice.utils.paths import (
    LiteralSegment, ParamSegment, compile_pattern, normalize_path, split_path, is_segment_prefix,
)


def test_compile_pattern_segments():
    assert compile_pattern('/brands/:id/edit') == (LiteralSegment('brands'), ParamSegment('id'), LiteralSegment('edit'))
    assert compile_pattern('/') == ()


@pytest.mark.parametrize('pattern', ['brands', '/brands/', '/a//b', '/brands/:', '/brands/:1x', '/a/:id/:id', '/a/b:c', None])
def test_malformed_patterns_rejected(pattern):
    with pytest.raises(MatrixDefinitionError):
        compile_pattern(pattern)


def test_normalize_path_strips_query_fragment_and_trailing_slash():
    assert normalize_path('/models/?page=2') == '/models'
    assert normalize_path('/brands#top') == '/brands'
    assert normalize_path('') == '/'
    assert normalize_path(None) == '/'
    assert normalize_path('/') == '/'
    assert split_path('/') == ()


def test_segment_prefix_is_whole_segment_only():
    m = compile_pattern('/m')
    assert not is_segment_prefix(m, split_path('/models'))
    assert is_segment_prefix(m, split_path('/m/x'))
    # root never acts as a prefix
    assert not is_segment_prefix((), split_path('/anything'))


def test_resolution_order_exact_param_prefix():
    matrix = default_matrix()
    assert matrix.resolve('/brands/new').key == 'brands.create'
    assert matrix.resolve('/brands/42/edit').key == 'brands.edit'
    assert matrix.resolve('/direct-sales/edit/7').key == 'direct_sales.edit'
    assert matrix.resolve('/models/xyz').key == 'models.view'
    assert matrix.resolve('/models/1/2/3').key == 'models.view'
    assert matrix.resolve('/').key == 'dashboard'


def test_unknown_paths_resolve_to_nothing():
    matrix = default_matrix()
    assert matrix.resolve('/unknown') is None
    assert matrix.resolve('/modelsx') is None
    # '/direct-sales' itself is not registered, only its children
    assert matrix.resolve('/direct-sales') is None


def test_defaults_per_role():
    matrix = default_matrix()
    assert matrix.is_allowed_by_default('/brands/new', ROLE_REGISTRAR)
    assert not matrix.is_allowed_by_default('/brands/new', ROLE_USER)
    assert not matrix.is_allowed_by_default('/settings', ROLE_REGISTRAR)
    assert matrix.is_allowed_by_default('/admin/permissions', ROLE_USER)
    assert matrix.is_allowed_by_default('/settings', ROLE_ADMIN)
    assert not matrix.is_allowed_by_default('/brands', None)


def test_accessible_resources_follow_table_order():
    matrix = default_matrix()
    user_paths = [r['path'] for r in matrix.accessible_resources(ROLE_USER)]
    assert user_paths[0] == '/'
    assert '/brands/new' not in user_paths
    assert '/admin/permissions' in user_paths
    assert len(matrix.accessible_resources(ROLE_ADMIN)) == len(ROUTE_PERMISSIONS)


def test_duplicate_descriptions_collapse_in_functionalities():
    table = [
        {'key': 'a', 'path': '/a', 'roles': [ROLE_USER], 'description': 'Same'},
        {'key': 'b', 'path': '/b', 'roles': [ROLE_USER], 'description': 'Same'},
        {'key': 'c', 'path': '/c', 'roles': [ROLE_USER], 'description': 'Other'},
    ]
    matrix = PermissionMatrix(table)
    assert [r.key for r in matrix.functionalities()] == ['a', 'c']
    # each rule still has its own key for overrides
    assert matrix.normalize_grants({'b': False}) == {'b': False}


def test_normalize_grants_accepts_descriptions_and_prefers_keys():
    table = [
        {'key': 'a', 'path': '/a', 'roles': [ROLE_USER], 'description': 'Same'},
        {'key': 'b', 'path': '/b', 'roles': [ROLE_USER], 'description': 'Same'},
    ]
    matrix = PermissionMatrix(table)
    assert matrix.normalize_grants({'Same': False}) == {'a': False, 'b': False}
    assert matrix.normalize_grants({'Same': False, 'a': True}) == {'a': True, 'b': False}


@pytest.mark.parametrize('payload', [{'nope': True}, {'dashboard': 'yes'}, ['dashboard']])
def test_normalize_grants_rejects_bad_payloads(payload):
    with pytest.raises(ValidationError):
        default_matrix().normalize_grants(payload)


@pytest.mark.parametrize('table', [
    [{'key': 'x', 'path': '/x', 'roles': ['Gerente']}],
    [{'key': 'x', 'path': '/x', 'roles': []}, {'key': 'x', 'path': '/y', 'roles': []}],
    [{'path': '/x', 'roles': []}],
    [{'key': 'x', 'path': '/x/', 'roles': []}],
    [{'key': 'x', 'path': '/x', 'roles': [], 'category': 'Nope'}],
])
def test_malformed_table_fails_at_compile(table):
    with pytest.raises(MatrixDefinitionError):
        PermissionMatrix(table)
