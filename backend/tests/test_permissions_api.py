from backoffice import get_db
from backoffice.constants.permissions import ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER, ALL_ROLES
from backoffice.models.audit import AuditLog
from test_utils_seed import auth_headers


def test_permission_page_readable_by_everyone(client):
    headers = auth_headers(client, 'perm_reader', ROLE_USER)
    resp = client.get('/permissions', headers=headers)
    assert resp.status_code == 200
    assert resp.get_json() == {}


def test_only_admin_can_save(client):
    headers = auth_headers(client, 'perm_registrar', ROLE_REGISTRAR)
    resp = client.post('/permissions', json={'role': ROLE_USER, 'permissions': {'settings': True}}, headers=headers)
    assert resp.status_code == 403
    assert resp.get_json()['error']['title'] == 'Forbidden'


def test_save_applies_immediately_and_is_audited(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    registrar = auth_headers(client, 'perm_registrar2', ROLE_REGISTRAR)
    before = client.post('/access/check', json={'path': '/settings'}, headers=registrar)
    assert before.get_json()['allowed'] is False

    resp = client.post('/permissions', json={'role': ROLE_REGISTRAR, 'permissions': {'settings': True}}, headers=admin)
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json() == {'role': ROLE_REGISTRAR, 'permissions': {'settings': True}}

    after = client.post('/access/check', json={'path': '/settings'}, headers=registrar)
    assert after.get_json()['allowed'] is True
    assert client.get('/permissions', headers=admin).get_json() == {ROLE_REGISTRAR: {'settings': True}}

    log = get_db().query(AuditLog).filter_by(action='PERMISSIONS.SAVE').order_by(AuditLog.id.desc()).first()
    assert log is not None
    assert log.entity_id == ROLE_REGISTRAR
    assert log.actor_role == ROLE_ADMIN
    assert log.meta == {'count': 1}


def test_admin_role_cannot_be_customized(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    resp = client.post('/permissions', json={'role': ROLE_ADMIN, 'permissions': {'settings': False}}, headers=admin)
    assert resp.status_code == 403
    resp = client.delete(f'/permissions/{ROLE_ADMIN}', headers=admin)
    assert resp.status_code == 403
    # admin still reaches everything
    check = client.post('/access/check', json={'path': '/settings'}, headers=admin)
    assert check.get_json()['allowed'] is True


def test_save_validation(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    cases = [
        {'permissions': {'settings': True}},
        {'role': ROLE_USER},
        {'role': 'Gerente', 'permissions': {'settings': True}},
        {'role': ROLE_USER, 'permissions': {'settings': 'yes'}},
        {'role': ROLE_USER, 'permissions': {'unknown.rule': True}},
        {'role': ROLE_USER, 'permissions': ['settings']},
    ]
    for body in cases:
        resp = client.post('/permissions', json=body, headers=admin)
        assert resp.status_code == 400, body
        assert resp.get_json()['error']['status'] == 400
    assert client.get('/permissions', headers=admin).get_json() == {}


def test_reset_to_default_twice(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    client.post('/permissions', json={'role': ROLE_REGISTRAR, 'permissions': {'settings': True}}, headers=admin)
    first = client.delete(f'/permissions/{ROLE_REGISTRAR}', headers=admin)
    assert first.status_code == 200
    assert first.get_json() == {'role': ROLE_REGISTRAR, 'removed': True}
    second = client.delete(f'/permissions/{ROLE_REGISTRAR}', headers=admin)
    assert second.get_json() == {'role': ROLE_REGISTRAR, 'removed': False}
    assert client.get('/permissions', headers=admin).get_json() == {}


def test_matrix_view_shows_defaults_and_effective(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    client.post('/permissions', json={'role': ROLE_USER, 'permissions': {'configurator': False}}, headers=admin)
    body = client.get('/permissions/matrix', headers=admin).get_json()
    assert body['roles'] == [ROLE_REGISTRAR, ROLE_USER]
    assert body['customized'] == [ROLE_USER]
    rows = {r['key']: r for r in body['data']}
    assert rows['configurator']['defaults'][ROLE_USER] is True
    assert rows['configurator']['effective'][ROLE_USER] is False
    assert rows['brands.create']['defaults'] == {ROLE_REGISTRAR: True, ROLE_USER: False}


def test_report_lists_every_role(client):
    headers = auth_headers(client, 'perm_reader', ROLE_USER)
    body = client.get('/permissions/report', headers=headers).get_json()
    assert set(body.keys()) == set(ALL_ROLES)
    admin_paths = [r['path'] for r in body[ROLE_ADMIN]]
    assert '/settings' in admin_paths
    assert '/settings' not in [r['path'] for r in body[ROLE_USER]]


def test_customizing_away_the_permission_page(client):
    admin = auth_headers(client, 'perm_admin', ROLE_ADMIN)
    user = auth_headers(client, 'perm_reader', ROLE_USER)
    client.post('/permissions', json={'role': ROLE_USER, 'permissions': {'admin.permissions': False}}, headers=admin)
    assert client.get('/permissions', headers=user).status_code == 403
    assert client.get('/permissions', headers=admin).status_code == 200


def test_requires_token(client):
    assert client.get('/permissions').status_code == 401
    assert client.post('/permissions', json={}).status_code == 401
