from backoffice.constants.permissions import ROLE_ADMIN, ROLE_USER
from test_utils_seed import auth_headers, seed_priced_version


def test_quote_with_color_and_optional(client):
    ids = seed_priced_version('q1')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    resp = client.post('/configurator/quote', json={
        'version_id': ids['version_id'],
        'color_id': ids['color_id'],
        'optional_ids': [ids['optional_id']],
        'discount_amount': 5000,
        'quantity': 2,
    }, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['subtotal'] == '108440.00'
    assert body['with_discount'] == '103440.00'
    assert body['final_price'] == '206880.00'
    assert body['quantity'] == 2
    assert body['state'] == 'PRICED'
    assert body['display']['final_price'] == 'R$ 206.880,00'
    assert body['tiers']['pcd_ipi_icms'] == '93271.20'


def test_quote_uses_version_color_price(client):
    ids = seed_priced_version('q2', color_override='2000.00')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    body = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'color_id': ids['color_id']}, headers=headers).get_json()
    assert body['color_price'] == '2000.00'
    assert body['subtotal'] == '107990.00'
    assert body['state'] == 'COLOR_SELECTED'


def test_quote_is_lenient_until_submit(client):
    ids = seed_priced_version('q3')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    payload = {'version_id': ids['version_id'], 'quantity': 0, 'discount_percent': 'abc'}
    preview = client.post('/configurator/quote', json=payload, headers=headers)
    assert preview.status_code == 200
    assert preview.get_json()['quantity'] == 1
    assert preview.get_json()['final_price'] == '105990.00'
    submitted = client.post('/configurator/quote', json={**payload, 'submit': True}, headers=headers)
    assert submitted.status_code == 400


def test_quote_errors(client):
    ids = seed_priced_version('q4')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    assert client.post('/configurator/quote', json={}, headers=headers).status_code == 400
    assert client.post('/configurator/quote', json={'version_id': 'x'}, headers=headers).status_code == 400
    assert client.post('/configurator/quote', json={'version_id': 999999}, headers=headers).status_code == 404
    not_offered = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'optional_ids': [999999]}, headers=headers)
    assert not_offered.status_code == 404
    bad_list = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'optional_ids': 3}, headers=headers)
    assert bad_list.status_code == 400


def test_quote_out_of_range_numbers_still_render(client):
    ids = seed_priced_version('q7')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    for extra in ({'discount_percent': '1e30'}, {'discount_amount': '1e30'}, {'markup_amount': '1E+999999', 'quantity': 10}):
        resp = client.post('/configurator/quote', json={'version_id': ids['version_id'], **extra}, headers=headers)
        assert resp.status_code == 200, (extra, resp.get_json())
        assert resp.get_json()['discount_amount'] in ('0', '0.00')
    body = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'discount_percent': '1e30'}, headers=headers).get_json()
    assert body['final_price'] == '105990.00'


def test_quote_ids_must_be_whole_numbers(client):
    ids = seed_priced_version('q8')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    for bad in (1.9, f"{ids['version_id']}abc", True):
        resp = client.post('/configurator/quote', json={'version_id': bad}, headers=headers)
        assert resp.status_code == 400, bad
    bad_optional = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'optional_ids': [f"{ids['optional_id']}x"]}, headers=headers)
    assert bad_optional.status_code == 400
    bad_color = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'color_id': 2.5}, headers=headers)
    assert bad_color.status_code == 400
    as_text = client.post('/configurator/quote', json={'version_id': str(ids['version_id'])}, headers=headers)
    assert as_text.status_code == 200


def test_submit_rejects_fractional_quantity(client):
    ids = seed_priced_version('q9')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    for qty in (2.5, '2.9', '3abc'):
        resp = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'quantity': qty, 'submit': True}, headers=headers)
        assert resp.status_code == 400, qty
    ok = client.post('/configurator/quote', json={'version_id': ids['version_id'], 'quantity': 2, 'submit': True}, headers=headers)
    assert ok.status_code == 200
    assert ok.get_json()['quantity'] == 2


def test_configurator_respects_overrides(client):
    ids = seed_priced_version('q5')
    admin = auth_headers(client, 'cfg_admin', ROLE_ADMIN)
    user = auth_headers(client, 'cfg_user', ROLE_USER)
    client.post('/permissions', json={'role': ROLE_USER, 'permissions': {'configurator': False}}, headers=admin)
    resp = client.post('/configurator/quote', json={'version_id': ids['version_id']}, headers=user)
    assert resp.status_code == 403
    assert client.get(f"/configurator/versions/{ids['version_id']}", headers=admin).status_code == 200


def test_version_prices(client):
    ids = seed_priced_version('q6')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    body = client.get(f"/configurator/versions/{ids['version_id']}", headers=headers).get_json()
    assert body['public_price'] == '105990.00'
    assert body['tiers'] == {
        'pcd_ipi_icms': '93271.20',
        'pcd_ipi': '101750.40',
        'taxi_ipi_icms': '90091.50',
        'taxi_ipi': '101750.40',
    }


def test_catalog_listings(client):
    ids = seed_priced_version('c1', color_override='1800.00')
    headers = auth_headers(client, 'cfg_user', ROLE_USER)
    versions = client.get(f"/catalog/versions?model_id={ids['model_id']}", headers=headers).get_json()
    assert versions['pagination']['total'] == 1
    assert versions['data'][0]['id'] == ids['version_id']
    colors = client.get(f"/catalog/versions/{ids['version_id']}/colors", headers=headers).get_json()['data']
    assert colors == [{'id': ids['color_id'], 'name': 'Color c1', 'additional_price': '1800.00'}]
    optionals = client.get(f"/catalog/versions/{ids['version_id']}/optionals", headers=headers).get_json()['data']
    assert optionals[0]['price'] == '800.00'
    assert client.get('/catalog/versions?model_id=abc', headers=headers).status_code == 400
    assert client.get('/catalog/versions/999999/colors', headers=headers).status_code == 404
