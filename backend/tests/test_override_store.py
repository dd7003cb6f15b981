import pytest
from backoffice import get_db
from backoffice.constants.permissions import ROLE_ADMIN, ROLE_REGISTRAR, ROLE_USER
from backoffice.errors import AuthorizationError, ValidationError
from backoffice.models.permission_override import PermissionOverride
from backoffice.services.access import AccessResolver
from backoffice.services.override_store import PermissionOverrideStore, CachedOverrides


def _store():
    return PermissionOverrideStore(get_db)


def test_get_absent_until_saved():
    store = _store()
    assert store.get(ROLE_REGISTRAR) is None
    saved = store.save(ROLE_REGISTRAR, {'settings': True})
    assert saved == {'settings': True}
    assert store.get(ROLE_REGISTRAR) == {'settings': True}
    assert store.all() == {ROLE_REGISTRAR: {'settings': True}}


def test_save_replaces_whole_map():
    store = _store()
    store.save(ROLE_USER, {'settings': True, 'brands.view': False})
    store.save(ROLE_USER, {'configurator': False}, actor_id=7)
    assert store.get(ROLE_USER) == {'configurator': False}
    rows = get_db().query(PermissionOverride).filter_by(role_name=ROLE_USER).all()
    assert len(rows) == 1
    assert rows[0].updated_by == 7


def test_save_accepts_descriptions():
    store = _store()
    saved = store.save(ROLE_USER, {'Configurações do sistema': True})
    assert saved == {'settings': True}


def test_admin_override_rejected():
    store = _store()
    with pytest.raises(AuthorizationError):
        store.save(ROLE_ADMIN, {'settings': False})
    with pytest.raises(AuthorizationError):
        store.reset_to_default(ROLE_ADMIN)
    assert store.get(ROLE_ADMIN) is None


@pytest.mark.parametrize('role,payload', [
    ('Gerente', {'settings': True}),
    (ROLE_USER, {'settings': 'true'}),
    (ROLE_USER, {'not.a.rule': True}),
])
def test_invalid_saves_leave_store_untouched(role, payload):
    store = _store()
    store.save(ROLE_USER, {'settings': True})
    with pytest.raises(ValidationError):
        store.save(role, payload)
    assert store.get(ROLE_USER) == {'settings': True}


def test_reset_to_default_is_idempotent():
    store = _store()
    store.save(ROLE_REGISTRAR, {'settings': True})
    assert store.reset_to_default(ROLE_REGISTRAR) is True
    assert store.get(ROLE_REGISTRAR) is None
    assert store.reset_to_default(ROLE_REGISTRAR) is False
    assert store.get(ROLE_REGISTRAR) is None


def test_resolver_reads_persisted_overrides():
    store = _store()
    resolver = AccessResolver(overrides=store)
    assert not resolver.can_access('/settings', ROLE_REGISTRAR)
    store.save(ROLE_REGISTRAR, {'settings': True})
    assert resolver.can_access('/settings', ROLE_REGISTRAR)
    store.reset_to_default(ROLE_REGISTRAR)
    assert not resolver.can_access('/settings', ROLE_REGISTRAR)


class CountingStore:
    def __init__(self):
        self.data = {}
        self.reads = 0

    def get(self, role):
        self.reads += 1
        return self.data.get(role)

    def all(self):
        return dict(self.data)

    def save(self, role, permissions, actor_id=None):
        self.data[role] = dict(permissions)
        return self.data[role]

    def reset_to_default(self, role):
        return self.data.pop(role, None) is not None


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_cache_serves_within_ttl_and_refreshes_after():
    backing, clock = CountingStore(), FakeClock()
    cache = CachedOverrides(backing, ttl=30, clock=clock)
    assert cache.get(ROLE_USER) is None
    backing.data[ROLE_USER] = {'settings': True}  # written behind the cache's back
    clock.now = 29
    assert cache.get(ROLE_USER) is None
    assert backing.reads == 1
    clock.now = 31
    assert cache.get(ROLE_USER) == {'settings': True}
    assert backing.reads == 2


def test_cache_invalidated_by_writes():
    backing, clock = CountingStore(), FakeClock()
    cache = CachedOverrides(backing, ttl=30, clock=clock)
    cache.get(ROLE_USER)
    cache.save(ROLE_USER, {'settings': True})
    assert cache.get(ROLE_USER) == {'settings': True}
    assert cache.reset_to_default(ROLE_USER) is True
    assert cache.get(ROLE_USER) is None


def test_cache_invalidated_even_when_write_fails():
    store = _store()
    cache = CachedOverrides(store, ttl=300)
    store.save(ROLE_USER, {'settings': True})
    cache.get(ROLE_USER)
    with pytest.raises(ValidationError):
        cache.save(ROLE_USER, {'settings': 1})
    assert cache._entries == {}


def test_zero_ttl_disables_cache():
    backing = CountingStore()
    cache = CachedOverrides(backing, ttl=0)
    cache.get(ROLE_USER); cache.get(ROLE_USER)
    assert backing.reads == 2
