import os, sys, pytest
# Ensure the backend directory is on path so 'backoffice' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from sqlalchemy import delete
from backoffice import create_app, get_db
from backoffice.models.authz import Base
# Import all model modules to ensure tables are registered before create_all
import backoffice.models.catalog  # noqa: F401
import backoffice.models.audit  # noqa: F401
from backoffice.models.permission_override import PermissionOverride


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'JWT_SECRET_KEY': 'test-secret-key-with-enough-length-for-hs256'})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture(autouse=True)
def clean_overrides(app_instance):
    """Overrides are global per role; every test starts and ends on the defaults."""
    yield
    session = get_db()
    session.rollback()
    session.execute(delete(PermissionOverride))
    session.commit()
    app_instance.extensions['backoffice.overrides'].invalidate()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()
