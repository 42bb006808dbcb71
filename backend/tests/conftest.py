import os, sys, pytest
# Ensure backend directory is on path so 'atelier' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from atelier import create_app, get_db
from atelier.models.base import Base
# Import all model modules to ensure tables are registered before create_all
import atelier.models.user  # noqa: F401
import atelier.models.catalog  # noqa: F401
import atelier.models.reception  # noqa: F401
import atelier.models.audit  # noqa: F401

TEST_CONFIG = {
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    'JWT_SECRET_KEY': 'test-secret-key-0123456789-abcdefghijklmnop',
    'LOG_LEVEL': 'WARNING',
    'TESTING': True,
}

@pytest.fixture(scope='session', autouse=True)
def app_instance():
    app = create_app(TEST_CONFIG)
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app

@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()

@pytest.fixture()
def clean_receptions(app_instance):
    from tests.test_utils_seed import clear_receptions
    clear_receptions()
    yield
