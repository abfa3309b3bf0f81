import pytest

from cms_backend.app import create_app
from cms_backend.di import build_container
from cms_backend.repositories.sqlalchemy_repo import SQLAlchemyRepository


@pytest.fixture
def repo():
    return SQLAlchemyRepository(write_db_url='sqlite:///:memory:')


@pytest.fixture
def container():
    return build_container(DATABASE_URL='sqlite:///:memory:', JWT_SECRET='test-secret')


@pytest.fixture
def client(container):
    app = create_app(container)
    app.config['TESTING'] = True
    return app.test_client()
