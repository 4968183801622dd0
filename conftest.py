import pytest

from storefront.factory import create_web_app
from storefront.tests.util import TEST_CONFIG


@pytest.fixture()
def app():
    return create_web_app(TEST_CONFIG)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def app_context(app):
    with app.app_context():
        yield app
