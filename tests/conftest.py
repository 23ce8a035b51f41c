import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_configure(config):
    """Select the config overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def bookstore_bed():
    from bookstore.domain import bookstore

    bed = DomainFixture(bookstore)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(bookstore_bed):
    """Push the domain context for every test and reset all stores afterwards."""
    with bookstore_bed.domain_context():
        yield


@pytest.fixture()
def gateway():
    from bookstore.payments.fake_adapter import FakeGateway

    return FakeGateway(webhook_secret="test-webhook-secret")


@pytest.fixture()
def client(bookstore_bed, gateway):
    from fastapi.testclient import TestClient

    from bookstore.api.app import create_app

    return TestClient(create_app(bookstore_bed.domain, gateway=gateway))
