import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before anything imports the cellar domain.

    Logging is configured on import, so PROTEAN_ENV must be set first.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


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
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def _cellar_domain():
    """Initialize the cellar domain once per session."""
    from cellar.domain import cellar

    cellar.init()
    return cellar


@pytest.fixture(scope="session", autouse=True)
def setup_db(_cellar_domain):
    from cellar.utils.db import drop_db, setup_db

    setup_db(_cellar_domain)

    yield

    drop_db(_cellar_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_cellar_domain):
    """Push the domain context before each test; reset stores and fake adapters after."""
    from cellar.broadcast import reset_broadcaster
    from cellar.notification.channel import reset_push_channel
    from cellar.payment.gateway import reset_gateway

    ctx = _cellar_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_broadcaster()
    reset_push_channel()

    ctx.pop()
