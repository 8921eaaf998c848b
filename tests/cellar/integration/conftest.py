"""TestClient wired with every cellar router and the error envelope."""

import pytest
from cellar.api import ROUTERS
from cellar.api.errors import register_error_handlers
from fastapi import FastAPI
from fastapi.testclient import TestClient

CUSTOMER = {"X-User-Id": "user-001"}
ADMIN = {"X-User-Id": "admin-001", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def customer():
    return dict(CUSTOMER)


@pytest.fixture()
def admin():
    return dict(ADMIN)
