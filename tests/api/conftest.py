import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import cart_router, order_router
from storefront.api.errors import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def as_customer():
    return {"X-Customer-Id": "cust-001"}


@pytest.fixture()
def as_other_customer():
    return {"X-Customer-Id": "cust-002"}


@pytest.fixture()
def as_admin():
    return {"X-Customer-Id": "admin-001", "X-Customer-Role": "admin"}
