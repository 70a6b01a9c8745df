import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from main import app
from routes import get_expense_gateway
from services.expenses_service import ExpenseGateway


@pytest.fixture()
def collection():
    client = AsyncMongoMockClient()
    return client[f"expense_tracker_{uuid.uuid4().hex}"]["expenses"]


@pytest.fixture()
def gateway(collection):
    return ExpenseGateway(collection)


@pytest.fixture()
def client(gateway):
    app.dependency_overrides[get_expense_gateway] = lambda: gateway
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
