from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from finance_assistant.api.assistant import get_relay
from finance_assistant.config import Settings
from finance_assistant.errors import AssistantError
from finance_assistant.main import create_app
from finance_assistant.models.orm import Budget, Expense


class FakeRelay:
    """Stands in for the Gemini relay and records what it was asked."""

    def __init__(self, reply="Here is your answer.", error: AssistantError = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def converse(self, system_prompt, prior_turns, new_message):
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(prior_turns), "message": new_message}
        )
        if self.error is not None:
            raise self.error
        return self.reply


def make_expense(title="Lunch", amount="10.00", category="Food", on=None, user_id=1):
    return Expense(
        user_id=user_id,
        title=title,
        amount=Decimal(amount),
        category=category,
        date=on or date(2024, 3, 15),
    )


def make_budget(category="Food", amount="100.00", month=3, year=2024, user_id=1):
    return Budget(user_id=user_id, category=category, amount=Decimal(amount), month=month, year=year)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        gemini_api_key=None,
    )


@pytest.fixture
def fake_relay():
    return FakeRelay()


@pytest.fixture
def app(settings, fake_relay):
    app = create_app(settings)
    app.dependency_overrides[get_relay] = lambda: fake_relay
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def signup(client, email="alice@example.com", password="secret123", name="Alice"):
    resp = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_headers(client):
    token = signup(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(client):
    token = signup(client, email="bob@example.com", name="Bob")["token"]
    return {"Authorization": f"Bearer {token}"}


def create_expense(client, headers, **overrides):
    body = {
        "title": "Groceries",
        "amount": 42.5,
        "category": "Food",
        "date": "2024-03-02",
        "description": "weekly shop",
    }
    body.update(overrides)
    resp = client.post("/api/expenses", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
