"""Shared pytest fixtures for the shopping list tests."""

import pytest

import app as app_module
from assistant import ShoppingAssistant


@pytest.fixture
def assistant():
    """A fresh controller with an empty list."""
    return ShoppingAssistant()


@pytest.fixture
def client(assistant, monkeypatch):
    """Flask test client bound to the ``assistant`` fixture."""
    monkeypatch.setattr(app_module, "assistant", assistant)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c
