import os

os.environ["TESTING"] = "true"

import pytest

from lazyforms.app import create_app
from lazyforms.entries import Entry
from lazyforms.extensions import cache, db


@pytest.fixture
def app():
    """A fresh application with an in-memory database per test."""
    app = create_app({"TESTING": True})
    with app.app_context():
        cache.clear()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Provides a test client for making requests to the Flask app."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def make_entry():
    """Builds a resolver ``Entry`` from camelCase keyword arguments."""
    counter = {"n": 0}

    def _make(context_type, context_key=None, **extra):
        counter["n"] += 1
        data = {
            "id": extra.pop("id", f"e{counter['n']}"),
            "value": extra.pop("value", f"value {counter['n']}"),
            "contextType": context_type,
            "contextKey": context_key,
            "createdAt": extra.pop("createdAt", counter["n"]),
        }
        data.update(extra)
        return Entry.from_dict(data)

    return _make
