import pytest

from app import create_app
from models import db


@pytest.fixture
def app(tmp_path):
    """Fresh app per test backed by a throwaway SQLite file."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'burnout-test.db'}",
        "RESET_DB_ON_START": True,
    })
    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["entry_store"]


class FixedChoice:
    """Stand-in rng that always picks the same index."""

    def __init__(self, index=0):
        self.index = index

    def choice(self, seq):
        return seq[self.index]


@pytest.fixture
def fixed_rng():
    return FixedChoice(0)
