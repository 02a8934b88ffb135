"""Shared pytest fixtures.

Every test gets a fresh app backed by in-memory SQLite databases, one
for the primary tables and one for the search index, plus three users:
``alice`` and ``bob`` (ordinary users) and ``admin``.
"""
from __future__ import annotations

from datetime import datetime

import pytest

from health_tracker import create_app, db
from health_tracker.models import Role, User, WeightEntry
from health_tracker.repositories import UserRepository, WeightRepository
from health_tracker.search import WeightSearchRepository
from health_tracker.security import StaticAuthorizationContext
from health_tracker.services import WeightService

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "SQLALCHEMY_BINDS": {"search": "sqlite://"},
    "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(login: str, role: Role) -> User:
    user = User(login=login, email=f"{login}@example.com", role=role)
    user.set_password("secret")
    db.session.add(user)
    return user


@pytest.fixture
def users(app) -> dict[str, User]:
    created = {
        "alice": _make_user("alice", Role.USER),
        "bob": _make_user("bob", Role.USER),
        "admin": _make_user("admin", Role.ADMIN),
    }
    db.session.commit()
    return created


@pytest.fixture
def make_service(app):
    """Build a ``WeightService`` acting as the given caller."""

    def _make(login: str | None, admin: bool = False, clock=None) -> WeightService:
        roles = (Role.ADMIN,) if admin else (Role.USER,) if login else ()
        kwargs = {"clock": clock} if clock else {}
        return WeightService(
            WeightRepository(),
            WeightSearchRepository(),
            UserRepository(),
            StaticAuthorizationContext(login, roles),
            **kwargs,
        )

    return _make


@pytest.fixture
def add_entry(users, make_service):
    """Save an entry owned by ``owner`` through the admin service."""
    admin_service = make_service("admin", admin=True)

    def _add(owner: str, weight: float, timestamp: datetime) -> WeightEntry:
        return admin_service.save(
            WeightEntry(user_id=users[owner].id, weight=weight, timestamp=timestamp)
        )

    return _add
