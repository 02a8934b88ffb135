"""Seed script for initial data.

Running this script populates the database with a demo administrator,
a demo user and a couple of weeks of weigh-ins for the user, and writes
those entries to the search index. Run it with
``python -m seed.seed`` from the repository root.
"""
from __future__ import annotations

from datetime import timedelta

from health_tracker import create_app, db
from health_tracker.models import Role, User, WeightEntry, utcnow
from health_tracker.repositories import UserRepository, WeightRepository
from health_tracker.search import WeightSearchRepository
from health_tracker.security import StaticAuthorizationContext
from health_tracker.services import WeightService


def run_seeds() -> None:
    """Insert demo users and weight entries into the database."""
    app = create_app()
    with app.app_context():
        db.create_all()
        admin = User(login="admin", email="admin@example.com", first_name="Admin", role=Role.ADMIN)
        admin.set_password("admin")
        user = User(login="user", email="user@example.com", first_name="Demo", role=Role.USER)
        user.set_password("user")
        db.session.add_all([admin, user])
        db.session.commit()

        service = WeightService(
            WeightRepository(),
            WeightSearchRepository(),
            UserRepository(),
            StaticAuthorizationContext("user", (Role.USER,)),
        )
        now = utcnow()
        for day in range(14):
            service.save(WeightEntry(timestamp=now - timedelta(days=day), weight=round(82.0 - day * 0.15, 1)))
        print("Seed data inserted successfully.")


if __name__ == "__main__":
    run_seeds()
