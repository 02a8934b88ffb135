"""Rebuild the weight entry search index.

Writes to the search index happen after, and separately from, writes to
the primary database, so the two can drift apart when an index write
fails. This script drops every search document and rebuilds the index
from the primary database. Run it with ``python -m seed.reindex``.
"""
from __future__ import annotations

from health_tracker import create_app, db
from health_tracker.models import Role
from health_tracker.repositories import UserRepository, WeightRepository
from health_tracker.search import WeightSearchRepository
from health_tracker.security import StaticAuthorizationContext
from health_tracker.services import WeightService


def run_reindex() -> int:
    """Rebuild the index and return the number of documents written."""
    app = create_app()
    with app.app_context():
        db.create_all(bind_key="search")
        service = WeightService(
            WeightRepository(),
            WeightSearchRepository(),
            UserRepository(),
            StaticAuthorizationContext(roles=(Role.ADMIN,)),
        )
        count = service.reindex()
        print(f"Reindexed {count} weight entries.")
        return count


if __name__ == "__main__":
    run_reindex()
