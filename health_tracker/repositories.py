"""Data access for users and weight entries.

Repositories wrap the SQLAlchemy session so the service layer never
builds queries itself. Writes commit immediately: each repository write
is its own transaction against the primary database.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from sqlalchemy import func, inspect, select

from .db import db
from .models import User, WeightEntry

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and a page size."""

    page: int = 1
    size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValueError(f"size must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass
class Page(Generic[T]):
    """One page of results together with the overall total."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    size: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def pages(self) -> int:
        return -(-self.total // self.size) if self.total else 0


def paginate(statement, page_request: PageRequest) -> Page:
    """Run ``statement`` for one page and count all of its rows.

    The count is routed by the mapper of the selected entity so it runs
    against the right bind.
    """
    mapper = inspect(statement.column_descriptions[0]["entity"])
    total = db.session.execute(
        select(func.count()).select_from(statement.order_by(None).subquery()),
        bind_arguments={"mapper": mapper},
    ).scalar_one()
    items = db.session.execute(
        statement.limit(page_request.size).offset(page_request.offset)
    ).scalars().all()
    return Page(items=list(items), page=page_request.page, size=page_request.size, total=total)


class UserRepository:
    """Lookup of users by id or login."""

    def find_by_id(self, user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    def find_by_login(self, login: Optional[str]) -> Optional[User]:
        if not login:
            return None
        return db.session.execute(
            select(User).where(func.lower(User.login) == login.lower())
        ).scalar_one_or_none()

    def save(self, user: User) -> User:
        db.session.add(user)
        db.session.commit()
        return user


class WeightRepository:
    """Primary store for weight entries."""

    @staticmethod
    def _newest_first(statement):
        return statement.order_by(WeightEntry.timestamp.desc(), WeightEntry.id.desc())

    def save(self, entry: WeightEntry) -> WeightEntry:
        """Insert ``entry``, or update the stored row when it has an id."""
        if entry.id is None:
            db.session.add(entry)
        else:
            entry = db.session.merge(entry)
        db.session.commit()
        return entry

    def find_by_id(self, entry_id: int) -> Optional[WeightEntry]:
        return db.session.get(WeightEntry, entry_id)

    def delete_by_id(self, entry_id: int) -> None:
        entry = db.session.get(WeightEntry, entry_id)
        if entry is None:
            return
        db.session.delete(entry)
        db.session.commit()

    def find_all(self) -> List[WeightEntry]:
        return list(db.session.execute(select(WeightEntry).order_by(WeightEntry.id)).scalars())

    def find_all_order_by_timestamp_desc(self, page_request: PageRequest) -> Page[WeightEntry]:
        return paginate(self._newest_first(select(WeightEntry)), page_request)

    def find_by_owner_order_by_timestamp_desc(
        self, login: Optional[str], page_request: PageRequest
    ) -> Page[WeightEntry]:
        statement = select(WeightEntry).join(WeightEntry.user).where(User.login == login)
        return paginate(self._newest_first(statement), page_request)

    def find_all_by_timestamp_between_and_owner(
        self, start: datetime, end: datetime, login: Optional[str]
    ) -> List[WeightEntry]:
        statement = (
            select(WeightEntry)
            .join(WeightEntry.user)
            .where(WeightEntry.timestamp.between(start, end), User.login == login)
        )
        return list(db.session.execute(self._newest_first(statement)).scalars())
