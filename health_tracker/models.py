"""
Database models for the Health Tracker.

Users own weight entries; each ``WeightEntry`` belongs to exactly one
``User``. Users carry a single role, either an ordinary user or an
administrator. Administrators may act on entries of any user.

``WeightSearchDocument`` is the search-index projection of a weight
entry. It is mapped to the ``search`` bind and is written separately
from the primary tables, so the two may briefly disagree.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import List, Optional

from dateutil.parser import parse as parse_date  # type: ignore
from sqlalchemy.orm import validates
from werkzeug.security import generate_password_hash, check_password_hash

from .db import db


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc(value: datetime | str | None) -> Optional[datetime]:
    """Normalise ``value`` to a naive UTC datetime.

    Strings are parsed as ISO 8601. Aware values are converted to UTC;
    naive values are assumed to be UTC already.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = parse_date(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Role(enum.Enum):
    """Enumeration of user roles."""
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"


class User(db.Model):
    __allow_unmapped__ = True
    """A user of the system.

    Users are identified by their ``login``. Passwords are stored as
    salted hashes.
    """
    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    login: str = db.Column(db.String(50), unique=True, nullable=False)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    first_name: Optional[str] = db.Column(db.String(50))
    last_name: Optional[str] = db.Column(db.String(50))
    password_hash: str = db.Column(db.String(256), nullable=False)
    role: Role = db.Column(db.Enum(Role), default=Role.USER, nullable=False)

    weight_entries: List[WeightEntry] = db.relationship(
        "WeightEntry", back_populates="user", cascade="all, delete-orphan"
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def __repr__(self) -> str:
        return f"<User {self.login} ({self.role.value})>"


class WeightEntry(db.Model):
    __allow_unmapped__ = True
    """A single weigh-in: a weight in kilograms at a UTC timestamp."""
    __tablename__ = "weight_entries"

    id: int = db.Column(db.Integer, primary_key=True)
    timestamp: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    weight: float = db.Column(db.Float, nullable=False)
    user_id: int = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    user: User = db.relationship("User", back_populates="weight_entries")

    @validates("timestamp")
    def _normalise_timestamp(self, key: str, value):
        return to_utc(value)

    @property
    def user_login(self) -> Optional[str]:
        return self.user.login if self.user is not None else None

    def __repr__(self) -> str:
        return f"<WeightEntry {self.id} user={self.user_id} {self.weight}kg @ {self.timestamp}>"


class WeightSearchDocument(db.Model):
    __allow_unmapped__ = True
    """Denormalised, search-optimised copy of a ``WeightEntry``.

    ``content`` is the lower-cased free-text body that plain query terms
    are matched against; ``timestamp_text`` is the lower-cased ISO
    timestamp used for prefix matches.
    """
    __bind_key__ = "search"
    __tablename__ = "weight_search_documents"

    id: int = db.Column(db.Integer, primary_key=True, autoincrement=False)
    timestamp: datetime = db.Column(db.DateTime, nullable=False, index=True)
    timestamp_text: str = db.Column(db.String(32), nullable=False, index=True)
    weight: float = db.Column(db.Float, nullable=False)
    user_id: Optional[int] = db.Column(db.Integer)
    user_login: Optional[str] = db.Column(db.String(50), index=True)
    content: str = db.Column(db.Text, nullable=False, default="")

    @classmethod
    def from_entry(cls, entry: WeightEntry) -> "WeightSearchDocument":
        document = cls(
            id=entry.id,
            timestamp=entry.timestamp,
            timestamp_text=entry.timestamp.isoformat().lower(),
            weight=entry.weight,
            user_id=entry.user_id,
            user_login=entry.user_login,
        )
        document.content = " ".join(
            str(part)
            for part in (entry.id, entry.timestamp.isoformat(), entry.weight, entry.user_login)
            if part is not None
        ).lower()
        return document

    def __repr__(self) -> str:
        return f"<WeightSearchDocument {self.id} {self.content!r}>"
