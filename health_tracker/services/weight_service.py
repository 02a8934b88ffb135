"""Weight entry service.

``WeightService`` sits between the HTTP routes and the two stores that
hold weight entries: the relational repository, which is authoritative,
and the search index, which is a derived copy kept in sync by writing
to it after every relational commit.

The index write is not part of the relational transaction. When it
fails the relational change stays committed, the failure is logged and
the exception propagates to the caller. ``reindex`` rebuilds the index
from the relational store and is the way to repair any drift.

Which entries a caller may list is decided by a ``ListingScope`` picked
from the caller's roles, so the query choice can be tested on its own.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..errors import AuthenticationRequiredError, NotFoundError, ValidationError
from ..models import Role, User, WeightEntry, WeightSearchDocument, utcnow
from ..repositories import Page, PageRequest, UserRepository, WeightRepository
from ..search import WeightSearchRepository
from ..security import AuthorizationContext

logger = logging.getLogger(__name__)


@dataclass
class WeightByPeriod:
    """Entries of one caller within a labelled period."""

    period: str
    entries: List[WeightEntry] = field(default_factory=list)


class ListingScope:
    """Selects which entries a listing query returns."""

    def fetch(self, repository: WeightRepository, page_request: PageRequest) -> Page[WeightEntry]:
        raise NotImplementedError


class AllEntries(ListingScope):
    """Every entry in the system, newest first."""

    def fetch(self, repository, page_request):
        return repository.find_all_order_by_timestamp_desc(page_request)

    def __repr__(self) -> str:
        return "AllEntries()"


class OwnedEntries(ListingScope):
    """Only the entries owned by ``login``, newest first."""

    def __init__(self, login: Optional[str]) -> None:
        self.login = login

    def fetch(self, repository, page_request):
        return repository.find_by_owner_order_by_timestamp_desc(self.login, page_request)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, OwnedEntries) and other.login == self.login

    def __repr__(self) -> str:
        return f"OwnedEntries({self.login!r})"


def listing_scope_for(auth: AuthorizationContext) -> ListingScope:
    """Administrators list everything; everyone else lists their own entries."""
    if auth.current_user_has_role(Role.ADMIN):
        return AllEntries()
    return OwnedEntries(auth.current_user_login())


class WeightService:
    """Create, read, search and delete weight entries on behalf of a caller."""

    def __init__(
        self,
        weight_repository: WeightRepository,
        search_repository: WeightSearchRepository,
        user_repository: UserRepository,
        auth: AuthorizationContext,
        clock: Callable = utcnow,
    ) -> None:
        self.weight_repository = weight_repository
        self.search_repository = search_repository
        self.user_repository = user_repository
        self.auth = auth
        self.clock = clock

    def _current_user(self) -> User:
        login = self.auth.current_user_login()
        if login is None:
            raise AuthenticationRequiredError("No authenticated user for this request.")
        user = self.user_repository.find_by_login(login)
        if user is None:
            raise NotFoundError(f"User '{login}' not found.")
        return user

    def save(self, entry: WeightEntry) -> WeightEntry:
        """Save a weight entry and mirror it into the search index.

        Callers without the admin role always become the owner of the
        entry, whatever owner was supplied. Admins keep the supplied
        owner, or own the entry themselves when none was given. A supplied
        owner that does not exist raises ``NotFoundError``.

        Parameters
        ----------
        entry: WeightEntry
            The entry to insert (no ``id``) or update (with ``id``).

        Returns
        -------
        WeightEntry
            The persisted entry.
        """
        logger.debug("Request to save WeightEntry : %r", entry)
        if not self.auth.current_user_has_role(Role.ADMIN):
            user = self._current_user()
            logger.debug("Assigning weight entry to current user: %s", user.login)
            entry.user_id = user.id
        elif entry.user_id is None:
            entry.user_id = self._current_user().id
        elif self.user_repository.find_by_id(entry.user_id) is None:
            raise NotFoundError(f"User {entry.user_id} not found.")

        entry = self.weight_repository.save(entry)
        try:
            self.search_repository.save(entry)
        except Exception:
            logger.exception("Weight entry %s saved but not indexed; run a reindex", entry.id)
            raise
        return entry

    def list_all(self, page_request: PageRequest) -> Page[WeightEntry]:
        logger.debug("Request to get all WeightEntries")
        return listing_scope_for(self.auth).fetch(self.weight_repository, page_request)

    def get_by_days(self, days: int) -> WeightByPeriod:
        """Return the caller's entries from the last ``days`` days, newest first."""
        if days < 0:
            raise ValidationError("days must not be negative.", {"days": ["Must be 0 or greater."]})
        now = self.clock()
        try:
            start = now - timedelta(days=days)
        except OverflowError:
            start = datetime.min
        entries = self.weight_repository.find_all_by_timestamp_between_and_owner(
            start, now, self.auth.current_user_login()
        )
        return WeightByPeriod(f"Last {days} Days", entries)

    def find_one(self, entry_id: int) -> Optional[WeightEntry]:
        logger.debug("Request to get WeightEntry : %s", entry_id)
        return self.weight_repository.find_by_id(entry_id)

    def delete(self, entry_id: int) -> None:
        logger.debug("Request to delete WeightEntry : %s", entry_id)
        self.weight_repository.delete_by_id(entry_id)
        try:
            self.search_repository.delete_by_id(entry_id)
        except Exception:
            logger.exception("Weight entry %s deleted but still indexed; run a reindex", entry_id)
            raise

    def search(self, query: str, page_request: PageRequest) -> Page[WeightSearchDocument]:
        """Search the index with ``query``.

        Results are not restricted to the caller's own entries.
        """
        logger.debug("Request to search for a page of WeightEntries for query %s", query)
        return self.search_repository.search(query, page_request)

    def reindex(self) -> int:
        """Rebuild the search index from the relational store."""
        self.search_repository.clear()
        count = 0
        for entry in self.weight_repository.find_all():
            self.search_repository.save(entry)
            count += 1
        logger.info("Reindexed %d weight entries", count)
        return count
