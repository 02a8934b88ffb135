"""Search index for weight entries.

The index is a table of ``WeightSearchDocument`` rows on the ``search``
bind, one per weight entry. Each write commits on its own, after and
independently of the primary store, so a failed index write leaves the
primary change in place. ``WeightService.reindex`` rebuilds the index
when the two have drifted apart.

Queries use a small query-string syntax:

* plain terms match anywhere in the document text, case-insensitively;
* ``"quoted phrases"`` count as a single term;
* ``field:value`` targets ``id``, ``weight``, ``user`` (or ``login``)
  and ``timestamp`` (prefix match on the ISO timestamp);
* ``+term`` must match and ``-term`` must not match;
* plain terms are OR-ed together unless the query contains ``AND``;
* an empty query or ``*`` matches every document.
"""
from __future__ import annotations

import logging
import re
import shlex
from typing import List, Optional

from sqlalchemy import and_, delete, false, func, not_, or_, select, true

from .db import db
from .models import WeightEntry, WeightSearchDocument
from .repositories import Page, PageRequest, paginate

logger = logging.getLogger(__name__)

FIELD_RE = re.compile(r"^(?P<field>[a-z_]+):(?P<value>.+)$", re.IGNORECASE)

# Ids are stored as signed 64-bit integers.
MIN_ID = -(2 ** 63)
MAX_ID = 2 ** 63 - 1


def _term_clause(term: str):
    """Translate a single query term into a SQL expression."""
    match = FIELD_RE.match(term)
    if match:
        name = match.group("field").lower()
        value = match.group("value")
        if name == "id":
            try:
                entry_id = int(value)
            except ValueError:
                return false()
            if not MIN_ID <= entry_id <= MAX_ID:
                return false()
            return WeightSearchDocument.id == entry_id
        if name == "weight":
            try:
                return WeightSearchDocument.weight == float(value)
            except ValueError:
                return false()
        if name in ("user", "login"):
            return func.lower(func.coalesce(WeightSearchDocument.user_login, "")) == value.lower()
        if name == "timestamp":
            return WeightSearchDocument.timestamp_text.startswith(value.lower(), autoescape=True)
    return WeightSearchDocument.content.contains(term.lower(), autoescape=True)


def build_query_clause(query: Optional[str]):
    """Return a SQL expression matching documents for ``query``."""
    query = (query or "").strip()
    if not query or query == "*":
        return true()

    try:
        tokens = shlex.split(query)
    except ValueError:
        # Unbalanced quotes: fall back to plain whitespace splitting.
        tokens = query.replace('"', " ").split()

    required: List = []
    excluded: List = []
    optional: List = []
    conjunctive = False
    for token in tokens:
        if token == "AND":
            conjunctive = True
            continue
        if token == "OR":
            continue
        if token.startswith("+") and len(token) > 1:
            required.append(_term_clause(token[1:]))
        elif token.startswith("-") and len(token) > 1:
            excluded.append(_term_clause(token[1:]))
        else:
            optional.append(_term_clause(token))

    clauses = list(required)
    clauses.extend(not_(clause) for clause in excluded)
    if optional:
        clauses.append(and_(*optional) if conjunctive else or_(*optional))
    return and_(*clauses) if clauses else true()


class WeightSearchRepository:
    """Secondary, eventually consistent store optimised for free-text queries."""

    def save(self, entry: WeightEntry) -> WeightSearchDocument:
        try:
            document = db.session.merge(WeightSearchDocument.from_entry(entry))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return document

    def delete_by_id(self, entry_id: int) -> None:
        try:
            db.session.execute(delete(WeightSearchDocument).where(WeightSearchDocument.id == entry_id))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def clear(self) -> None:
        db.session.execute(delete(WeightSearchDocument))
        db.session.commit()

    def search(self, query: Optional[str], page_request: PageRequest) -> Page[WeightSearchDocument]:
        logger.debug("Searching weight documents for %r", query)
        statement = (
            select(WeightSearchDocument)
            .where(build_query_clause(query))
            .order_by(WeightSearchDocument.timestamp.desc(), WeightSearchDocument.id.desc())
        )
        return paginate(statement, page_request)
