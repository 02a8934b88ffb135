"""
Routes for managing weight entries.

Every endpoint requires a JWT. Authorization decisions (who owns a new
entry, whose entries a listing shows) are made by ``WeightService``;
these handlers only translate between HTTP and the service.

Listings and search results are returned as JSON arrays with the total
number of matches in the ``X-Total-Count`` header.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from ..errors import NotFoundError, ValidationError
from ..repositories import DEFAULT_PAGE_SIZE, Page, PageRequest, UserRepository, WeightRepository
from ..schemas import WeightByPeriodSchema, WeightEntrySchema, WeightSearchDocumentSchema
from ..search import WeightSearchRepository
from ..security import JwtAuthorizationContext
from ..services import WeightService


weights_bp = Blueprint("weights", __name__)


def _service() -> WeightService:
    return WeightService(
        WeightRepository(),
        WeightSearchRepository(),
        UserRepository(),
        JwtAuthorizationContext(),
    )


def _page_request() -> PageRequest:
    """Read ``page`` and ``size`` query parameters."""
    try:
        return PageRequest(
            page=int(request.args.get("page", 1)),
            size=int(request.args.get("size", DEFAULT_PAGE_SIZE)),
        )
    except ValueError as exc:
        raise ValidationError(f"Invalid pagination parameters: {exc}") from exc


def _page_response(page: Page, schema) -> tuple[list, int, dict]:
    return schema.dump(page.items), 200, {"X-Total-Count": str(page.total)}


@weights_bp.route("/weights", methods=["POST"])
@jwt_required()
def create_weight() -> tuple[dict, int]:
    """Create a weight entry. A new entry cannot already have an ``id``."""
    schema = WeightEntrySchema()
    entry = schema.load(request.get_json() or {})
    if entry.id is not None:
        raise ValidationError("A new weight entry cannot already have an id.", {"id": ["Must be empty."]})
    result = _service().save(entry)
    return schema.dump(result), 201


@weights_bp.route("/weights", methods=["PUT"])
@jwt_required()
def update_weight() -> tuple[dict, int]:
    """Update an existing weight entry identified by the ``id`` in the body."""
    schema = WeightEntrySchema()
    entry = schema.load(request.get_json() or {})
    if entry.id is None:
        raise ValidationError("An id is required to update a weight entry.", {"id": ["Missing."]})
    result = _service().save(entry)
    return schema.dump(result), 200


@weights_bp.route("/weights", methods=["GET"])
@jwt_required()
def list_weights():
    """List weight entries, newest first.

    Administrators see every entry; other users see only their own.
    """
    page = _service().list_all(_page_request())
    return _page_response(page, WeightEntrySchema(many=True))


@weights_bp.route("/weight-by-days/<int:days>", methods=["GET"])
@jwt_required()
def weights_by_days(days: int) -> tuple[dict, int]:
    """Return the caller's own entries from the last ``days`` days."""
    return WeightByPeriodSchema().dump(_service().get_by_days(days)), 200


@weights_bp.route("/weights/<int:entry_id>", methods=["GET"])
@jwt_required()
def get_weight(entry_id: int) -> tuple[dict, int]:
    entry = _service().find_one(entry_id)
    if entry is None:
        raise NotFoundError(f"Weight entry {entry_id} not found.")
    return WeightEntrySchema().dump(entry), 200


@weights_bp.route("/weights/<int:entry_id>", methods=["DELETE"])
@jwt_required()
def delete_weight(entry_id: int) -> tuple[str, int]:
    _service().delete(entry_id)
    return "", 204


@weights_bp.route("/_search/weights", methods=["GET"])
@jwt_required()
def search_weights():
    """Search weight entries with a query string (``?query=...``).

    Matches are not limited to the caller's own entries.
    """
    page = _service().search(request.args.get("query", ""), _page_request())
    return _page_response(page, WeightSearchDocumentSchema(many=True))
