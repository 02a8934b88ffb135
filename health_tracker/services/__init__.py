"""Service layer for the Health Tracker.

This package contains business logic that sits between the Flask
route handlers and the stores. Nothing in this package performs HTTP
handling: services return model objects or simple data structures and
raise exceptions defined in ``health_tracker.errors`` when something
goes wrong.
"""

from .weight_service import (
    AllEntries,
    ListingScope,
    OwnedEntries,
    WeightByPeriod,
    WeightService,
    listing_scope_for,
)

__all__ = [
    "AllEntries",
    "ListingScope",
    "OwnedEntries",
    "WeightByPeriod",
    "WeightService",
    "listing_scope_for",
]
