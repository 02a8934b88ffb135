"""
Serialization schemas using Marshmallow for the Health Tracker.

These schemas convert SQLAlchemy models to and from JSON-friendly
representations. Password hashes are never serialised.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from .db import db
from .models import User, WeightEntry, WeightSearchDocument


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``User`` objects."""

    role = fields.Function(lambda user: user.role.value, dump_only=True)

    class Meta:
        model = User
        load_instance = False
        exclude = ("password_hash",)


class RegistrationSchema(Schema):
    """Input accepted by the registration endpoint."""

    login = fields.String(required=True, validate=validate.Regexp(r"^[A-Za-z0-9_.@-]{1,50}$"))
    email = fields.Email(required=True, validate=validate.Length(max=120))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=4, max=100))
    first_name = fields.String(validate=validate.Length(max=50), load_default=None)
    last_name = fields.String(validate=validate.Length(max=50), load_default=None)


class WeightEntrySchema(SQLAlchemyAutoSchema):
    """Schema for loading and dumping ``WeightEntry`` objects.

    Loading builds a new, unattached ``WeightEntry``; the repository
    decides whether it is an insert or an update from its ``id``.
    """

    weight = auto_field(required=True, validate=validate.Range(min=0, min_inclusive=False, max=1000))
    timestamp = auto_field(required=True)
    user_id = auto_field(required=False, allow_none=True)
    user_login = fields.String(dump_only=True)

    class Meta:
        model = WeightEntry
        load_instance = True
        transient = True
        include_fk = True
        sqla_session = db.session
        unknown = EXCLUDE


class WeightSearchDocumentSchema(SQLAlchemyAutoSchema):
    """Search hits, dumped in the same shape as ``WeightEntrySchema``."""

    class Meta:
        model = WeightSearchDocument
        exclude = ("content", "timestamp_text")


class WeightByPeriodSchema(Schema):
    """Schema for a labelled list of weigh-ins."""

    period = fields.String()
    weigh_ins = fields.Nested(WeightEntrySchema, many=True, attribute="entries")
