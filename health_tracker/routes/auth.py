"""
Authentication routes for the Health Tracker.

Provides endpoints for registering new users and logging in to obtain
JSON Web Tokens (JWTs). The token identity is the user's login and its
``roles`` claim carries the user's role; every weight entry endpoint
requires one.
"""

from __future__ import annotations

from flask import Blueprint, request

from ..errors import ConflictError
from ..models import Role, User
from ..repositories import UserRepository
from ..schemas import RegistrationSchema, UserSchema
from ..security import issue_access_token


auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new user.

    Expects JSON with ``login``, ``email``, ``password`` and optional
    ``first_name`` and ``last_name``. Logins and emails must be unique.
    New accounts always get the ordinary user role; administrators are
    created out of band (see ``seed/seed.py``).
    """
    data = RegistrationSchema().load(request.get_json() or {})
    users = UserRepository()

    login = data["login"].strip().lower()
    email = data["email"].strip().lower()
    if users.find_by_login(login):
        raise ConflictError("A user with that login already exists.")
    if User.query.filter_by(email=email).first():
        raise ConflictError("A user with that email already exists.")

    user = User(
        login=login,
        email=email,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        role=Role.USER,
    )
    user.set_password(data["password"])
    users.save(user)
    return UserSchema().dump(user), 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate a user and return a JWT.

    Expects JSON with ``login`` and ``password``. Invalid credentials
    return 401.
    """
    data = request.get_json() or {}
    user = UserRepository().find_by_login((data.get("login") or "").strip())
    if not user or not user.check_password(data.get("password") or ""):
        return {"error": "Invalid login or password."}, 401

    return {"access_token": issue_access_token(user), "user": UserSchema().dump(user)}, 200
