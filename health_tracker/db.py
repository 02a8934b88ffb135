"""Database setup utilities.

This module exposes the shared ``db`` object used by the models and
repositories. The application factory initialises it with the Flask
app, including the ``search`` bind that holds the search index tables.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
