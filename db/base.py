"""
db/base.py

Declarative base for all SQLAlchemy models.
"""

from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase


def json_document_type() -> Any:
    """
    JSONB on PostgreSQL, plain JSON elsewhere.

    Python ``None`` is stored as SQL ``NULL`` rather than the JSON literal ``null``.
    """

    return JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.
    """

    type_annotation_map: dict[type, Any] = {}
