"""
db/models/user.py

User row written by the CSV importer.

The ``users`` table is provisioned outside this application; the model
only describes the columns the importer writes and aggregates.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, json_document_type


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[dict[str, Any] | None] = mapped_column(
        json_document_type(),
        nullable=True,
        comment="Nested address built from address.* columns",
    )
    additional_info: Mapped[dict[str, Any] | None] = mapped_column(
        json_document_type(),
        nullable=True,
        comment="Nested document built from all remaining columns",
    )
