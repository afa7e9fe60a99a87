"""
app/repositories/user_repository.py

Persistence layer for imported users.

The repository never commits; the caller owns the transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

from app.domain.user_document import UserDocument
from db.models.user import User


class UserRepository:
    """
    Repository for multi-row inserts into ``users``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_batch(self, documents: Sequence[UserDocument]) -> int:
        """
        Insert all documents with ONE multi-row ``INSERT ... VALUES`` statement.

        Returns the number of rows written. Raises ``SQLAlchemyError`` on failure.
        """

        if not documents:
            return 0

        payloads: list[dict[str, Any]] = [document.to_row() for document in documents]
        stmt = insert(User).values(payloads)
        self._session.execute(stmt)
        return len(payloads)

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(User)) or 0)
