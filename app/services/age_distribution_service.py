"""
app/services/age_distribution_service.py

Post-commit age distribution report over the ``users`` table.

Buckets (mutually exclusive, exhaustive over all integers)
-----------------------------------------------------------
    < 20       age < 20 (negative ages included)
    20 to 40   20 <= age <= 40
    40 to 60   40 <  age <= 60
    > 60       age > 60

Percentages are rounded half-up to whole numbers, each independently,
so the four values need not sum to exactly 100.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from sqlalchemy import ColumnElement, case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.user_document import AgeBucket, AgeDistributionReport
from app.errors import ReportingError
from db.models.user import User

logger = logging.getLogger(__name__)

BUCKET_LABELS: Final[tuple[str, str, str, str]] = (
    "< 20",
    "20 to 40",
    "40 to 60",
    "> 60",
)


def to_percentage(count: int, total: int) -> int:
    """
    ``count / total`` as a whole percentage, rounding halves away from zero.
    """

    if total <= 0:
        return 0
    ratio = Decimal(count) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_report(total: int, counts: tuple[int, int, int, int]) -> AgeDistributionReport:
    """
    Turn raw bucket counts into a report. ``counts`` follows ``BUCKET_LABELS`` order.
    """

    if total <= 0:
        return AgeDistributionReport(total_rows=0)
    return AgeDistributionReport(
        total_rows=total,
        buckets=tuple(
            AgeBucket(label=label, count=count, percentage=to_percentage(count, total))
            for label, count in zip(BUCKET_LABELS, counts)
        ),
    )


def _bucket_sum(condition: ColumnElement[bool]) -> ColumnElement[int]:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class AgeDistributionService:
    """
    Read-only aggregation over persisted users.

    Parameters
    ----------
    session:
        Active SQLAlchemy session. The caller controls its lifecycle.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def build_report(self) -> AgeDistributionReport:
        """
        Count rows, then (only when non-empty) compute all four buckets in one query.

        Raises ``ReportingError`` if either query fails.
        """

        try:
            total = int(self._session.scalar(select(func.count()).select_from(User)) or 0)
            if total == 0:
                logger.info("Age distribution skipped: users table is empty")
                return build_report(0, (0, 0, 0, 0))

            stmt = select(
                _bucket_sum(User.age < 20),
                _bucket_sum((User.age >= 20) & (User.age <= 40)),
                _bucket_sum((User.age > 40) & (User.age <= 60)),
                _bucket_sum(User.age > 60),
            )
            row = self._session.execute(stmt).one()
        except SQLAlchemyError as exc:
            raise ReportingError("Failed to compute age distribution.") from exc

        counts = (int(row[0]), int(row[1]), int(row[2]), int(row[3]))
        return build_report(total, counts)
