"""
app/domain/user_document.py

Domain models used by the CSV import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from app.domain.nested_value import NestedObject, to_plain

FlatRecord = Mapping[str, str]


@dataclass(frozen=True)
class UserDocument:
    """
    Validated user prepared for persistence.

    ``address`` and ``additional_info`` are ``None`` when the source record
    carried no column for them.
    """

    name: str
    age: int
    address: NestedObject | None = None
    additional_info: NestedObject | None = None

    def to_row(self) -> dict[str, Any]:
        """
        Return the column payload for one ``users`` row.
        """

        return {
            "name": self.name,
            "age": self.age,
            "address": to_plain(self.address) if self.address is not None else None,
            "additional_info": (
                to_plain(self.additional_info) if self.additional_info is not None else None
            ),
        }


@dataclass(frozen=True)
class RowValidationError:
    """
    One CSV row validation error detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class AgeBucket:
    label: str
    count: int
    percentage: int


@dataclass(frozen=True)
class AgeDistributionReport:
    """
    Age-group percentages over the ``users`` table at query time.

    ``buckets`` is empty when the table holds no rows.
    """

    total_rows: int
    buckets: tuple[AgeBucket, ...] = ()

    @property
    def has_data(self) -> bool:
        return self.total_rows > 0

    def render_lines(self) -> list[str]:
        if not self.has_data:
            return ["No records in users table."]
        lines = ["Age-Group % Distribution"]
        lines.extend(f"{bucket.label} : {bucket.percentage}" for bucket in self.buckets)
        return lines

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "buckets": [
                {"label": bucket.label, "count": bucket.count, "percentage": bucket.percentage}
                for bucket in self.buckets
            ],
        }


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary.
    """

    rows_parsed: int
    rows_inserted: int
    rows_failed: int
    validation_errors: list[RowValidationError] = field(default_factory=list)
    report: AgeDistributionReport | None = None
    report_error: str | None = None
