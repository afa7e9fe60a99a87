"""
app/validators/user_row_validator.py

Row-level validation of the mandatory user columns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from app.domain.user_document import RowValidationError

FIRST_NAME_COLUMN = "name.firstName"
LAST_NAME_COLUMN = "name.lastName"
AGE_COLUMN = "age"

MANDATORY_COLUMNS: tuple[str, ...] = (FIRST_NAME_COLUMN, LAST_NAME_COLUMN, AGE_COLUMN)

# PostgreSQL ``integer`` bounds.
AGE_MIN = -(2**31)
AGE_MAX = 2**31 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class ValidatedUserFields:
    first_name: str
    last_name: str
    age: int


class UserRowValidator:
    """
    Validates and parses the name and age columns of one flat record.
    """

    def validate_record(
        self,
        *,
        record: Mapping[str, str | None],
        row_number: int,
    ) -> tuple[ValidatedUserFields | None, list[RowValidationError]]:
        """
        Validate one record; every failing column is reported, not just the first.
        """

        errors: list[RowValidationError] = []

        first_name = self._parse_required_string(
            value=record.get(FIRST_NAME_COLUMN),
            row_number=row_number,
            column=FIRST_NAME_COLUMN,
            errors=errors,
        )
        last_name = self._parse_required_string(
            value=record.get(LAST_NAME_COLUMN),
            row_number=row_number,
            column=LAST_NAME_COLUMN,
            errors=errors,
        )
        age = self._parse_age(
            value=record.get(AGE_COLUMN),
            row_number=row_number,
            errors=errors,
        )

        if errors or age is None:
            return None, errors

        return ValidatedUserFields(first_name=first_name, last_name=last_name, age=age), []

    def _parse_required_string(
        self,
        *,
        value: Any,
        row_number: int,
        column: str,
        errors: list[RowValidationError],
    ) -> str:
        if self._is_blank(value):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=column,
                    message="Required value is missing.",
                    value=self._stringify_value(value),
                )
            )
            return ""
        return str(value).strip()

    def _parse_age(
        self,
        *,
        value: str | None,
        row_number: int,
        errors: list[RowValidationError],
    ) -> int | None:
        if self._is_blank(value):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=AGE_COLUMN,
                    message="Required value is missing.",
                    value=self._stringify_value(value),
                )
            )
            return None

        raw = str(value).strip()
        if not _INTEGER_PATTERN.fullmatch(raw):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=AGE_COLUMN,
                    message="Invalid age value; expected a base-10 integer.",
                    value=raw,
                )
            )
            return None

        age = int(raw, 10)
        if not AGE_MIN <= age <= AGE_MAX:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=AGE_COLUMN,
                    message="Age value is out of range.",
                    value=raw,
                )
            )
            return None
        return age

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)
