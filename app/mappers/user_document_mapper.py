"""
app/mappers/user_document_mapper.py

Maps flat dotted-key CSV records into nested user documents.

Column layout
-------------
``name.firstName`` / ``name.lastName``  joined with one space into ``name``
``age``                                 parsed into an integer
``address.<path>``                      nested under ``address`` at ``<path>``
anything else                           nested under ``additional_info`` at its full path
"""

from __future__ import annotations

from app.domain.nested_value import NestedObject, set_at_path
from app.domain.user_document import FlatRecord, RowValidationError, UserDocument
from app.validators.user_row_validator import MANDATORY_COLUMNS, UserRowValidator

ADDRESS_PREFIX = "address."


class UserDocumentMapper:
    """
    Converts one flat record into a validated ``UserDocument``.

    The mapper is stateless; records may be mapped in any order or in parallel.
    """

    def __init__(self, *, validator: UserRowValidator | None = None) -> None:
        self._validator = validator or UserRowValidator()

    def map_record(
        self,
        *,
        record: FlatRecord,
        row_number: int,
    ) -> tuple[UserDocument | None, list[RowValidationError]]:
        """
        Return ``(document, [])`` on success or ``(None, errors)`` when the row must be skipped.
        """

        fields, errors = self._validator.validate_record(record=record, row_number=row_number)
        if fields is None:
            return None, errors

        address = NestedObject()
        additional_info = NestedObject()
        for key, value in record.items():
            if key in MANDATORY_COLUMNS:
                continue
            text = "" if value is None else value
            if key.startswith(ADDRESS_PREFIX):
                set_at_path(address, key[len(ADDRESS_PREFIX):], text)
            else:
                set_at_path(additional_info, key, text)

        document = UserDocument(
            name=f"{fields.first_name} {fields.last_name}",
            age=fields.age,
            address=None if address.is_empty() else address,
            additional_info=None if additional_info.is_empty() else additional_info,
        )
        return document, []
