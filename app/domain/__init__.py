"""
app/domain package marker.
"""

from app.domain.nested_value import NestedObject, NestedValue, Scalar, set_at_path, to_plain
from app.domain.user_document import (
    AgeBucket,
    AgeDistributionReport,
    FlatRecord,
    ImportSummary,
    RowValidationError,
    UserDocument,
)

__all__ = [
    "AgeBucket",
    "AgeDistributionReport",
    "FlatRecord",
    "ImportSummary",
    "NestedObject",
    "NestedValue",
    "RowValidationError",
    "Scalar",
    "UserDocument",
    "set_at_path",
    "to_plain",
]
