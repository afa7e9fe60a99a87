"""
app/validators package marker.
"""

from app.validators.user_row_validator import (
    MANDATORY_COLUMNS,
    UserRowValidator,
    ValidatedUserFields,
)

__all__ = [
    "MANDATORY_COLUMNS",
    "UserRowValidator",
    "ValidatedUserFields",
]
