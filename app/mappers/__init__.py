"""
app/mappers package marker.
"""

from app.mappers.user_document_mapper import ADDRESS_PREFIX, UserDocumentMapper

__all__ = [
    "ADDRESS_PREFIX",
    "UserDocumentMapper",
]
