"""
app/schemas package marker.
"""

from app.schemas.health import AgeBucketResponse, HealthResponse, ImportStatusResponse

__all__ = [
    "AgeBucketResponse",
    "HealthResponse",
    "ImportStatusResponse",
]
