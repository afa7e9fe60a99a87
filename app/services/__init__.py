"""
app/services package marker.
"""

from app.services.age_distribution_service import AgeDistributionService
from app.services.batch_loader import BatchLoader
from app.services.csv_import_service import (
    CSVImportService,
    get_csv_import_service,
    run_import_from_settings,
)

__all__ = [
    "AgeDistributionService",
    "BatchLoader",
    "CSVImportService",
    "get_csv_import_service",
    "run_import_from_settings",
]
