"""
app/services/batch_loader.py

Groups mapped documents into fixed-size batches and writes each batch
with one multi-row INSERT.

Transaction contract: the loader neither begins nor commits. The caller
opens one transaction around ``load`` so that every batch of a run
commits together or not at all.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Sequence

from sqlalchemy.exc import SQLAlchemyError

from app.domain.user_document import UserDocument
from app.errors import ImportCancelledError, ImportPersistenceError
from app.logging_utils import log_event
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

# PostgreSQL accepts at most 65535 bind parameters per statement and each
# row binds one per inserted column (name, age, address, additional_info).
MAX_BIND_PARAMETERS = 65535
PARAMETERS_PER_ROW = 4
MAX_BATCH_SIZE = MAX_BIND_PARAMETERS // PARAMETERS_PER_ROW


def iter_batches(
    documents: Iterable[UserDocument],
    batch_size: int,
) -> Iterator[list[UserDocument]]:
    """
    Yield consecutive lists of at most ``batch_size`` documents; the last may be shorter.
    """

    batch: list[UserDocument] = []
    for document in documents:
        batch.append(document)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


class BatchLoader:
    """
    Persists documents in batches through a ``UserRepository``.
    """

    def __init__(
        self,
        repository: UserRepository,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._repository = repository
        if batch_size > MAX_BATCH_SIZE:
            logger.warning(
                "Batch size %d exceeds the per-statement parameter limit; using %d.",
                batch_size,
                MAX_BATCH_SIZE,
            )
        self._batch_size = min(max(1, batch_size), MAX_BATCH_SIZE)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def load(
        self,
        documents: Sequence[UserDocument],
        *,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """
        Insert every document and return the number of rows written.

        Raises ``ImportCancelledError`` when ``cancel_event`` is set before a
        batch is sent, and ``ImportPersistenceError`` when a batch insert fails.
        """

        inserted = 0
        for batch_number, batch in enumerate(iter_batches(documents, self._batch_size), start=1):
            if cancel_event is not None and cancel_event.is_set():
                log_event(
                    logger,
                    logging.WARNING,
                    "import_cancelled",
                    batch_number=batch_number,
                    rows_inserted=inserted,
                )
                raise ImportCancelledError(
                    f"Import cancelled before batch {batch_number}; "
                    f"{inserted} uncommitted rows will be rolled back."
                )

            try:
                inserted += self._repository.insert_batch(batch)
            except SQLAlchemyError as exc:
                raise ImportPersistenceError(
                    f"Failed to insert batch {batch_number} ({len(batch)} rows).",
                    batch_number=batch_number,
                    batch_size=len(batch),
                    rows_inserted_before=inserted,
                ) from exc

            log_event(
                logger,
                logging.INFO,
                "batch_inserted",
                batch_number=batch_number,
                batch_rows=len(batch),
                rows_inserted=inserted,
            )

        return inserted
