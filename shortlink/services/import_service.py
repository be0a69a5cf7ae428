"""
Bulk Import Service

Imports bindings from CSV records through the binding service.

Record layout (trailing columns optional, blank cells unset):
    url, id, ttl, max_requests, expire_on, expired_url, exhausted_url

Rules:
- A first record whose first cell is "url" is a header and is skipped
- Custom ids are accepted as-is (no alphabet or length enforcement)
- Every row of one import shares the same bound_at
- The import stops at the first row that fails to parse or bind; the rows
  committed before it stay committed
"""

import csv
import io
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from pydantic import ValidationError

from shortlink.core.exceptions import InvalidRecordError, URLShortenerException
from shortlink.core.policy import utcnow
from shortlink.db.models import BindRequest
from shortlink.services.binding_service import BindingService

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("url", "id", "ttl", "max_requests", "expire_on", "expired_url", "exhausted_url")


@dataclass
class ImportResult:
    """Outcome of an import: rows committed, and the error that stopped it."""
    rows: int
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_header(record: Sequence[str]) -> bool:
    return bool(record) and record[0].strip().lower() == "url"


def parse_record(record: Sequence[str]) -> BindRequest:
    """
    Parse one CSV record into a bind request.

    Raises:
        InvalidRecordError: If the record is empty, too long, or a cell
            cannot be converted
    """
    cells = [cell.strip() for cell in record]
    if not cells or not cells[0]:
        raise InvalidRecordError(list(record), "missing url")
    if len(cells) > len(RECORD_FIELDS):
        raise InvalidRecordError(
            list(record), f"expected at most {len(RECORD_FIELDS)} columns, got {len(cells)}"
        )

    values = {name: cell for name, cell in zip(RECORD_FIELDS, cells) if cell}
    try:
        if "expire_on" in values:
            values["expire_on"] = datetime.fromisoformat(values["expire_on"])
        return BindRequest.model_validate(values)
    except (ValueError, ValidationError) as e:
        raise InvalidRecordError(list(record), str(e))


class ImportService:
    """Drives the binding service once per imported record."""

    def __init__(self, binding_service: BindingService):
        self.binding_service = binding_service

    async def import_records(
        self,
        records: Iterable[Sequence[str]],
        imported_at: Optional[datetime] = None
    ) -> ImportResult:
        """
        Import records one at a time, stopping at the first failure.

        Args:
            records: CSV records (sequences of cells)
            imported_at: bound_at for every row (default: now)

        Returns:
            ImportResult with the number of committed rows and the error
            that stopped the import, if any
        """
        imported_at = imported_at or utcnow()
        start = time.perf_counter()
        rows = 0
        error = None

        iterator = iter(records)
        position = 0
        while True:
            try:
                record = next(iterator)
            except StopIteration:
                break
            except csv.Error as e:
                error = InvalidRecordError([], f"malformed CSV: {e}")
                logger.error(f"Import stopped at record {position + 1}: {error}")
                break

            position += 1
            if position == 1 and is_header(record):
                continue
            try:
                request = parse_record(record)
                await self.binding_service.bind(
                    request,
                    enforce_alphabet=False,
                    enforce_length=False,
                    bound_at=imported_at
                )
            except URLShortenerException as e:
                logger.error(f"Import stopped at record {position}: {e}")
                error = e
                break
            rows += 1

        logger.info(
            f"Import complete with {rows} rows in {(time.perf_counter() - start) * 1000:.2f}ms"
        )
        return ImportResult(rows=rows, error=error)

    async def import_csv(self, text: str, imported_at: Optional[datetime] = None) -> ImportResult:
        """Import bindings from CSV text."""
        reader = csv.reader(io.StringIO(text))
        return await self.import_records(
            (record for record in reader if record),
            imported_at=imported_at
        )
