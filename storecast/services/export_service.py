# storecast/services/export_service.py
import csv
import io
import logging
import uuid
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.timeutils import parse_instant, utcnow
from storecast.repositories.content_repo import ContentRepository
from storecast.schemas.content import ContentRead
from storecast.schemas.results import CsvResult

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Title",
    "Type",
    "Store",
    "Company",
    "Address",
    "Start Date",
    "End Date",
    "Recurrence",
    "File URL",
    "Upload Date",
]


def _iso(value: datetime | None) -> str:
    instant = parse_instant(value)
    return instant.isoformat() if instant else ""


def _upload_date(value: datetime | None) -> str:
    instant = parse_instant(value)
    return instant.strftime("%Y-%m-%d %H:%M:%S") if instant else ""


def content_row(item: ContentRead) -> list[str]:
    store = item.store
    return [
        item.title,
        item.type,
        store.name if store else "",
        store.brand_company if store else "",
        store.address if store else "",
        _iso(item.start_date),
        _iso(item.end_date),
        item.recurrence_type or "",
        item.file_url,
        _upload_date(item.created_at),
    ]


def build_content_csv(items: Iterable[ContentRead]) -> str:
    """
    Render content rows as CSV.

    Every field is double-quoted (inner quotes doubled); rows are joined
    with a bare newline and there is no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for item in items:
        writer.writerow(content_row(item))
    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


def client_export_filename(client_email: str, today: datetime | None = None) -> str:
    day = (today or utcnow()).strftime("%Y-%m-%d")
    return f"client-data-{client_email}-{day}.csv"


def bulk_export_filename(now: datetime | None = None) -> str:
    return f"bulk-content-export-{(now or utcnow()).strftime('%Y-%m-%d-%H%M')}.csv"


class ExportService:
    """
    CSV exports for admins (single client and bulk selection).
    """

    def __init__(self, repo: ContentRepository):
        self.repo = repo

    def get_client_data_as_csv(
        self,
        session: Session,
        client_id: uuid.UUID,
        client_email: str,
    ) -> CsvResult:
        try:
            content = self.repo.list_for_user(session, client_id)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error exporting client %s: %s", client_id, exc)
            return CsvResult(success=False, error="Failed to generate CSV data.")
        return CsvResult(
            success=True,
            csv_string=build_content_csv(content),
            file_name=client_export_filename(client_email),
        )

    def export_selected_content(
        self,
        session: Session,
        content_ids: Sequence[uuid.UUID],
    ) -> CsvResult:
        if not content_ids:
            return CsvResult(success=False, error="No content selected")
        try:
            content = self.repo.list_by_ids(session, content_ids)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error exporting selected content: %s", exc)
            return CsvResult(success=False, error="Failed to generate CSV data.")
        return CsvResult(
            success=True,
            csv_string=build_content_csv(content),
            file_name=bulk_export_filename(),
        )
