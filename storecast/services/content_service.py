# storecast/services/content_service.py
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePath
from typing import Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storecast.core.config import get_settings
from storecast.core.steps import StepSequence
from storecast.core.storage_utils import (
    delete_public_url,
    generate_object_path,
    upload_to_storage,
)
from storecast.core.timeutils import parse_instant, utcnow
from storecast.models.content import Content
from storecast.repositories.content_repo import ContentRepository
from storecast.repositories.scope import DataScope
from storecast.repositories.store_repo import StoreRepository
from storecast.schemas.content import ContentCreate, ContentSchedule, ContentStats
from storecast.schemas.results import (
    ActionResult,
    ContentListResult,
    ContentStatsResult,
)
from storecast.services.content_status import ContentStatus, classify_status

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255

# MIME prefix -> content type
CONTENT_TYPE_BY_MIME_PREFIX: dict[str, str] = {
    "image/": "image",
    "video/": "video",
    "audio/": "music",
}


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class UploadRejected(ValueError):
    """An uploaded file cannot be accepted (type or size)."""


def content_type_for(mime_type: str) -> str:
    for prefix, content_type in CONTENT_TYPE_BY_MIME_PREFIX.items():
        if mime_type.startswith(prefix):
            return content_type
    raise UploadRejected(f"Unsupported file type: {mime_type or 'unknown'}")


def _extension_for(upload: UploadedFile) -> str:
    suffix = PurePath(upload.filename or "").suffix.lstrip(".").lower()
    if suffix:
        return suffix
    guessed = mimetypes.guess_extension(upload.content_type or "")
    return guessed.lstrip(".") if guessed else "bin"


def compute_content_stats(rows: Sequence[Content], now: datetime | None = None) -> ContentStats:
    """total / active / scheduled / uploaded this calendar month (UTC)."""
    now = now or utcnow()
    stats = ContentStats(total=len(rows))
    for row in rows:
        status = classify_status(row.start_date, row.end_date, now)
        if status is ContentStatus.ACTIVE:
            stats.active += 1
        elif status is ContentStatus.SCHEDULED:
            stats.scheduled += 1
        created = parse_instant(row.created_at)
        if created and created.year == now.year and created.month == now.month:
            stats.this_month += 1
    return stats


class ContentService:
    """
    Business logic for content items.

    Responsibilities:
      - upload orchestration (Storage first, then the row)
      - per-user and global listings
      - best-effort deletion (Storage, then the row)
    """

    def __init__(self, repo: ContentRepository, store_repo: StoreRepository):
        self.repo = repo
        self.store_repo = store_repo

    # ----- Queries -----

    def fetch_content_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        scope: DataScope = DataScope.service(),
    ) -> ContentListResult:
        try:
            content = self.repo.list_for_user(session, user_id, scope)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching content for user: %s", exc)
            return ContentListResult(success=False, error=str(exc))
        return ContentListResult(success=True, content=content)

    def fetch_all_content(self, session: Session) -> ContentListResult:
        try:
            content = self.repo.list_all(session)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching all content: %s", exc)
            return ContentListResult(success=False, error=str(exc))
        return ContentListResult(success=True, content=content)

    def fetch_content_stats_by_user_id(
        self,
        session: Session,
        user_id: uuid.UUID,
        now: datetime | None = None,
    ) -> ContentStatsResult:
        try:
            rows = self.repo.list_raw(session, [user_id])
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching content stats: %s", exc)
            return ContentStatsResult(success=False, error=str(exc))
        return ContentStatsResult(success=True, stats=compute_content_stats(rows, now))

    # ----- Writes -----

    def insert_content(self, session: Session, payload: ContentCreate) -> ContentListResult:
        try:
            row = self.repo.create(session, Content(**payload.model_dump()))
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error inserting content: %s", exc)
            return ContentListResult(success=False, error=str(exc))
        return ContentListResult(
            success=True,
            content=self.repo.list_by_ids(session, [row.id]),
        )

    def upload_content(
        self,
        session: Session,
        user_id: uuid.UUID,
        schedule: ContentSchedule,
        files: Sequence[UploadedFile],
    ) -> ContentListResult:
        """
        Upload one or more files with shared scheduling metadata.

        Files are processed in order; the first failure stops the batch.
        Upload and insert are not atomic: if the insert fails after the
        upload succeeded the Storage object is left behind.
        """
        if not files:
            return ContentListResult(success=False, error="Please select at least one file")

        try:
            stores = self.store_repo.list_for_user(session, user_id, DataScope.owner(user_id))
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Error fetching stores before upload: %s", exc)
            return ContentListResult(success=False, error=str(exc))

        if not stores:
            return ContentListResult(
                success=False,
                error="Add a store before uploading content",
            )
        if schedule.store_id not in {s.id for s in stores}:
            return ContentListResult(success=False, error="Store not found")

        max_bytes = get_settings().MAX_UPLOAD_BYTES
        try:
            types = [content_type_for(f.content_type) for f in files]
            for f in files:
                if f.size > max_bytes:
                    raise UploadRejected(
                        f"{f.filename} is too large (max {max_bytes // (1024 * 1024)}MB)"
                    )
        except UploadRejected as exc:
            return ContentListResult(success=False, error=str(exc))

        created_ids: list[uuid.UUID] = []
        for upload, content_type in zip(files, types):
            path = generate_object_path(_extension_for(upload))
            try:
                file_url = upload_to_storage(path, upload.data, upload.content_type)
            except Exception as exc:
                logger.error("Storage upload failed for %s: %s", path, exc)
                return ContentListResult(success=False, error=str(exc))

            try:
                payload = ContentCreate(
                    store_id=schedule.store_id,
                    user_id=user_id,
                    title=schedule.title or upload.filename[:TITLE_MAX_LENGTH],
                    type=content_type,
                    file_url=file_url,
                    file_size=upload.size,
                    start_date=schedule.start_date,
                    end_date=schedule.end_date,
                    recurrence_type=schedule.recurrence_type,
                    recurrence_days=schedule.recurrence_days,
                )
            except ValidationError as exc:
                logger.warning("Orphaned storage object after invalid row: %s", file_url)
                return ContentListResult(success=False, error=str(exc))

            result = self.insert_content(session, payload)
            if not result.success:
                logger.warning("Orphaned storage object after failed insert: %s", file_url)
                return result
            created_ids.extend(item.id for item in result.content or [])

        return ContentListResult(
            success=True,
            content=self.repo.list_by_ids(session, created_ids),
        )

    def delete_content(
        self,
        session: Session,
        content_id: uuid.UUID,
        file_url: str,
    ) -> ActionResult:
        """
        Delete the Storage object (best effort), then the row (required).
        """
        logger.info("Deleting content %s", content_id)
        steps = StepSequence("delete_content", on_failure=session.rollback)

        def delete_row() -> None:
            if not self.repo.delete_by_id(session, content_id):
                raise LookupError("Content not found")

        try:
            steps.run("storage", lambda: delete_public_url(file_url), required=False)
            steps.run("database", delete_row)
        except Exception as exc:
            return ActionResult(success=False, error=str(exc))

        return ActionResult(
            success=True,
            message="Content deleted",
            warnings=steps.warnings or None,
        )
