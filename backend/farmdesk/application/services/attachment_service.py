"""Attachment use case — blob content in storage, metadata in ``crop_attachments``."""

import logging

from farmdesk.application.interfaces import BlobStorage
from farmdesk.application.services.record_service import RecordService
from farmdesk.domain.entities import ResourceRecord
from farmdesk.domain.exceptions import FarmDeskError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class AttachmentService:
    def __init__(
        self,
        records: RecordService,
        storage: BlobStorage,
        max_size_bytes: int,
    ):
        self._records = records
        self._storage = storage
        self._max_size_bytes = max_size_bytes

    async def upload(
        self,
        user_id: str,
        content: bytes,
        filename: str,
        *,
        content_type: str | None = None,
        crop_id: str | None = None,
        description: str | None = None,
    ) -> ResourceRecord:
        if not content:
            raise ValidationError("crop_attachments", ["file: empty upload"])
        if len(content) > self._max_size_bytes:
            raise ValidationError(
                "crop_attachments",
                [f"file: exceeds the {self._max_size_bytes // (1024 * 1024)} MB limit"],
            )

        stored = await self._storage.store(user_id, content, filename)
        try:
            return await self._records.create_record(
                user_id,
                {
                    "file_name": filename,
                    "file_type": content_type or stored.mime_type,
                    "crop_id": crop_id,
                    "description": description,
                },
                managed={"file_path": stored.path, "file_size": stored.size},
            )
        except FarmDeskError:
            logger.warning("Attachment metadata rejected, removing blob %s", stored.path)
            await self._storage.delete(stored.path)
            raise

    async def download(self, user_id: str, record_id: str) -> tuple[ResourceRecord, bytes]:
        record = await self._records.get_record(user_id, record_id)
        path = str(record.data.get("file_path") or "")
        if not self._storage.owns(user_id, path):
            raise NotFoundError("attachment content", record_id)
        try:
            content = await self._storage.read(path)
        except FileNotFoundError as exc:
            raise NotFoundError("attachment content", record_id) from exc
        return record, content

    async def delete(self, user_id: str, record_id: str) -> bool:
        """Delete metadata and blob. A missing attachment is not an error."""
        try:
            record = await self._records.get_record(user_id, record_id)
        except NotFoundError:
            return False
        deleted = await self._records.delete_record(user_id, record_id)
        path = str(record.data.get("file_path") or "")
        if deleted and self._storage.owns(user_id, path):
            await self._storage.delete(path)
        return deleted
