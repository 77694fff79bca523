"""Local filesystem storage for crop attachment content.

Storage layout:
    <upload_dir>/<owner folder>/<stem>_<YYYYMMDD_HHmmss>_<token>.<ext>

The owner folder is a readable prefix of the owner id followed by a digest
of the full id, so two ids that sanitise to the same prefix never share a
folder. Paths handed back to callers are relative to ``upload_dir``;
``owns()`` resolves them before deciding whether they belong to an owner.
"""

import hashlib
import logging
import mimetypes
import re
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path

from farmdesk.application.interfaces import BlobStorage, StoredBlob

logger = logging.getLogger(__name__)


def _datetime_stamp() -> str:
    """Return a UTC datetime stamp suitable for filenames: YYYYMMDD_HHmmss."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _sanitise(name: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


class LocalFileStorage(BlobStorage):
    """Infrastructure adapter for local file storage."""

    def __init__(self, upload_dir: str):
        self._upload_dir = Path(upload_dir).resolve()
        self._upload_dir.mkdir(parents=True, exist_ok=True)

    async def store(self, owner_id: str, content: bytes, filename: str) -> StoredBlob:
        """Store ``content`` under the owner's folder.

        The filename is augmented with a UTC datetime stamp and a short random
        token so repeated uploads of the same file never collide.
        """
        owner_dir = self._owner_dir(owner_id)
        owner_dir.mkdir(parents=True, exist_ok=True)

        stem = Path(filename).stem
        suffix = re.sub(r"[^\w.]", "", Path(filename).suffix)  # includes the dot
        stamped_name = f"{_sanitise(stem)}_{_datetime_stamp()}_{uuid.uuid4().hex[:6]}{suffix}"

        dest_path = owner_dir / stamped_name
        dest_path.write_bytes(content)

        mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        relative = dest_path.relative_to(self._upload_dir).as_posix()

        logger.info("Stored attachment: %s (%d bytes)", relative, len(content))

        return StoredBlob(
            path=relative,
            filename=stamped_name,
            size=len(content),
            mime_type=mime_type,
        )

    async def read(self, path: str) -> bytes:
        file_path = self._resolve(path)
        if not file_path.is_file():
            raise FileNotFoundError(path)
        return file_path.read_bytes()

    async def delete(self, path: str) -> bool:
        """Delete a stored blob. Returns False if it was already gone."""
        try:
            file_path = self._resolve(path)
        except FileNotFoundError:
            return False
        if not file_path.is_file():
            return False

        file_path.unlink(missing_ok=True)
        logger.info("Deleted attachment from disk: %s", path)
        return True

    async def delete_owner(self, owner_id: str) -> int:
        owner_dir = self._owner_dir(owner_id)
        if not owner_dir.is_dir():
            return 0

        count = sum(1 for entry in owner_dir.rglob("*") if entry.is_file())
        shutil.rmtree(owner_dir)
        logger.info("Removed %d attachment(s) for owner %s", count, owner_id)
        return count

    # ── Utilities ───────────────────────────────────────────────────

    def owns(self, owner_id: str, path: str) -> bool:
        try:
            resolved = self._resolve(path)
        except FileNotFoundError:
            return False
        owner_dir = self._owner_dir(owner_id)
        return resolved != owner_dir and resolved.is_relative_to(owner_dir)

    def _owner_dir(self, owner_id: str) -> Path:
        digest = hashlib.sha256(owner_id.encode("utf-8")).hexdigest()[:32]
        return self._upload_dir / f"{_sanitise(owner_id, max_len=32)}-{digest}"

    def _resolve(self, path: str) -> Path:
        """Map a relative storage key to an absolute path inside the root."""
        candidate = (self._upload_dir / path).resolve()
        if not candidate.is_relative_to(self._upload_dir):
            raise FileNotFoundError(path)
        return candidate
