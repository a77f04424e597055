"""
Upload storage on local disk.

Files land in UPLOAD_DIR/<folder>/<millis>-<sanitised name> and are exposed as
UPLOAD_URL_PREFIX/<folder>/<name>; the URL is what the owning record keeps.
Disk I/O runs in the threadpool.
"""

import re
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from lutonai.core.config import get_settings
from lutonai.core.exceptions import ValidationFailed
from lutonai.core.logging import get_logger
from lutonai.core.metrics import record_upload
from lutonai.services.interfaces.storage import StorageBackend

logger = get_logger(__name__)
settings = get_settings()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: Optional[str]) -> str:
    name = Path(filename or "upload").name
    name = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return name or "upload"


class LocalStorage(StorageBackend):
    def __init__(
        self,
        root: str | Path = settings.UPLOAD_DIR,
        url_prefix: str = settings.UPLOAD_URL_PREFIX,
        max_size: int = settings.MAX_UPLOAD_SIZE,
        allowed_types: Optional[list[str]] = None,
    ):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_size = max_size
        self.allowed_types = allowed_types if allowed_types is not None else settings.ALLOWED_UPLOAD_TYPES

    def _validate(self, file: UploadFile, content: bytes) -> None:
        if file.content_type not in self.allowed_types:
            record_upload("rejected")
            raise ValidationFailed(
                f"Unsupported file type: {file.content_type}",
                details={"allowed_types": self.allowed_types},
            )
        if not content:
            record_upload("rejected")
            raise ValidationFailed("Uploaded file is empty")
        if len(content) > self.max_size:
            record_upload("rejected")
            raise ValidationFailed(
                f"File too large. Maximum size is {self.max_size} bytes",
                details={"max_size": self.max_size},
            )

    def _path_for(self, url: str) -> Optional[Path]:
        if not url.startswith(self.url_prefix + "/"):
            return None
        relative = url[len(self.url_prefix) + 1:]
        path = (self.root / relative).resolve()
        if self.root.resolve() not in path.parents:
            return None
        return path

    async def save(self, file: UploadFile, folder: str) -> str:
        content = await file.read()
        self._validate(file, content)

        name = f"{int(time.time() * 1000)}-{safe_filename(file.filename)}"
        directory = self.root / folder
        target = directory / name

        def _write() -> None:
            directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await run_in_threadpool(_write)
        record_upload("stored")
        url = f"{self.url_prefix}/{folder}/{name}"
        logger.info("file_stored", url=url, size=len(content), content_type=file.content_type)
        return url

    async def delete(self, url: str) -> bool:
        path = self._path_for(url)
        if path is None:
            return False
        await run_in_threadpool(path.unlink)
        record_upload("deleted")
        logger.info("file_deleted", url=url)
        return True


async def delete_quietly(storage: StorageBackend, url: Optional[str]) -> None:
    """Remove a stored file; failures are logged and never block the record deletion."""
    if not url:
        return
    try:
        await storage.delete(url)
    except Exception as e:
        record_upload("delete_failed")
        logger.error("file_delete_failed", url=url, error=str(e))


_storage: Optional[StorageBackend] = None


def get_storage() -> StorageBackend:
    """Storage backend singleton (FastAPI dependency)."""
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage
