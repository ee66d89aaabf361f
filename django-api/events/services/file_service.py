"""Blob storage for header images and product files.

Uploads follow a two step flow: the client asks for a signed upload URL,
sends the file to it, then saves the metadata under the returned storage id.
"""

from dataclasses import dataclass
from urllib.parse import urljoin
from uuid import uuid4

import structlog
from django.core import signing
from django.core.files import File
from django.core.files.storage import Storage
from django.utils import timezone
from django.utils.text import get_valid_filename

from events.domain import FileId, StoredFile
from events.domain.errors import FileNotFoundInStorageError, InvalidUploadTokenError
from events.services.common import parse_id, require_text
from events.stores.interfaces import FileStore

logger = structlog.get_logger(__name__)

UPLOAD_SALT = "events.files.upload"


@dataclass(frozen=True)
class UploadTicket:
    token: str
    expires_in: int


class FileService:
    def __init__(
        self,
        store: FileStore,
        storage: Storage,
        max_age: int = 3600,
        public_base_url: str = "",
    ) -> None:
        self._store = store
        self._storage = storage
        self._max_age = max_age
        self._public_base_url = public_base_url
        self._signer = signing.TimestampSigner(salt=UPLOAD_SALT)

    def issue_upload_url(self) -> UploadTicket:
        """Return a token authorising one upload for ``max_age`` seconds."""
        return UploadTicket(token=self._signer.sign(uuid4().hex), expires_in=self._max_age)

    def upload(self, token: str, content: File) -> str:
        """Store ``content`` and return its storage id.

        Raises:
            InvalidUploadTokenError: If the token is forged or expired.
        """
        try:
            slot = self._signer.unsign(token, max_age=self._max_age)
        except signing.BadSignature:
            raise InvalidUploadTokenError() from None
        filename = get_valid_filename(content.name or "upload") or "upload"
        storage_id = self._storage.save(f"uploads/{slot}/{filename}", content)
        logger.info("file_uploaded", storage_id=storage_id, size=content.size)
        return storage_id

    def save_metadata(
        self,
        name: str,
        storage_id: str,
        content_type: str,
        size: int,
        uploaded_by: str | None = None,
    ) -> StoredFile:
        stored = StoredFile(
            id=FileId.new(),
            storage_id=require_text(storage_id, "Storage ID"),
            name=require_text(name, "Name"),
            content_type=content_type,
            size=size,
            uploaded_by=uploaded_by,
            uploaded_at=timezone.now(),
        )
        return self._store.save(stored)

    def get_file(self, file_id: str) -> StoredFile:
        stored = self._store.get(parse_id(FileId, file_id, "file"))
        if stored is None:
            raise FileNotFoundInStorageError(file_id)
        return stored

    def get_file_by_storage_id(self, storage_id: str) -> StoredFile:
        stored = self._store.get_by_storage_id(storage_id)
        if stored is None:
            raise FileNotFoundInStorageError(storage_id)
        return stored

    def file_url(self, storage_id: str | None) -> str | None:
        if not storage_id or not self._storage.exists(storage_id):
            return None
        return urljoin(self._public_base_url, self._storage.url(storage_id))

    def delete_file(self, storage_id: str) -> None:
        if storage_id and self._storage.exists(storage_id):
            self._storage.delete(storage_id)
        self._store.delete_by_storage_id(storage_id)
        logger.info("file_deleted", storage_id=storage_id)
