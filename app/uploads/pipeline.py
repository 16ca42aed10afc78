"""Upload pipeline: multipart request -> validated files on disk.

A route declares the fields it accepts; the pipeline turns one multipart
request into an ``UploadBatch`` of files already written to disk, or raises
and leaves nothing behind. Any rejection, error or cancellation part-way
through deletes every file the batch had written so far.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated

import anyio
import anyio.to_thread
from fastapi import Depends, Request
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.types import Message

from app.uploads.exceptions import (
    FileSizeExceededError,
    TooManyFilesError,
    UnexpectedFieldError,
    UploadError,
)
from app.uploads.policies import (
    POLICIES,
    FileType,
    UploadField,
    UploadPolicy,
    resolve_policy,
    validate_file,
)
from app.uploads.storage import UploadStorage, generate_filename, get_upload_storage

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
# Room for multipart boundaries, part headers and small text fields.
FORM_OVERHEAD = 64 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """A validated file that is already on disk."""

    field_name: str
    path: Path
    url: str
    original_name: str
    size: int
    mime_type: str


@dataclass
class UploadBatch:
    """All files accepted from one request, grouped by field name."""

    storage: UploadStorage
    files: dict[str, list[UploadedFile]] = field(default_factory=dict)

    def get(self, field_name: str) -> list[UploadedFile]:
        return self.files.get(field_name, [])

    def first(self, field_name: str) -> UploadedFile | None:
        files = self.get(field_name)
        return files[0] if files else None

    def all(self) -> list[UploadedFile]:
        return [f for files in self.files.values() for f in files]

    def discard(self) -> None:
        """Delete every file in the batch (best-effort)."""
        for uploaded in self.all():
            self.storage.delete(uploaded.path)
        self.files.clear()


class UploadPipeline:
    """Receives the files of one multipart request for a fixed field list."""

    def __init__(
        self,
        fields: Sequence[UploadField],
        policies: Mapping[FileType, UploadPolicy] = POLICIES,
    ):
        self.fields = {f.name: f for f in fields}
        self.policies = {
            f.name: resolve_policy(f.name, fields, policies) for f in fields
        }
        self.max_file_size = max(
            (p.max_size for p in self.policies.values()), default=0
        )
        # Ceiling for the whole body, enforced while it is read.
        self.max_request_size = FORM_OVERHEAD + sum(
            self.policies[name].max_size * f.max_count
            for name, f in self.fields.items()
        )

    async def receive(self, request: Request, storage: UploadStorage) -> UploadBatch:
        form = await self._read_form(request)
        batch = UploadBatch(storage=storage)
        try:
            for field_name, value in form.multi_items():
                if not isinstance(value, UploadFile):
                    continue
                await self._accept(batch, field_name, value)
        except BaseException:
            # Rejection, I/O failure or cancellation: nothing of the batch survives.
            written = batch.all()
            with anyio.CancelScope(shield=True):
                await anyio.to_thread.run_sync(batch.discard)
            if written:
                logger.info(
                    "Upload rejected, removed %d written file(s)", len(written)
                )
            raise
        finally:
            with anyio.CancelScope(shield=True):
                await form.close()
        return batch

    async def _read_form(self, request: Request) -> FormData:
        max_files = sum(f.max_count for f in self.fields.values()) + 1
        try:
            return await request.form(max_files=max_files)
        except MultiPartException as e:
            raise _form_error(e.message) from e
        except StarletteHTTPException as e:
            raise _form_error(str(e.detail)) from e

    async def _accept(
        self, batch: UploadBatch, field_name: str, upload: UploadFile
    ) -> None:
        if field_name not in self.fields:
            raise UnexpectedFieldError(field_name)
        declared = self.fields[field_name]
        policy = self.policies[field_name]
        accepted = batch.files.setdefault(field_name, [])
        if len(accepted) >= declared.max_count:
            raise TooManyFilesError(field_name)

        filename = upload.filename or ""
        validate_file(field_name, filename, upload.content_type, policy)
        if upload.size is not None and upload.size > policy.max_size:
            raise FileSizeExceededError()

        destination = batch.storage.destination(field_name, declared.file_type)
        await anyio.Path(destination).mkdir(parents=True, exist_ok=True)
        path = (destination / generate_filename(filename)).resolve()
        size = await self._write(upload, path, policy.max_size, batch.storage)

        accepted.append(
            UploadedFile(
                field_name=field_name,
                path=path,
                url=batch.storage.url_for(path),
                original_name=filename,
                size=size,
                mime_type=upload.content_type or "application/octet-stream",
            )
        )
        logger.info(
            "Stored upload %s (%d bytes)",
            path.name,
            size,
            extra={"field": field_name, "file_path": str(path)},
        )

    async def _write(
        self,
        upload: UploadFile,
        path: Path,
        limit: int,
        storage: UploadStorage,
    ) -> int:
        """Stream the upload to ``path``; abort once it grows past ``limit``."""
        size = 0
        out = await anyio.open_file(path, "xb")
        try:
            async with out:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > limit:
                        raise FileSizeExceededError()
                    await out.write(chunk)
        except BaseException:
            with anyio.CancelScope(shield=True):
                await anyio.to_thread.run_sync(storage.delete, path)
            raise
        return size


def _form_error(message: str) -> UploadError:
    if message.startswith("Too many files"):
        return TooManyFilesError()
    return UploadError(f"Upload error: {message}")


def limit_body(request: Request, max_bytes: int) -> Request:
    """Return ``request`` with a body that may not grow past ``max_bytes``.

    A declared Content-Length over the limit is refused before anything is
    read; otherwise the body is counted as it arrives and reading stops at
    the first chunk that crosses the limit.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise FileSizeExceededError("Request body exceeded the limit")

    received = 0

    async def receive() -> Message:
        nonlocal received
        message = await request.receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > max_bytes:
                raise FileSizeExceededError("Request body exceeded the limit")
        return message

    return Request(request.scope, receive=receive)


def upload_fields(
    *fields: UploadField,
) -> Callable[..., Awaitable[UploadBatch]]:
    """Build a route dependency that runs the upload pipeline.

    Usage:
        ProfileImageUpload = Annotated[
            UploadBatch,
            Depends(upload_fields(UploadField("profileImage", 1, FileType.IMAGE))),
        ]
    """
    pipeline = UploadPipeline(fields)

    async def dependency(
        request: Request,
        storage: Annotated[UploadStorage, Depends(get_upload_storage)],
    ) -> UploadBatch:
        limited = limit_body(request, pipeline.max_request_size)
        return await pipeline.receive(limited, storage)

    return dependency
