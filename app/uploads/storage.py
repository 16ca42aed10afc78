"""Upload storage on local disk.

Files live under one root with a fixed subfolder per logical type. A file's
public URL is the URL prefix followed by its path relative to the root, so
``path_for_url(url_for(path)) == path``.
"""

import logging
import re
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Annotated

from fastapi import Depends

from app.core.retry import with_retry
from app.core.settings import Settings, get_settings
from app.uploads.policies import FileType

logger = logging.getLogger(__name__)

PROFILES_DIR = "profiles"
IMAGES_DIR = "images"
DOCUMENTS_DIR = "documents"
VIDEOS_DIR = "videos"
OTHERS_DIR = "others"
SUBDIRECTORIES = (PROFILES_DIR, DOCUMENTS_DIR, IMAGES_DIR, VIDEOS_DIR, OTHERS_DIR)

# Image fields that hold an account's own picture go to profiles/.
PROFILE_IMAGE_FIELDS = frozenset({"profileImage", "avatar"})

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


class PathTraversalError(ValueError):
    """Raised when a URL or path escapes the upload root."""


def destination_subdir(field_name: str, file_type: FileType) -> str:
    """Subfolder for a file, decided by its declared type alone."""
    if file_type is FileType.IMAGE:
        return PROFILES_DIR if field_name in PROFILE_IMAGE_FIELDS else IMAGES_DIR
    if file_type is FileType.VIDEO:
        return VIDEOS_DIR
    if file_type is FileType.DOCUMENT:
        return DOCUMENTS_DIR
    return OTHERS_DIR


def generate_filename(original_name: str) -> str:
    """Sanitized stem + millisecond timestamp + random suffix + original extension."""
    original = PurePosixPath(original_name.replace("\\", "/"))
    ext = _UNSAFE_CHARS.sub("", original.suffix[1:])
    stem = _UNSAFE_CHARS.sub("_", original.stem if ext else original.name)
    unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{stem}-{unique_suffix}.{ext}" if ext else f"{stem}-{unique_suffix}"


class UploadStorage:
    """Placement, URL mapping and best-effort deletion of uploaded files."""

    def __init__(self, root: Path, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")

    def ensure_directories(self) -> None:
        for name in SUBDIRECTORIES:
            (self.root / name).mkdir(parents=True, exist_ok=True)

    def destination(self, field_name: str, file_type: FileType) -> Path:
        return self.root / destination_subdir(field_name, file_type)

    def url_for(self, path: Path) -> str:
        relative = Path(path).resolve().relative_to(self.root.resolve())
        return f"{self.url_prefix}/{relative.as_posix()}"

    def path_for_url(self, url: str) -> Path:
        """Map a public URL back to its file under the root.

        Raises:
            PathTraversalError: the URL is outside the prefix or escapes the root
        """
        prefix = self.url_prefix + "/"
        if not url.startswith(prefix):
            raise PathTraversalError(f"URL outside upload prefix: {url}")
        relative = url[len(prefix) :]

        base = self.root.resolve()
        candidate = (base / relative).resolve()
        if candidate != base and base in candidate.parents:
            return candidate
        raise PathTraversalError(f"path traversal detected: {url}")

    def delete(self, path: Path) -> bool:
        """Delete a file without raising.

        Returns True if the file was removed. Missing files and OS errors are
        logged; transient errors are retried first.
        """
        extra = {"file_path": str(path)}
        try:
            with_retry(lambda: Path(path).unlink(), exceptions=(PermissionError,))
        except FileNotFoundError:
            logger.warning("File not found: %s", path, extra=extra)
            return False
        except OSError as e:
            logger.warning("Failed to delete file %s: %s", path, e, extra=extra)
            return False
        logger.info("File deleted: %s", path, extra=extra)
        return True

    def delete_url(self, url: str) -> bool:
        """Best-effort delete of the file behind a public URL."""
        try:
            path = self.path_for_url(url)
        except PathTraversalError as e:
            logger.warning("Refusing to delete %s: %s", url, e, extra={"file_path": url})
            return False
        return self.delete(path)

    def is_writable(self) -> bool:
        """Probe the root by writing and removing a scratch file."""
        probe = self.root / f".probe-{secrets.token_hex(8)}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            probe.write_bytes(b"")
            probe.unlink()
        except OSError:
            return False
        return True


def get_upload_storage(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadStorage:
    """Dependency: upload storage rooted at the configured directory."""
    return UploadStorage(settings.upload_dir, settings.upload_url_prefix)
