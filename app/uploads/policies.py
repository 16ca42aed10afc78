"""Upload classifier.

Every upload field a route accepts is declared as an ``UploadField`` with a
``FileType``. The file type selects one ``UploadPolicy`` from a closed table;
validation of a file is then a pure function of its name, mimetype and that
policy.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from app.uploads.exceptions import (
    UnexpectedFieldError,
    UnsupportedFileTypeError,
    UploadConfigurationError,
)

MB = 1024 * 1024


class FileType(str, Enum):
    IMAGE = "IMAGE"
    DOCUMENT = "DOCUMENT"
    VIDEO = "VIDEO"
    ALL = "ALL"


@dataclass(frozen=True)
class UploadPolicy:
    """Acceptance rules for one file type.

    An empty ``mimetypes`` set accepts any mimetype.
    """

    extensions: frozenset[str]
    mimetypes: frozenset[str]
    max_size: int
    error_message: str


@dataclass(frozen=True)
class UploadField:
    """One multipart field a route accepts."""

    name: str
    max_count: int
    file_type: FileType


_IMAGE_EXTENSIONS = frozenset({"jpeg", "jpg", "png", "gif", "webp", "svg"})
_DOCUMENT_EXTENSIONS = frozenset(
    {"pdf", "doc", "docx", "xls", "xlsx", "txt", "csv", "ppt", "pptx"}
)
_VIDEO_EXTENSIONS = frozenset({"mp4", "avi", "mov", "wmv", "flv", "mkv", "webm"})

POLICIES: Mapping[FileType, UploadPolicy] = {
    FileType.IMAGE: UploadPolicy(
        extensions=_IMAGE_EXTENSIONS,
        mimetypes=frozenset(
            {
                "image/jpeg",
                "image/jpg",
                "image/png",
                "image/gif",
                "image/webp",
                "image/svg+xml",
            }
        ),
        max_size=5 * MB,
        error_message="Only image files are allowed (jpeg, jpg, png, gif, webp, svg)",
    ),
    FileType.DOCUMENT: UploadPolicy(
        extensions=_DOCUMENT_EXTENSIONS,
        mimetypes=frozenset(
            {
                "application/pdf",
                "application/msword",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                "application/vnd.ms-excel",
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                "text/plain",
                "text/csv",
                "application/vnd.ms-powerpoint",
                "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            }
        ),
        max_size=10 * MB,
        error_message=(
            "Only document files are allowed "
            "(pdf, doc, docx, xls, xlsx, txt, csv, ppt, pptx)"
        ),
    ),
    FileType.VIDEO: UploadPolicy(
        extensions=_VIDEO_EXTENSIONS,
        mimetypes=frozenset(
            {
                "video/mp4",
                "video/x-msvideo",
                "video/quicktime",
                "video/x-ms-wmv",
                "video/x-flv",
                "video/x-matroska",
                "video/webm",
            }
        ),
        max_size=50 * MB,
        error_message="Only video files are allowed (mp4, avi, mov, wmv, flv, mkv, webm)",
    ),
    FileType.ALL: UploadPolicy(
        extensions=_IMAGE_EXTENSIONS | _DOCUMENT_EXTENSIONS | _VIDEO_EXTENSIONS,
        mimetypes=frozenset(),
        max_size=50 * MB,
        error_message="Invalid file type",
    ),
}


def resolve_policy(
    field_name: str,
    fields: Iterable[UploadField],
    policies: Mapping[FileType, UploadPolicy] = POLICIES,
) -> UploadPolicy:
    """Return the policy governing ``field_name``.

    Raises:
        UnexpectedFieldError: the field is not declared
        UploadConfigurationError: the field's file type has no policy
    """
    field = next((f for f in fields if f.name == field_name), None)
    if field is None:
        raise UnexpectedFieldError(field_name)
    policy = policies.get(field.file_type)
    if policy is None:
        raise UploadConfigurationError(field_name)
    return policy


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot ('' if none)."""
    return PurePath(filename).suffix.lower().lstrip(".")


def validate_file(
    field_name: str, filename: str, mimetype: str | None, policy: UploadPolicy
) -> None:
    """Check a file's extension and mimetype against its policy.

    Both must pass: a spoofed extension does not get past the mimetype check
    and a spoofed mimetype does not get past the extension check.
    """
    valid_extension = file_extension(filename) in policy.extensions
    valid_mimetype = not policy.mimetypes or (mimetype or "") in policy.mimetypes
    if not (valid_extension and valid_mimetype):
        raise UnsupportedFileTypeError(field_name, policy.error_message)
