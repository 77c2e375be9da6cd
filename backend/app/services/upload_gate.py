"""
Resume upload validation.

Checks the declared filename and media type against the resume allow-list,
then reads the body into memory while enforcing the size cap. Nothing is
written to disk; the accepted bytes are handed straight to the storage write.
"""
import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from ..config import MAX_RESUME_BYTES
from ..utils.error_handlers import FileUploadError, ValidationError, get_error_message
from ..utils.validation import sanitize_filename

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}
ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
READ_CHUNK_BYTES = 1024 * 1024  # 1MB


@dataclass(frozen=True)
class AcceptedResume:
    filename: str
    content_type: str
    content: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def _invalid_type(filename: str) -> FileUploadError:
    return FileUploadError(
        get_error_message("invalid_file_type"),
        code="invalid_file_type",
        details={"filename": filename, "allowed_extensions": sorted(ALLOWED_EXTENSIONS)},
    )


def check_resume_type(filename: str, content_type: str | None) -> str:
    """Return the sanitized filename if both extension and media type are allowed."""
    try:
        clean_name = sanitize_filename(Path(filename).name)
    except ValidationError:
        raise _invalid_type(filename)

    ext = Path(clean_name).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise _invalid_type(clean_name)

    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type not in ALLOWED_CONTENT_TYPES:
        raise _invalid_type(clean_name)

    return clean_name


async def read_resume_upload(
    file: UploadFile | None,
    *,
    max_bytes: int = MAX_RESUME_BYTES,
) -> AcceptedResume | None:
    """
    Validate and buffer an optional resume upload.

    Returns None when no file was sent. Raises FileUploadError with code
    ``invalid_file_type`` or ``file_too_large``.
    """
    if file is None or not file.filename:
        return None

    try:
        filename = check_resume_type(file.filename, file.content_type)

        chunks: list[bytes] = []
        size = 0
        while True:
            chunk = await file.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                logger.info("Rejected resume upload %s: more than %d bytes", filename, max_bytes)
                raise FileUploadError(
                    get_error_message("file_too_large"),
                    code="file_too_large",
                    details={"filename": filename, "max_bytes": max_bytes},
                )
            chunks.append(chunk)
    finally:
        await file.close()

    return AcceptedResume(
        filename=filename,
        content_type=(file.content_type or "").split(";", 1)[0].strip().lower(),
        content=b"".join(chunks),
    )
