import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

from fastapi import UploadFile

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def ensure_upload_dir() -> Path:
    path = Path(settings.upload_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_upload(file: Optional[UploadFile]) -> str:
    """Reject missing or disallowed uploads before anything touches the disk. Returns the extension."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")
    extension = Path(file.filename).suffix.lower()
    allowed = [ext.lower() for ext in settings.allowed_upload_extensions]
    if extension not in allowed:
        raise ValidationError(
            f"Unsupported file type '{extension or 'none'}'",
            details={"allowedExtensions": allowed},
        )
    return extension


async def save_upload(file: UploadFile) -> Tuple[str, int]:
    """
    Stream an upload into the upload directory under a unique name.
    Returns (path, size). Oversized files are removed and rejected.
    """
    extension = validate_upload(file)
    max_bytes = settings.max_upload_mb * 1024 * 1024
    target = ensure_upload_dir() / f"resume-{uuid.uuid4().hex}{extension}"

    size = 0
    with open(target, "wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                break
            out.write(chunk)

    if size > max_bytes:
        remove_file(str(target))
        raise ValidationError(f"File too large. Max allowed is {settings.max_upload_mb}MB.")
    if size == 0:
        remove_file(str(target))
        raise ValidationError("Uploaded file is empty")

    logger.info(f"Stored upload {file.filename} at {target} ({size} bytes)")
    return str(target), size


def remove_file(path: Optional[str]) -> bool:
    """Best-effort delete. Returns True when a file was removed."""
    if not path:
        return False
    try:
        os.remove(path)
        logger.info(f"Deleted file {path}")
        return True
    except FileNotFoundError:
        logger.info(f"File already gone: {path}")
        return False
    except OSError as e:
        logger.error(f"Error deleting file {path}: {e}")
        return False
