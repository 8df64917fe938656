"""
Identity-document uploads for organizer signup.

The document is checked (type and size) before any other signup field and
only written to disk once the whole signup has validated. Files are stored
in the configured upload directory as <epoch-millis><extension>, and the
stored path is what goes into the organizers table.
"""

import logging
import os
import time

from werkzeug.datastructures import FileStorage

from organiz.config import Settings

TYPE_ERROR = "File type not supported. Use PDF, JPG, or PNG."


class UploadRejected(Exception):
    """Raised when an uploaded document fails the type or size checks."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _extension(file: FileStorage) -> str:
    return os.path.splitext(file.filename or "")[1].lower()


def _size(file: FileStorage) -> int:
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def check_id_document(file: FileStorage, settings: Settings) -> None:
    """
    Validate an uploaded identity document.

    Both the filename extension and the MIME subtype must be one of the
    allowed types (jpeg, jpg, png, pdf by default).

    Raises:
        UploadRejected: Wrong type or larger than settings.max_upload_bytes.
    """
    allowed = settings.allowed_upload_types
    ext = _extension(file).lstrip(".")
    subtype = (file.mimetype or "").rsplit("/", 1)[-1].lower()

    if ext not in allowed or subtype not in allowed:
        raise UploadRejected(TYPE_ERROR)

    if _size(file) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise UploadRejected(f"File too large. Maximum size is {limit_mb}MB.")


def save_id_document(file: FileStorage, settings: Settings) -> str:
    """
    Write a validated document into the upload directory.

    Returns:
        str: Path of the stored file.
    """
    os.makedirs(settings.upload_dir, exist_ok=True)
    ext = _extension(file)
    stamp = int(time.time() * 1000)

    # Never overwrite: two uploads in the same millisecond get distinct names
    while True:
        path = os.path.join(settings.upload_dir, f"{stamp}{ext}")
        try:
            with open(path, "xb") as dst:
                file.save(dst)
            break
        except FileExistsError:
            stamp += 1

    logging.info(f"[Upload] Stored identity document at {path}")
    return path


def discard(path: str) -> None:
    """Remove a stored document after the signup it belonged to failed."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logging.exception(f"[Upload] Could not remove {path}")
