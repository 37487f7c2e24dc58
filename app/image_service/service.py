from typing import BinaryIO, List, Optional
import logging
from starlette.concurrency import run_in_threadpool

from app.storage.local import LocalStorageService, SizeLimitExceeded, generate_filename
from app.storage.pocketbase import PocketBaseService, PocketBaseError
from app.image_service.models import ImageCreate, ImageRecord
from app.settings import settings
from app.exceptions import (
    FileTooLargeException,
    IOWriteException,
    ListFailedException,
    MetadataPersistException,
    UnsupportedMediaTypeException,
)

log = logging.getLogger(__name__)

# Allowed content types
ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
}

def validate_content_type(content_type: Optional[str]) -> str:
    """Accepts only allow-listed declared MIME types; the bytes are not inspected."""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise UnsupportedMediaTypeException()
    return content_type

def validate_size(size: Optional[int], max_bytes: Optional[int] = None) -> None:
    """Rejects a declared size above the ceiling. Unknown sizes are checked while streaming."""
    limit = max_bytes if max_bytes is not None else settings.max_file_size
    if size is not None and size > limit:
        raise FileTooLargeException(limit)

def build_location(filename: str, mount: Optional[str] = None) -> str:
    """Public path of a stored file, always ``/<mount>/<filename>``."""
    mount = (mount or settings.uploads_mount).strip("/")
    return "/" + "/".join(part for part in (mount, filename.lstrip("/")) if part)

async def save_image_and_meta(
    db: PocketBaseService,
    storage: LocalStorageService,
    fileobj: BinaryIO,
    filename: str,
    content_type: Optional[str],
    size: Optional[int],
    max_bytes: Optional[int] = None,
) -> ImageRecord:
    """Writes the upload to disk and records its metadata in PocketBase."""
    limit = max_bytes if max_bytes is not None else settings.max_file_size
    validate_size(size, limit)
    content_type = validate_content_type(content_type)

    stored_name = generate_filename(filename)
    try:
        await run_in_threadpool(storage.save, fileobj, stored_name, limit)
    except SizeLimitExceeded:
        raise FileTooLargeException(limit)
    except OSError as e:
        log.error(f"Writing {stored_name} failed: {e}")
        raise IOWriteException(f"Failed to store image: {e}")

    image = ImageCreate(
        name = filename,
        location = build_location(stored_name),
        mime_type = content_type,
    )
    # the file stays on disk if this fails
    try:
        record = await db.create_record(image.model_dump())
    except PocketBaseError as e:
        log.error(f"PocketBase create_record failed: {e}")
        raise MetadataPersistException(e.message)

    log.info("Saved image %s as %s", filename, image.location)
    return ImageRecord(**record)

async def fetch_images(db: PocketBaseService) -> List[dict]:
    """Fetches every image record, newest first."""
    try:
        return await db.list_records(sort="-created")
    except PocketBaseError as e:
        log.error(f"PocketBase list_records failed: {e}")
        raise ListFailedException(e.message)
