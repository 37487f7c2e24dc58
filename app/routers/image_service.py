from fastapi import APIRouter, Depends, UploadFile, File
from typing import List, Union
import logging

from app.storage.local import LocalStorageService
from app.storage.pocketbase import PocketBaseService
from app.dependencies.dependencies import get_storage_service, get_pocketbase_service
from app.image_service.service import save_image_and_meta, fetch_images
from app.image_service.models import ErrorResponse, ImageRecord, UploadResponse
from app.exceptions import NoFileProvidedException

log = logging.getLogger(__name__)

router = APIRouter(
    tags=["image-gallery"],
    responses={500: {"model": ErrorResponse}},
)

@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 415: {"model": ErrorResponse}},
)
async def upload_image(
    # a part without a filename arrives as a plain string
    image: Union[UploadFile, str, None] = File(None),
    db: PocketBaseService = Depends(get_pocketbase_service),
    storage: LocalStorageService = Depends(get_storage_service),
):
    """Stores one uploaded image on disk and records its metadata."""
    if not isinstance(image, UploadFile) or not image.filename:
        raise NoFileProvidedException()

    record = await save_image_and_meta(
        db=db,
        storage=storage,
        fileobj=image.file,
        filename=image.filename,
        content_type=image.content_type,
        size=image.size,
    )
    return UploadResponse(data=record)

@router.get("/api/images", response_model=List[ImageRecord])
async def list_images_handler(
    db: PocketBaseService = Depends(get_pocketbase_service),
):
    """Lists every image, most recent first."""
    return await fetch_images(db)
