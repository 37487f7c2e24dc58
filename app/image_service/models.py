from typing import Optional
from pydantic import BaseModel, ConfigDict

class ImageCreate(BaseModel):
    name: str
    location: str
    mime_type: str

class ImageRecord(BaseModel):
    """An images record as returned by the metadata store; unknown store fields pass through."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    location: str
    mime_type: str
    created: Optional[str] = None
    updated: Optional[str] = None

class UploadResponse(BaseModel):
    success: bool = True
    message: str = "Image uploaded successfully"
    data: ImageRecord

class ErrorResponse(BaseModel):
    error: str
    message: str

class HealthResponse(BaseModel):
    status: str = "ok"
