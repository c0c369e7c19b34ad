from pydantic import BaseModel
from typing import List, Optional


class UploadOut(BaseModel):
    success: bool = True
    viewUrl: str
    qrCode: str


class AlbumImagesOut(BaseModel):
    images: List[str]


class GenerateIn(BaseModel):
    text: Optional[str] = None


class GenerateOut(BaseModel):
    success: bool = True
    qrCode: str


class ErrorOut(BaseModel):
    error: str
