from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from mediahub.models.file import AccessType


class FolderCreate(BaseModel):
    name: str
    parent_id: Optional[str] = None
    access_type: Optional[AccessType] = None
    is_public: bool = False


class FolderVisibilityUpdate(BaseModel):
    is_public: bool


class Folder(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    access_type: AccessType
    is_public: bool
    created_at: datetime

    class Config:
        from_attributes = True


class FileCreate(BaseModel):
    """Metadata for a file already written to storage."""

    filename: str
    original_name: Optional[str] = None
    file_path: Optional[str] = None
    thumbnail_path: Optional[str] = None
    file_size: int = 0
    mime_type: str
    folder_id: Optional[str] = None
    access_type: Optional[AccessType] = None


class File(BaseModel):
    id: str
    filename: str
    original_name: str
    file_path: str
    thumbnail_path: Optional[str] = None
    file_size: int
    mime_type: str
    folder_id: Optional[str] = None
    access_type: AccessType
    created_at: datetime

    class Config:
        from_attributes = True
