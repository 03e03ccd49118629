from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from mediahub.core.database import get_db
from mediahub.core.auth import CAP_FILES_MANAGE, get_current_user
from mediahub.models.user import User
from mediahub.schemas.file import (
    File as FileSchema,
    FileCreate,
    Folder as FolderSchema,
    FolderCreate,
    FolderVisibilityUpdate,
)
from mediahub.services.files import FileService

router = APIRouter()


@router.get("/", response_model=List[FileSchema])
def list_files(
    folder_id: Optional[str] = Query(None, description="Omit for the root folder"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FileService(db).list_files(folder_id)


@router.post("/", response_model=FileSchema)
def create_file(
    file: FileCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Register an uploaded file.

    Files created inside a public folder are public regardless of the
    requested access type.
    """
    return FileService(db).create_file(file.model_dump(), user_id=current_user.id)


@router.post("/folders", response_model=FolderSchema)
def create_folder(
    folder: FolderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FileService(db).create_folder(folder.model_dump(), user_id=current_user.id)


@router.get("/folders/{folder_id}", response_model=FolderSchema)
def get_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FileService(db).get_folder(folder_id)


@router.patch("/folders/{folder_id}/visibility", response_model=FolderSchema)
def set_folder_visibility(
    folder_id: str,
    payload: FolderVisibilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Files already in the folder keep their access type."""
    service = FileService(db)
    folder = service.get_folder(folder_id)
    if folder.user_id != current_user.id and CAP_FILES_MANAGE not in getattr(
        current_user, "capabilities", []
    ):
        raise HTTPException(status_code=403, detail=f"Missing capability: {CAP_FILES_MANAGE}")
    return service.set_folder_public(folder_id, payload.is_public)


@router.get("/{file_id}", response_model=FileSchema)
def get_file(
    file_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FileService(db).get_file(file_id)
