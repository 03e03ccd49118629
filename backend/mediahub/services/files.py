from typing import Dict, List, Optional, Union
from sqlalchemy.orm import Session
from mediahub.core.config import settings
from mediahub.core.database import transaction
from mediahub.core.exceptions import NotFoundError, ValidationError
from mediahub.models.file import AccessType, Folder, File
import logging

logger = logging.getLogger(__name__)


def effective_access_type(
    requested: Optional[Union[AccessType, str]], parent_folder: Optional[Folder]
) -> AccessType:
    """
    Access type a new file or folder gets when created under ``parent_folder``.

    A public parent forces ``public``. Otherwise the requested type is kept,
    defaulting to ``private``. This is applied once at creation time; later
    changes to the folder do not reach existing children.
    """
    if parent_folder is not None and parent_folder.is_public:
        return AccessType.PUBLIC
    if requested is None:
        return AccessType.PRIVATE
    try:
        return AccessType(requested)
    except ValueError:
        raise ValidationError(
            f"Unknown access type '{requested}'", field="access_type", value=requested
        )


class FileService:
    """File and folder records. Physical storage is handled elsewhere."""

    def __init__(self, db: Session):
        self.db = db

    def get_folder(self, folder_id: str) -> Folder:
        folder = self.db.get(Folder, folder_id)
        if folder is None:
            raise NotFoundError("Folder", folder_id)
        return folder

    def get_file(self, file_id: str) -> File:
        file = self.db.get(File, file_id)
        if file is None:
            raise NotFoundError("File", file_id)
        return file

    def list_files(self, folder_id: Optional[str] = None) -> List[File]:
        query = self.db.query(File)
        if folder_id is None:
            query = query.filter(File.folder_id.is_(None))
        else:
            query = query.filter(File.folder_id == folder_id)
        return query.order_by(File.created_at.desc()).all()

    def create_folder(self, data: Dict, user_id: Optional[str] = None) -> Folder:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Folder name is required", field="name")

        parent = None
        if data.get("parent_id"):
            parent = self.get_folder(data["parent_id"])

        access = effective_access_type(data.get("access_type"), parent)
        # A folder inside a public folder is public itself
        is_public = bool(data.get("is_public")) or (parent is not None and parent.is_public)
        if is_public:
            access = AccessType.PUBLIC

        folder = Folder(
            name=name,
            parent_id=parent.id if parent else None,
            user_id=user_id,
            access_type=access.value,
            is_public=is_public,
        )
        with transaction(self.db, "folder.create", parent_id=folder.parent_id):
            self.db.add(folder)
        self.db.refresh(folder)
        return folder

    def create_file(self, data: Dict, user_id: Optional[str] = None) -> File:
        filename = (data.get("filename") or "").strip()
        if not filename:
            raise ValidationError("Filename is required", field="filename")
        mime_type = (data.get("mime_type") or "").strip().lower()
        if not mime_type:
            raise ValidationError("MIME type is required", field="mime_type")
        file_size = data.get("file_size") or 0
        if file_size < 0 or file_size > settings.MAX_FILE_SIZE:
            raise ValidationError(
                f"File size must be between 0 and {settings.MAX_FILE_SIZE} bytes",
                field="file_size",
                value=file_size,
            )

        folder = None
        if data.get("folder_id"):
            folder = self.get_folder(data["folder_id"])

        requested = data.get("access_type")
        access = effective_access_type(requested, folder)
        if requested and access.value != requested:
            logger.info(
                f"File '{filename}' created in public folder {folder.id}: access forced to public"
            )

        file = File(
            filename=filename,
            original_name=data.get("original_name") or filename,
            file_path=data.get("file_path") or filename,
            thumbnail_path=data.get("thumbnail_path"),
            file_size=file_size,
            mime_type=mime_type,
            folder_id=folder.id if folder else None,
            user_id=user_id,
            access_type=access.value,
        )
        with transaction(self.db, "file.create", folder_id=file.folder_id):
            self.db.add(file)
        self.db.refresh(file)
        return file

    def set_folder_public(self, folder_id: str, is_public: bool) -> Folder:
        """Change only the folder row; files already inside keep their access type."""
        folder = self.get_folder(folder_id)
        with transaction(self.db, "folder.set_public", folder_id=folder_id):
            folder.is_public = is_public
            folder.access_type = (AccessType.PUBLIC if is_public else AccessType.PRIVATE).value
        self.db.refresh(folder)
        return folder
