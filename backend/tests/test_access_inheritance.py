"""Tests for folder -> file access inheritance."""

import pytest
from types import SimpleNamespace
from mediahub.core.config import settings
from mediahub.core.exceptions import NotFoundError, ValidationError
from mediahub.models.file import AccessType
from mediahub.services.files import FileService, effective_access_type


@pytest.mark.unit
class TestEffectiveAccessType:
    """Test the pure resolver."""

    def test_root_defaults_to_private(self):
        """No folder and no request -> private."""
        assert effective_access_type(None, None) is AccessType.PRIVATE

    def test_root_keeps_request(self):
        """No folder -> the requested type is used."""
        assert effective_access_type("public", None) is AccessType.PUBLIC

    def test_public_folder_forces_public(self):
        """A public parent overrides a private request."""
        folder = SimpleNamespace(is_public=True)
        assert effective_access_type(AccessType.PRIVATE, folder) is AccessType.PUBLIC

    def test_private_folder_keeps_request(self):
        """A non-public parent leaves the request alone."""
        folder = SimpleNamespace(is_public=False)
        assert effective_access_type("public", folder) is AccessType.PUBLIC
        assert effective_access_type(None, folder) is AccessType.PRIVATE

    def test_unknown_type(self):
        """Unknown access types are rejected."""
        with pytest.raises(ValidationError):
            effective_access_type("secret", None)


@pytest.mark.unit
class TestFileService:
    """Test inheritance applied at creation time."""

    def test_file_in_public_folder(self, db_session, public_folder):
        """Requested private inside a public folder -> public."""
        file = FileService(db_session).create_file(
            {
                "filename": "logo.png",
                "mime_type": "image/png",
                "folder_id": public_folder.id,
                "access_type": "private",
            }
        )
        assert file.access_type == AccessType.PUBLIC.value

    def test_file_in_private_folder(self, db_session, private_folder):
        """Inside a non-public folder the default stays private."""
        file = FileService(db_session).create_file(
            {"filename": "notes.txt", "mime_type": "text/plain", "folder_id": private_folder.id}
        )
        assert file.access_type == AccessType.PRIVATE.value

    def test_file_in_private_folder_requested_public(self, db_session, private_folder):
        """Inside a non-public folder a public request is honoured."""
        file = FileService(db_session).create_file(
            {
                "filename": "flyer.pdf",
                "mime_type": "application/pdf",
                "folder_id": private_folder.id,
                "access_type": "public",
            }
        )
        assert file.access_type == AccessType.PUBLIC.value

    def test_existing_files_not_updated_when_folder_turns_public(
        self, db_session, private_folder
    ):
        """Inheritance is copy-on-create: old files keep their access type."""
        service = FileService(db_session)
        before = service.create_file(
            {"filename": "a.png", "mime_type": "image/png", "folder_id": private_folder.id}
        )

        service.set_folder_public(private_folder.id, True)
        after = service.create_file(
            {"filename": "b.png", "mime_type": "image/png", "folder_id": private_folder.id}
        )

        db_session.refresh(before)
        assert before.access_type == AccessType.PRIVATE.value
        assert after.access_type == AccessType.PUBLIC.value

    def test_existing_files_not_updated_when_folder_turns_private(
        self, db_session, public_folder
    ):
        """Making a folder private leaves its public files public."""
        service = FileService(db_session)
        file = service.create_file(
            {"filename": "c.png", "mime_type": "image/png", "folder_id": public_folder.id}
        )

        folder = service.set_folder_public(public_folder.id, False)

        db_session.refresh(file)
        assert folder.is_public is False
        assert file.access_type == AccessType.PUBLIC.value

    def test_subfolder_of_public_folder_is_public(self, db_session, public_folder):
        """Folders inherit the public flag from their parent."""
        folder = FileService(db_session).create_folder(
            {"name": "Photos", "parent_id": public_folder.id}
        )
        assert folder.is_public is True
        assert folder.access_type == AccessType.PUBLIC.value

    def test_unknown_folder(self, db_session):
        """Creating a file in a missing folder raises NotFoundError."""
        with pytest.raises(NotFoundError):
            FileService(db_session).create_file(
                {"filename": "x.png", "mime_type": "image/png", "folder_id": "missing"}
            )

    def test_mime_type_required(self, db_session):
        """Files need a MIME type."""
        with pytest.raises(ValidationError) as exc_info:
            FileService(db_session).create_file({"filename": "x"})
        assert exc_info.value.field == "mime_type"

    def test_file_size_limit(self, db_session):
        """Files above the configured maximum size are refused."""
        with pytest.raises(ValidationError) as exc_info:
            FileService(db_session).create_file(
                {
                    "filename": "huge.mov",
                    "mime_type": "video/quicktime",
                    "file_size": settings.MAX_FILE_SIZE + 1,
                }
            )
        assert exc_info.value.field == "file_size"
