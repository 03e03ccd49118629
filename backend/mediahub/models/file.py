import enum
from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Boolean,
    BigInteger,
)
from sqlalchemy.orm import relationship
from mediahub.core.database import Base, generate_uuid, utcnow


class AccessType(str, enum.Enum):
    PRIVATE = "private"
    PUBLIC = "public"


class Folder(Base):
    __tablename__ = "folders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(191), nullable=False)
    parent_id = Column(
        String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    access_type = Column(String(20), default=AccessType.PRIVATE.value, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)  # Drives file inheritance

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    parent = relationship("Folder", remote_side=[id])


class File(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    filename = Column(String(191), nullable=False)
    original_name = Column(String(191), nullable=False)
    file_path = Column(String(512), nullable=False)
    thumbnail_path = Column(String(512), nullable=True)
    file_size = Column(BigInteger, nullable=False, default=0)
    mime_type = Column(String(191), nullable=False)
    folder_id = Column(
        String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True, index=True
    )  # NULL means root
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    access_type = Column(String(20), default=AccessType.PRIVATE.value, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    folder = relationship("Folder")
