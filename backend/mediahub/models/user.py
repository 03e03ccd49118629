from sqlalchemy import Column, String, DateTime, Boolean
from mediahub.core.database import Base, generate_uuid, utcnow


class User(Base):
    """Identity row referenced by publications, files and engagement.

    Accounts are managed by an external identity service; this table only
    mirrors the ids and display data the publication core needs.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(191), unique=True, nullable=False, index=True)
    email = Column(String(191), unique=True, nullable=False, index=True)
    display_name = Column(String(191))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
