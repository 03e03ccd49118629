from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from mediahub.core.database import Base, generate_uuid, utcnow


class PublicationLike(Base):
    __tablename__ = "publication_likes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("publication_id", "user_id", name="uq_publication_like"),
    )


class PublicationComment(Base):
    __tablename__ = "publication_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Anonymous commenters identify themselves by name/email
    author_name = Column(String(191), nullable=True)
    author_email = Column(String(191), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    user = relationship("User")


class PublicationView(Base):
    """First-seen record per viewer; repeat views only bump the counter."""

    __tablename__ = "publication_views"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    viewer_token = Column(String(191), nullable=True, index=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Viewers matched by ip and user agent only have no unique index
    __table_args__ = (
        Index(
            "uq_publication_view_user",
            "publication_id",
            "user_id",
            unique=True,
            sqlite_where=text("user_id IS NOT NULL"),
            postgresql_where=text("user_id IS NOT NULL"),
        ),
        Index(
            "uq_publication_view_token",
            "publication_id",
            "viewer_token",
            unique=True,
            sqlite_where=text("user_id IS NULL AND viewer_token IS NOT NULL"),
            postgresql_where=text("user_id IS NULL AND viewer_token IS NOT NULL"),
        ),
    )
