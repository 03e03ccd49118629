import enum
from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from mediahub.core.database import Base, generate_uuid, utcnow


class PublicationStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Publication(Base):
    __tablename__ = "publications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(191), nullable=False)
    slug = Column(String(191), unique=True, nullable=False, index=True)
    description = Column(Text)
    meta_title = Column(String(191))
    meta_description = Column(Text)
    cover_image = Column(String(512))  # Path or URL

    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    approved_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    # Moderation
    status = Column(
        String(20), default=PublicationStatus.DRAFT.value, nullable=False, index=True
    )
    rejection_reason = Column(Text, nullable=True)  # Set only while rejected
    publication_date = Column(DateTime, nullable=True, index=True)

    # Flags
    has_comments = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False, index=True)
    is_leaderboard = Column(Boolean, default=False, nullable=False, index=True)

    # Derived counters, maintained by the counter ledger
    views = Column(Integer, default=0, nullable=False)
    unique_hits = Column(Integer, default=0, nullable=False)
    likes_count = Column(Integer, default=0, nullable=False)
    comments_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    category = relationship("Category")
    creator = relationship("User", foreign_keys=[creator_id])
    approver = relationship("User", foreign_keys=[approved_by])

    attachments = relationship(
        "PublicationAttachment",
        back_populates="publication",
        order_by="PublicationAttachment.display_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tag_links = relationship(
        "PublicationTag",
        back_populates="publication",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    subcategory_links = relationship(
        "PublicationSubcategory",
        back_populates="publication",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    author_links = relationship(
        "PublicationAuthor",
        back_populates="publication",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    likes = relationship(
        "PublicationLike", cascade="all, delete-orphan", passive_deletes=True
    )
    comments = relationship(
        "PublicationComment", cascade="all, delete-orphan", passive_deletes=True
    )
    view_records = relationship(
        "PublicationView", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def tags(self):
        return sorted((link.tag for link in self.tag_links), key=lambda t: t.name)

    @property
    def attachment_files(self):
        """Attached files in the order the caller submitted them."""
        return [attachment.file for attachment in self.attachments]

    @property
    def subcategories(self):
        return sorted(
            (link.subcategory for link in self.subcategory_links),
            key=lambda s: s.name,
        )

    @property
    def authors(self):
        """Co-authors credited alongside the creator."""
        return sorted((link.user for link in self.author_links), key=lambda u: u.username)


class PublicationAttachment(Base):
    __tablename__ = "publication_attachments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Removing a file drops its attachment rows; removing a publication never
    # touches the file.
    file_id = Column(
        String(36),
        ForeignKey("files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    publication = relationship("Publication", back_populates="attachments")
    file = relationship("File")

    __table_args__ = (
        UniqueConstraint("publication_id", "file_id", name="uq_publication_attachment"),
    )


class PublicationSubcategory(Base):
    __tablename__ = "publication_subcategories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subcategory_id = Column(
        String(36),
        ForeignKey("subcategories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, default=utcnow)

    publication = relationship("Publication", back_populates="subcategory_links")
    subcategory = relationship("Subcategory")

    __table_args__ = (
        UniqueConstraint(
            "publication_id", "subcategory_id", name="uq_publication_subcategory"
        ),
    )


class PublicationAuthor(Base):
    __tablename__ = "publication_authors"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, default=utcnow)

    publication = relationship("Publication", back_populates="author_links")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("publication_id", "user_id", name="uq_publication_author"),
    )
