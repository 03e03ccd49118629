from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from mediahub.core.database import Base, generate_uuid, utcnow


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(191), nullable=False)  # Display name, first casing seen
    slug = Column(String(191), unique=True, nullable=False, index=True)  # Dedup key

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class PublicationTag(Base):
    __tablename__ = "publication_tags"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    publication_id = Column(
        String(36),
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_id = Column(
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime, default=utcnow)

    publication = relationship("Publication", back_populates="tag_links")
    tag = relationship("Tag")

    __table_args__ = (
        UniqueConstraint("publication_id", "tag_id", name="uq_publication_tag"),
    )
