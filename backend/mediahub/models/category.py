from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    ForeignKey,
    Boolean,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from mediahub.core.database import Base, generate_uuid, utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(191), unique=True, nullable=False, index=True)
    slug = Column(String(191), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_image = Column(String(512), nullable=True)
    show_on_menu = Column(Boolean, default=True, nullable=False)
    menu_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # No publications relationship: category deletes must reach the RESTRICT
    # foreign key without the ORM nulling publication rows first.
    subcategory_links = relationship(
        "CategorySubcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def subcategories(self):
        return sorted(
            (link.subcategory for link in self.subcategory_links),
            key=lambda s: s.name,
        )


class Subcategory(Base):
    __tablename__ = "subcategories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(191), nullable=False)
    slug = Column(String(191), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class CategorySubcategory(Base):
    __tablename__ = "category_subcategories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
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

    category = relationship("Category", back_populates="subcategory_links")
    subcategory = relationship("Subcategory")

    __table_args__ = (
        UniqueConstraint("category_id", "subcategory_id", name="uq_category_subcategory"),
    )
