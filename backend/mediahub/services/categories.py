from typing import Dict, List, Optional
from types import SimpleNamespace
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mediahub.core.database import is_unique_violation, transaction
from mediahub.core.exceptions import ConflictError, NotFoundError, ValidationError
from mediahub.models.category import Category, Subcategory, CategorySubcategory
from mediahub.models.publication import Publication, PublicationStatus
from mediahub.services import attachment_policy
from mediahub.services.slugs import normalize_slug
import logging

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("name", "slug", "description", "cover_image", "show_on_menu", "menu_order")
NON_NULLABLE_FIELDS = ("show_on_menu", "menu_order")


class CategoryService:
    """Category and subcategory management. Deletion lives in CategoryGuard."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: str) -> Category:
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def list_categories(self, menu_only: bool = False) -> List[Category]:
        query = self.db.query(Category)
        if menu_only:
            query = query.filter(Category.show_on_menu == True)
        return query.order_by(Category.menu_order, Category.name).all()

    def _check_unique(self, model, field: str, value: str, exclude_id: Optional[str] = None):
        query = self.db.query(model.id).filter(getattr(model, field) == value)
        if exclude_id:
            query = query.filter(model.id != exclude_id)
        if query.first() is not None:
            raise ValidationError(
                f"A {model.__name__.lower()} with this {field} already exists",
                field=field,
                value=value,
            )

    def create(self, data: Dict) -> Category:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required", field="name")
        slug = normalize_slug(data.get("slug") or name)
        if not slug:
            raise ValidationError("Slug is required", field="slug")

        self._check_unique(Category, "name", name)
        self._check_unique(Category, "slug", slug)

        category = Category(
            name=name,
            slug=slug,
            description=data.get("description"),
            cover_image=data.get("cover_image"),
            show_on_menu=data.get("show_on_menu", True),
            menu_order=data.get("menu_order", 0),
        )
        with transaction(self.db, "category.create", slug=slug):
            self.db.add(category)
            self._flush_unique("name", "slug")
        self.db.refresh(category)
        logger.info(f"Created category {category.id} ({slug})")
        return category

    def update(self, category_id: str, data: Dict) -> Category:
        category = self.get(category_id)
        updates = {k: v for k, v in data.items() if k in CATEGORY_FIELDS}

        for key in NON_NULLABLE_FIELDS:
            if key in updates and updates[key] is None:
                raise ValidationError(f"{key} cannot be null", field=key)

        if "name" in updates:
            updates["name"] = (updates["name"] or "").strip()
            if not updates["name"]:
                raise ValidationError("Name is required", field="name")
            self._check_unique(Category, "name", updates["name"], exclude_id=category_id)
        if "slug" in updates:
            updates["slug"] = normalize_slug(updates["slug"])
            if not updates["slug"]:
                raise ValidationError("Slug is required", field="slug")
            self._check_unique(Category, "slug", updates["slug"], exclude_id=category_id)

        if "name" in updates or "slug" in updates:
            self._check_media_family(category, updates)

        with transaction(self.db, "category.update", category_id=category_id):
            for key, value in updates.items():
                setattr(category, key, value)
            self._flush_unique("name", "slug")
        self.db.refresh(category)
        return category

    def _check_media_family(self, category: Category, updates: Dict):
        """
        Refuse a rename that moves the category into a media family its
        published content does not satisfy.

        Publications beyond draft are re-evaluated against the renamed
        category; drafts are checked when they are submitted.
        """
        renamed = SimpleNamespace(
            name=updates.get("name", category.name),
            slug=updates.get("slug", category.slug),
        )
        family = attachment_policy.media_affinity(renamed)
        if family is None or family == attachment_policy.media_affinity(category):
            return

        publications = (
            self.db.query(Publication)
            .filter(
                Publication.category_id == category.id,
                Publication.status != PublicationStatus.DRAFT.value,
            )
            .all()
        )
        failing = [
            p
            for p in publications
            if not attachment_policy.evaluate(renamed, p.attachment_files).ok
        ]
        if failing:
            field = "slug" if "slug" in updates and "name" not in updates else "name"
            raise ValidationError(
                f"Cannot make this a {family} category: {len(failing)} publication(s) "
                f"beyond draft do not lead with a {family} attachment",
                field=field,
                value=len(failing),
            )

    def create_subcategory(self, data: Dict) -> Subcategory:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required", field="name")
        slug = normalize_slug(data.get("slug") or name)
        if not slug:
            raise ValidationError("Slug is required", field="slug")
        self._check_unique(Subcategory, "slug", slug)

        subcategory = Subcategory(name=name, slug=slug, description=data.get("description"))
        with transaction(self.db, "subcategory.create", slug=slug):
            self.db.add(subcategory)
            self._flush_unique("slug")
        self.db.refresh(subcategory)
        return subcategory

    def list_subcategories(self) -> List[Subcategory]:
        return self.db.query(Subcategory).order_by(Subcategory.name).all()

    def set_subcategories(self, category_id: str, subcategory_ids: List[str]) -> Category:
        """
        Make the category's subcategory set equal to ``subcategory_ids``.

        Applied as a diff: links already present are left alone, only the
        missing ones are added and the extra ones removed.
        """
        category = self.get(category_id)
        wanted = list(dict.fromkeys(subcategory_ids))

        if wanted:
            found = {
                row.id
                for row in self.db.query(Subcategory.id)
                .filter(Subcategory.id.in_(wanted))
                .all()
            }
            for subcategory_id in wanted:
                if subcategory_id not in found:
                    raise NotFoundError("Subcategory", subcategory_id)

        current = {link.subcategory_id: link for link in category.subcategory_links}
        to_add = [sid for sid in wanted if sid not in current]
        to_remove = [link for sid, link in current.items() if sid not in wanted]

        with transaction(self.db, "category.set_subcategories", category_id=category_id):
            for link in to_remove:
                category.subcategory_links.remove(link)
            for subcategory_id in to_add:
                category.subcategory_links.append(
                    CategorySubcategory(subcategory_id=subcategory_id)
                )

        logger.info(
            f"Category {category_id} subcategories: +{len(to_add)} -{len(to_remove)}"
        )
        self.db.refresh(category)
        return category

    def _flush_unique(self, *fields: str):
        try:
            self.db.flush()
        except IntegrityError as e:
            for field in fields:
                if is_unique_violation(e, field):
                    raise ConflictError(f"Duplicate value for {field}", field=field) from e
            raise
