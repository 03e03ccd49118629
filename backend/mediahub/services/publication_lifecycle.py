from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mediahub.core.config import settings
from mediahub.core.database import is_unique_violation, transaction
from mediahub.core.exceptions import ConflictError, NotFoundError, ValidationError
from mediahub.core.logging_config import log_audit_event
from mediahub.models.category import Category, Subcategory
from mediahub.models.file import File
from mediahub.models.publication import (
    Publication,
    PublicationAttachment,
    PublicationAuthor,
    PublicationStatus,
    PublicationSubcategory,
)
from mediahub.models.tag import Tag, PublicationTag
from mediahub.models.user import User
from mediahub.services import attachment_policy
from mediahub.services.slugs import require_slug
from mediahub.services.tag_resolver import TagResolver
from mediahub.services.workflow import Action, IllegalTransition, transition
import logging

logger = logging.getLogger(__name__)

# Plain columns a caller may set on create or patch on update
SCALAR_FIELDS = (
    "description",
    "meta_title",
    "meta_description",
    "cover_image",
    "publication_date",
    "has_comments",
    "is_featured",
    "is_leaderboard",
)

# Scalar fields backed by NOT NULL columns
NON_NULLABLE_FIELDS = ("has_comments", "is_featured", "is_leaderboard")


class PublicationLifecycleManager:
    """
    Owns the publication row and its join tables.

    Every mutation runs as one unit of work: attachments, tags and
    subcategories are written together with the publication row or not at
    all. Status only moves through the workflow actions.
    """

    def __init__(self, db: Session):
        self.db = db
        self.tags = TagResolver(db)

    # Reads

    def get(self, publication_id: str) -> Publication:
        publication = self.db.get(Publication, publication_id)
        if publication is None:
            raise NotFoundError("Publication", publication_id)
        return publication

    def get_by_slug(self, slug: str) -> Publication:
        publication = self.db.query(Publication).filter(Publication.slug == slug).first()
        if publication is None:
            raise NotFoundError("Publication", slug)
        return publication

    def list_publications(
        self,
        status: Optional[str] = None,
        category_id: Optional[str] = None,
        creator_id: Optional[str] = None,
        tag: Optional[str] = None,
        is_featured: Optional[bool] = None,
        is_leaderboard: Optional[bool] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Publication], int]:
        """Filtered, newest-first page of publications plus the total match count."""
        query = self.db.query(Publication)

        if status:
            try:
                status = PublicationStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'", field="status", value=status)
            query = query.filter(Publication.status == status.value)
        if category_id:
            query = query.filter(Publication.category_id == category_id)
        if creator_id:
            query = query.filter(Publication.creator_id == creator_id)
        if tag:
            query = query.filter(
                Publication.tag_links.any(
                    PublicationTag.tag.has(Tag.slug == self.tags.normalize(tag))
                )
            )
        if is_featured is not None:
            query = query.filter(Publication.is_featured == is_featured)
        if is_leaderboard is not None:
            query = query.filter(Publication.is_leaderboard == is_leaderboard)
        if search:
            query = query.filter(Publication.title.ilike(f"%{search.strip()}%"))

        total = query.count()
        limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        items = (
            query.order_by(Publication.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def list_published(
        self, limit: Optional[int] = None, offset: int = 0
    ) -> Tuple[List[Publication], int]:
        """Approved publications, most recently published first."""
        query = self.db.query(Publication).filter(
            Publication.status == PublicationStatus.APPROVED.value
        )
        total = query.count()
        limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        items = (
            query.order_by(
                func.coalesce(Publication.publication_date, Publication.created_at).desc()
            )
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    # Create / update / delete

    def create(self, data: Dict, creator_id: str) -> Publication:
        """
        Create a publication in ``draft``.

        A caller-supplied status is ignored (and logged); asking for
        ``rejected`` without a reason is still an error. The attachment
        policy is evaluated but only enforced once the publication leaves
        draft.
        """
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title")
        if not (data.get("slug") or "").strip():
            raise ValidationError("Slug is required", field="slug")
        if not data.get("category_id"):
            raise ValidationError("Category is required", field="category_id")

        requested_status = data.get("status")
        if requested_status == PublicationStatus.REJECTED.value and not (
            data.get("rejection_reason") or ""
        ).strip():
            raise ValidationError(
                "A rejection reason is required when status is rejected",
                field="rejection_reason",
            )

        category = self._get_category(data["category_id"])
        if self.db.get(User, creator_id) is None:
            raise NotFoundError("User", creator_id)

        slug = require_slug(data["slug"])
        self._ensure_slug_available(slug)

        files = self._load_files(data.get("attachments") or [])
        subcategory_ids = self._check_subcategories(data.get("subcategory_ids") or [])
        author_ids = self._check_authors(data.get("author_ids") or [])

        result = attachment_policy.evaluate(category, files)
        if not result.ok:
            logger.info(
                f"Draft '{slug}' does not satisfy the {result.family} attachment policy yet: {result.reason}"
            )
        if requested_status and requested_status != PublicationStatus.DRAFT.value:
            logger.info(
                f"Ignoring requested status '{requested_status}' for new publication '{slug}'"
            )

        publication = Publication(
            title=title,
            slug=slug,
            category_id=category.id,
            creator_id=creator_id,
            status=PublicationStatus.DRAFT.value,
            rejection_reason=None,
            **{k: data[k] for k in SCALAR_FIELDS if data.get(k) is not None},
        )

        with transaction(self.db, "publication.create", slug=slug):
            self.db.add(publication)
            self._flush_slug()
            self._replace_attachments(publication, files)
            self._replace_tags(publication, data.get("tags") or [])
            self._replace_subcategories(publication, subcategory_ids)
            self._replace_authors(publication, author_ids)

        self.db.refresh(publication)
        logger.info(f"Created publication {publication.id} ('{slug}')")
        return publication

    def update(self, publication_id: str, data: Dict) -> Publication:
        """
        Patch a publication.

        Only keys present in ``data`` are touched. ``attachments``, ``tags``,
        ``subcategory_ids`` and ``author_ids`` replace their whole set. Status
        cannot be patched; use the workflow actions.
        """
        publication = self.get(publication_id)

        if "status" in data:
            raise ValidationError(
                "Status cannot be changed directly, use the workflow actions",
                field="status",
            )

        for key in NON_NULLABLE_FIELDS:
            if key in data and data[key] is None:
                raise ValidationError(f"{key} cannot be null", field=key)

        updates = {k: data[k] for k in SCALAR_FIELDS if k in data}

        if "title" in data:
            title = (data["title"] or "").strip()
            if not title:
                raise ValidationError("Title is required", field="title")
            updates["title"] = title

        if "slug" in data:
            slug = require_slug(data["slug"])
            if slug != publication.slug:
                self._ensure_slug_available(slug, exclude_id=publication.id)
                updates["slug"] = slug

        category = publication.category
        category_changed = False
        if "category_id" in data and data["category_id"] != publication.category_id:
            if not data["category_id"]:
                raise ValidationError("Category is required", field="category_id")
            category = self._get_category(data["category_id"])
            updates["category_id"] = category.id
            category_changed = True

        files = None
        if "attachments" in data:
            files = self._load_files(data["attachments"] or [])

        subcategory_ids = None
        if "subcategory_ids" in data:
            subcategory_ids = self._check_subcategories(data["subcategory_ids"] or [])

        author_ids = None
        if "author_ids" in data:
            author_ids = self._check_authors(data["author_ids"] or [])

        if (category_changed or files is not None) and (
            publication.status != PublicationStatus.DRAFT.value
        ):
            attachment_policy.enforce(
                category, files if files is not None else publication.attachment_files
            )

        with transaction(self.db, "publication.update", publication_id=publication_id):
            for key, value in updates.items():
                setattr(publication, key, value)
            self._flush_slug()
            if files is not None:
                self._replace_attachments(publication, files)
            if "tags" in data:
                self._replace_tags(publication, data["tags"] or [])
            if subcategory_ids is not None:
                self._replace_subcategories(publication, subcategory_ids)
            if author_ids is not None:
                self._replace_authors(publication, author_ids)

        self.db.refresh(publication)
        return publication

    def delete(self, publication_id: str, user_id: Optional[str] = None) -> bool:
        """Delete a publication and its join rows. Attached files are kept."""
        publication = self.get(publication_id)
        with transaction(self.db, "publication.delete", publication_id=publication_id):
            self.db.delete(publication)

        log_audit_event(
            "publication.deleted",
            f"Publication {publication_id} deleted",
            user_id=user_id,
            publication_id=publication_id,
        )
        return True

    # Workflow

    def submit_for_review(self, publication_id: str, user_id: Optional[str] = None) -> Publication:
        publication = self.get(publication_id)
        step = self._transition(publication, Action.SUBMIT)
        attachment_policy.enforce(publication.category, publication.attachment_files)

        with transaction(self.db, "publication.submit", publication_id=publication_id):
            publication.status = step.target.value

        self._audit(publication, "submitted", user_id)
        return publication

    def approve(self, publication_id: str, approver_id: str) -> Publication:
        publication = self.get(publication_id)
        step = self._transition(publication, Action.APPROVE)
        if self.db.get(User, approver_id) is None:
            raise NotFoundError("User", approver_id)

        with transaction(self.db, "publication.approve", publication_id=publication_id):
            publication.status = step.target.value
            publication.approved_by = approver_id
            publication.rejection_reason = None

        self._audit(publication, "approved", approver_id)
        return publication

    def reject(
        self, publication_id: str, reason: str, user_id: Optional[str] = None
    ) -> Publication:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A rejection reason is required", field="rejection_reason")

        publication = self.get(publication_id)
        step = self._transition(publication, Action.REJECT)

        with transaction(self.db, "publication.reject", publication_id=publication_id):
            publication.status = step.target.value
            publication.rejection_reason = reason

        self._audit(publication, "rejected", user_id, reason=reason)
        return publication

    def unpublish(self, publication_id: str, user_id: Optional[str] = None) -> Publication:
        """Send an approved or rejected publication back to draft."""
        publication = self.get(publication_id)
        step = self._transition(publication, Action.UNPUBLISH)

        with transaction(self.db, "publication.unpublish", publication_id=publication_id):
            publication.status = step.target.value
            publication.rejection_reason = None
            publication.approved_by = None

        self._audit(publication, "unpublished", user_id, previous_status=step.current.value)
        return publication

    # Helpers

    def _transition(self, publication: Publication, action: Action):
        step = transition(publication.status, action)
        if isinstance(step, IllegalTransition):
            logger.info(
                f"Rejected {action.value} on publication {publication.id} in status {publication.status}"
            )
            raise step.to_error()
        return step

    def _audit(self, publication: Publication, event: str, user_id: Optional[str], **fields):
        log_audit_event(
            f"publication.{event}",
            f"Publication {publication.id} {event}",
            user_id=user_id,
            publication_id=publication.id,
            status=publication.status,
            **fields,
        )

    def _get_category(self, category_id: str) -> Category:
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _ensure_slug_available(self, slug: str, exclude_id: Optional[str] = None):
        query = self.db.query(Publication.id).filter(Publication.slug == slug)
        if exclude_id:
            query = query.filter(Publication.id != exclude_id)
        if query.first() is not None:
            raise ValidationError(
                "A publication with this slug already exists", field="slug", value=slug
            )

    def _flush_slug(self):
        # A concurrent writer can still take the slug between check and flush
        try:
            self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e, "slug"):
                raise ConflictError(
                    "A publication with this slug already exists", field="slug"
                ) from e
            raise

    def _load_files(self, file_ids: List[str]) -> List[File]:
        """Files for ``file_ids`` in the given order, duplicates dropped."""
        ordered = list(dict.fromkeys(file_ids))
        if not ordered:
            return []
        found = {f.id: f for f in self.db.query(File).filter(File.id.in_(ordered)).all()}
        for file_id in ordered:
            if file_id not in found:
                raise NotFoundError("File", file_id)
        return [found[file_id] for file_id in ordered]

    def _check_subcategories(self, subcategory_ids: List[str]) -> List[str]:
        ordered = list(dict.fromkeys(subcategory_ids))
        if not ordered:
            return []
        found = {
            row.id
            for row in self.db.query(Subcategory.id)
            .filter(Subcategory.id.in_(ordered))
            .all()
        }
        for subcategory_id in ordered:
            if subcategory_id not in found:
                raise NotFoundError("Subcategory", subcategory_id)
        return ordered

    def _replace_attachments(self, publication: Publication, files: List[File]):
        self.db.query(PublicationAttachment).filter(
            PublicationAttachment.publication_id == publication.id
        ).delete(synchronize_session=False)
        self.db.flush()
        for index, file in enumerate(files):
            self.db.add(
                PublicationAttachment(
                    publication_id=publication.id, file_id=file.id, display_order=index
                )
            )
        self.db.flush()
        self.db.expire(publication, ["attachments"])

    def _replace_tags(self, publication: Publication, names: List[str]):
        tags = self.tags.resolve(names)
        self.tags.assign_to_publication(publication.id, [tag.id for tag in tags])
        self.db.expire(publication, ["tag_links"])

    def _replace_subcategories(self, publication: Publication, subcategory_ids: List[str]):
        self.db.query(PublicationSubcategory).filter(
            PublicationSubcategory.publication_id == publication.id
        ).delete(synchronize_session=False)
        self.db.flush()
        for subcategory_id in subcategory_ids:
            self.db.add(
                PublicationSubcategory(
                    publication_id=publication.id, subcategory_id=subcategory_id
                )
            )
        self.db.flush()
        self.db.expire(publication, ["subcategory_links"])

    def _check_authors(self, user_ids: List[str]) -> List[str]:
        ordered = list(dict.fromkeys(user_ids))
        if not ordered:
            return []
        found = {row.id for row in self.db.query(User.id).filter(User.id.in_(ordered)).all()}
        for user_id in ordered:
            if user_id not in found:
                raise ValidationError(
                    f"Author with ID {user_id} not found", field="author_ids", value=user_id
                )
        return ordered

    def _replace_authors(self, publication: Publication, user_ids: List[str]):
        self.db.query(PublicationAuthor).filter(
            PublicationAuthor.publication_id == publication.id
        ).delete(synchronize_session=False)
        self.db.flush()
        for user_id in user_ids:
            self.db.add(PublicationAuthor(publication_id=publication.id, user_id=user_id))
        self.db.flush()
        self.db.expire(publication, ["author_links"])
