from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mediahub.core.config import settings
from mediahub.core.exceptions import ConflictError
from mediahub.models.tag import Tag, PublicationTag
from mediahub.services.slugs import normalize_slug
import logging

logger = logging.getLogger(__name__)


class TagResolver:
    """
    Turns free-text tag names into persisted Tag rows.

    Tags are keyed by slug, so "Ebola ", "ebola" and "ÉBOLA" all land on the
    same row. Missing tags are created on the fly; a concurrent resolver
    creating the same tag first is absorbed by re-fetching.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def normalize(name: Optional[str]) -> str:
        return normalize_slug(name, max_length=settings.TAG_SLUG_MAX_LENGTH)

    def resolve(self, names: Iterable[str]) -> List[Tag]:
        """
        Resolve tag names to Tag rows, creating the missing ones.

        Blank names are dropped and duplicates (by slug) keep the first
        spelling seen. The result is sorted by tag name.
        """
        wanted: Dict[str, str] = {}
        for raw in names or []:
            name = (raw or "").strip()
            if not name:
                continue
            slug = self.normalize(name)
            if not slug or slug in wanted:
                continue
            wanted[slug] = name

        if not wanted:
            return []

        found = {
            tag.slug: tag
            for tag in self.db.query(Tag).filter(Tag.slug.in_(list(wanted))).all()
        }

        for slug, name in wanted.items():
            if slug not in found:
                found[slug] = self._create(slug, name)

        return sorted(found.values(), key=lambda tag: tag.name)

    def _create(self, slug: str, name: str) -> Tag:
        tag = Tag(name=name[:191], slug=slug)
        try:
            with self.db.begin_nested():
                self.db.add(tag)
        except IntegrityError:
            # Lost the race: another request inserted the same slug
            logger.info(f"Tag '{slug}' created concurrently, re-fetching")
            existing = self.db.query(Tag).filter(Tag.slug == slug).first()
            if existing is None:
                raise ConflictError(f"Could not create tag '{name}'", field="tags")
            return existing

        logger.debug(f"Created tag '{slug}'")
        return tag

    def assign_to_publication(self, publication_id: str, tag_ids: List[str]) -> None:
        """Replace the publication's tag set. An empty list clears it."""
        self.db.query(PublicationTag).filter(
            PublicationTag.publication_id == publication_id
        ).delete(synchronize_session=False)
        self.db.flush()

        seen = set()
        for tag_id in tag_ids:
            if tag_id in seen:
                continue
            seen.add(tag_id)
            self.db.add(PublicationTag(publication_id=publication_id, tag_id=tag_id))
        self.db.flush()

    def list_with_usage(self, search: Optional[str] = None, limit: int = 50) -> List[dict]:
        """Tags with their publication counts, most used first."""
        usage = func.count(PublicationTag.id)
        query = (
            self.db.query(Tag, usage.label("usage_count"))
            .outerjoin(PublicationTag, PublicationTag.tag_id == Tag.id)
            .group_by(Tag.id)
        )
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                (func.lower(Tag.name).like(pattern)) | (Tag.slug.like(pattern))
            )

        rows = query.order_by(usage.desc(), Tag.name).limit(limit).all()
        return [{"tag": tag, "usage_count": count} for tag, count in rows]
