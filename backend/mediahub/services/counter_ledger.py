"""
Counter ledger for publication engagement.

``likes_count``, ``comments_count``, ``views`` and ``unique_hits`` are derived
from the like/comment/view tables. Every change is a single relative UPDATE
issued in the same unit of work as the row it accounts for, so concurrent
writers never lose increments. Decrements are floored at zero.
"""

from dataclasses import dataclass
from typing import List, Optional
from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mediahub.core.config import settings
from mediahub.core.database import transaction
from mediahub.core.exceptions import NotFoundError, ValidationError
from mediahub.models.engagement import PublicationLike, PublicationComment, PublicationView
from mediahub.models.publication import Publication
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Counters:
    views: int
    unique_hits: int
    likes_count: int
    comments_count: int


@dataclass(frozen=True)
class CommentReceipt:
    comment: PublicationComment
    comments_count: int


@dataclass(frozen=True)
class ViewReceipt:
    views: int
    unique_hits: int
    first_view: bool


class CounterLedger:
    def __init__(self, db: Session):
        self.db = db

    def _require_publication(self, publication_id: str) -> Publication:
        publication = self.db.get(Publication, publication_id)
        if publication is None:
            raise NotFoundError("Publication", publication_id)
        return publication

    def _adjust(self, publication_id: str, **deltas: int) -> None:
        values = {}
        for column_name, delta in deltas.items():
            column = getattr(Publication, column_name)
            if delta >= 0:
                values[column] = column + delta
            else:
                values[column] = case((column + delta < 0, 0), else_=column + delta)
        self.db.query(Publication).filter(Publication.id == publication_id).update(
            values, synchronize_session=False
        )

    def counters(self, publication_id: str) -> Counters:
        row = (
            self.db.query(
                Publication.views,
                Publication.unique_hits,
                Publication.likes_count,
                Publication.comments_count,
            )
            .filter(Publication.id == publication_id)
            .first()
        )
        if row is None:
            raise NotFoundError("Publication", publication_id)
        return Counters(
            views=row.views,
            unique_hits=row.unique_hits,
            likes_count=row.likes_count,
            comments_count=row.comments_count,
        )

    # Likes

    def record_like(self, publication_id: str, user_id: str) -> int:
        """Like a publication. A repeated like is a no-op. Returns likes_count."""
        self._require_publication(publication_id)

        with transaction(self.db, "like.create", publication_id=publication_id, user_id=user_id):
            already = (
                self.db.query(PublicationLike.id)
                .filter(
                    PublicationLike.publication_id == publication_id,
                    PublicationLike.user_id == user_id,
                )
                .first()
            )
            inserted = False
            if already is None:
                try:
                    with self.db.begin_nested():
                        self.db.add(
                            PublicationLike(publication_id=publication_id, user_id=user_id)
                        )
                    inserted = True
                except IntegrityError:
                    logger.debug(
                        f"Duplicate like for publication {publication_id} by {user_id}"
                    )
            if inserted:
                self._adjust(publication_id, likes_count=1)

        return self.counters(publication_id).likes_count

    def remove_like(self, publication_id: str, user_id: str) -> int:
        """Remove a like if present. Returns likes_count."""
        self._require_publication(publication_id)

        with transaction(self.db, "like.delete", publication_id=publication_id, user_id=user_id):
            removed = (
                self.db.query(PublicationLike)
                .filter(
                    PublicationLike.publication_id == publication_id,
                    PublicationLike.user_id == user_id,
                )
                .delete(synchronize_session=False)
            )
            if removed:
                self._adjust(publication_id, likes_count=-removed)

        return self.counters(publication_id).likes_count

    def has_liked(self, publication_id: str, user_id: str) -> bool:
        return (
            self.db.query(PublicationLike.id)
            .filter(
                PublicationLike.publication_id == publication_id,
                PublicationLike.user_id == user_id,
            )
            .first()
            is not None
        )

    # Comments

    def record_comment(
        self,
        publication_id: str,
        content: str,
        user_id: Optional[str] = None,
        author_name: Optional[str] = None,
        author_email: Optional[str] = None,
    ) -> CommentReceipt:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required", field="content")
        if not user_id and not (author_name or "").strip():
            raise ValidationError("Author name is required for anonymous comments", field="author_name")

        publication = self._require_publication(publication_id)
        if not publication.has_comments:
            raise ValidationError(
                "Comments are disabled for this publication", field="publication_id"
            )

        comment = PublicationComment(
            publication_id=publication_id,
            user_id=user_id,
            author_name=(author_name or "").strip() or None,
            author_email=author_email,
            content=content,
        )
        with transaction(self.db, "comment.create", publication_id=publication_id):
            self.db.add(comment)
            self.db.flush()
            self._adjust(publication_id, comments_count=1)

        self.db.refresh(comment)
        return CommentReceipt(
            comment=comment,
            comments_count=self.counters(publication_id).comments_count,
        )

    def delete_comment(self, comment_id: str) -> int:
        """Delete a comment. Returns the publication's comments_count."""
        comment = self.db.get(PublicationComment, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        publication_id = comment.publication_id

        with transaction(self.db, "comment.delete", comment_id=comment_id):
            self.db.delete(comment)
            self.db.flush()
            self._adjust(publication_id, comments_count=-1)

        return self.counters(publication_id).comments_count

    def list_comments(
        self, publication_id: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[PublicationComment]:
        self._require_publication(publication_id)
        limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        return (
            self.db.query(PublicationComment)
            .filter(PublicationComment.publication_id == publication_id)
            .order_by(PublicationComment.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    # Views

    def record_view(
        self,
        publication_id: str,
        user_id: Optional[str] = None,
        viewer_token: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ViewReceipt:
        """
        Count a view.

        Viewers are identified by user id, else viewer token, else the
        (ip address, user agent) pair. A first-seen viewer gets a view row and
        bumps both ``views`` and ``unique_hits``; a repeat viewer only bumps
        ``views``. With no identity at all the view is counted but never unique.
        """
        self._require_publication(publication_id)

        if user_id:
            # Token only identifies anonymous rows
            viewer_token = None
        first_view = not self._seen_before(
            publication_id, user_id, viewer_token, ip_address, user_agent
        )

        with transaction(self.db, "view.create", publication_id=publication_id):
            if first_view:
                try:
                    with self.db.begin_nested():
                        self.db.add(
                            PublicationView(
                                publication_id=publication_id,
                                user_id=user_id,
                                viewer_token=viewer_token,
                                ip_address=ip_address,
                                user_agent=user_agent,
                            )
                        )
                except IntegrityError:
                    # A concurrent request recorded this viewer first
                    logger.debug(f"Repeat first view for publication {publication_id}")
                    first_view = False
            if first_view:
                self._adjust(publication_id, views=1, unique_hits=1)
            else:
                self._adjust(publication_id, views=1)

        counters = self.counters(publication_id)
        return ViewReceipt(
            views=counters.views, unique_hits=counters.unique_hits, first_view=first_view
        )

    def _seen_before(
        self,
        publication_id: str,
        user_id: Optional[str],
        viewer_token: Optional[str],
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> bool:
        """True when the viewer already has a row, or has no identity at all."""
        query = self.db.query(PublicationView.id).filter(
            PublicationView.publication_id == publication_id
        )
        if user_id:
            query = query.filter(PublicationView.user_id == user_id)
        elif viewer_token:
            query = query.filter(
                PublicationView.user_id.is_(None),
                PublicationView.viewer_token == viewer_token,
            )
        elif ip_address:
            query = query.filter(PublicationView.ip_address == ip_address)
            if user_agent:
                query = query.filter(PublicationView.user_agent == user_agent)
            else:
                query = query.filter(PublicationView.user_agent.is_(None))
        else:
            return True
        return query.first() is not None
