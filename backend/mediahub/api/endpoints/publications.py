from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging
import secrets

from mediahub.core.config import settings
from mediahub.core.database import get_db
from mediahub.core.auth import (
    CAP_PUBLICATIONS_APPROVE,
    CAP_PUBLICATIONS_DELETE,
    CAP_PUBLICATIONS_UPDATE,
    get_current_user,
    get_current_user_optional,
    require_capability,
)
from mediahub.core.logging_config import get_client_ip
from mediahub.models.engagement import PublicationComment
from mediahub.models.publication import Publication, PublicationStatus
from mediahub.models.user import User
from mediahub.schemas.publication import (
    Publication as PublicationSchema,
    PublicationCreate,
    PublicationList,
    PublicationUpdate,
    RejectRequest,
)
from mediahub.schemas.engagement import (
    Comment as CommentSchema,
    CommentCreate,
    CommentResult,
    LikeResult,
    ViewCreate,
    ViewResult,
)
from mediahub.services.counter_ledger import CounterLedger
from mediahub.services.publication_lifecycle import PublicationLifecycleManager

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def _has_capability(user: User, capability: str) -> bool:
    return capability in getattr(user, "capabilities", [])


def _ensure_owner_or(publication: Publication, user: User, capability: str):
    """Creators manage their own publications; anyone else needs ``capability``."""
    if publication.creator_id == user.id or _has_capability(user, capability):
        return
    raise HTTPException(status_code=403, detail=f"Missing capability: {capability}")


# Listing and lookup


@router.get("/", response_model=PublicationList)
def list_publications(
    status: Optional[PublicationStatus] = Query(None),
    category_id: Optional[str] = Query(None),
    creator_id: Optional[str] = Query(None),
    tag: Optional[str] = Query(None, description="Tag name or slug"),
    is_featured: Optional[bool] = Query(None),
    is_leaderboard: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Search in titles"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List publications in any status, newest first."""
    items, total = PublicationLifecycleManager(db).list_publications(
        status=status.value if status else None,
        category_id=category_id,
        creator_id=creator_id,
        tag=tag,
        is_featured=is_featured,
        is_leaderboard=is_leaderboard,
        search=search,
        limit=limit,
        offset=offset,
    )
    return {"items": items, "total": total, "limit": limit, "offset": offset}


@router.get("/published", response_model=PublicationList)
def list_published(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Public listing: approved publications only."""
    items, total = PublicationLifecycleManager(db).list_published(limit=limit, offset=offset)
    return {"items": items, "total": total, "limit": limit, "offset": offset}


@router.get("/slug/{slug}", response_model=PublicationSchema)
def get_publication_by_slug(
    slug: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Anonymous callers only see approved publications."""
    publication = PublicationLifecycleManager(db).get_by_slug(slug)
    if current_user is None and publication.status != PublicationStatus.APPROVED.value:
        raise HTTPException(status_code=404, detail="Publication not found")
    return publication


@router.get("/{publication_id}", response_model=PublicationSchema)
def get_publication(
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PublicationLifecycleManager(db).get(publication_id)


# Create / update / delete


@router.post("/", response_model=PublicationSchema)
def create_publication(
    publication: PublicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a publication.

    The new publication always starts as a draft, whatever status is sent.
    """
    return PublicationLifecycleManager(db).create(
        publication.model_dump(exclude_unset=True), creator_id=current_user.id
    )


@router.patch("/{publication_id}", response_model=PublicationSchema)
def update_publication(
    publication_id: str,
    publication_update: PublicationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partial update. Attachment, tag and subcategory lists replace the stored ones."""
    manager = PublicationLifecycleManager(db)
    _ensure_owner_or(manager.get(publication_id), current_user, CAP_PUBLICATIONS_UPDATE)
    return manager.update(publication_id, publication_update.model_dump(exclude_unset=True))


@router.delete("/{publication_id}")
def delete_publication(
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    manager = PublicationLifecycleManager(db)
    _ensure_owner_or(manager.get(publication_id), current_user, CAP_PUBLICATIONS_DELETE)
    deleted = manager.delete(publication_id, user_id=current_user.id)
    return {"deleted": deleted}


# Workflow


@router.post("/{publication_id}/submit", response_model=PublicationSchema)
def submit_publication(
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    manager = PublicationLifecycleManager(db)
    _ensure_owner_or(manager.get(publication_id), current_user, CAP_PUBLICATIONS_UPDATE)
    return manager.submit_for_review(publication_id, user_id=current_user.id)


@router.post("/{publication_id}/approve", response_model=PublicationSchema)
def approve_publication(
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_PUBLICATIONS_APPROVE)),
):
    return PublicationLifecycleManager(db).approve(publication_id, approver_id=current_user.id)


@router.post("/{publication_id}/reject", response_model=PublicationSchema)
def reject_publication(
    publication_id: str,
    rejection: RejectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_PUBLICATIONS_APPROVE)),
):
    return PublicationLifecycleManager(db).reject(
        publication_id, rejection.reason, user_id=current_user.id
    )


@router.post("/{publication_id}/unpublish", response_model=PublicationSchema)
def unpublish_publication(
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_PUBLICATIONS_UPDATE)),
):
    return PublicationLifecycleManager(db).unpublish(publication_id, user_id=current_user.id)


# Engagement


@router.post("/{publication_id}/like", response_model=LikeResult)
@limiter.limit(settings.RATE_LIMIT_ENGAGEMENT)
def like_publication(
    request: Request,
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    likes_count = CounterLedger(db).record_like(publication_id, current_user.id)
    return {"publication_id": publication_id, "liked": True, "likes_count": likes_count}


@router.delete("/{publication_id}/like", response_model=LikeResult)
@limiter.limit(settings.RATE_LIMIT_ENGAGEMENT)
def unlike_publication(
    request: Request,
    publication_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    likes_count = CounterLedger(db).remove_like(publication_id, current_user.id)
    return {"publication_id": publication_id, "liked": False, "likes_count": likes_count}


@router.get("/{publication_id}/comments", response_model=List[CommentSchema])
def list_comments(
    publication_id: str,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return CounterLedger(db).list_comments(publication_id, limit=limit, offset=offset)


@router.post("/{publication_id}/comments", response_model=CommentResult)
@limiter.limit(settings.RATE_LIMIT_ENGAGEMENT)
def create_comment(
    request: Request,
    publication_id: str,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Signed-in users comment as themselves; anonymous comments need an author name."""
    receipt = CounterLedger(db).record_comment(
        publication_id,
        comment.content,
        user_id=current_user.id if current_user else None,
        author_name=comment.author_name
        or (current_user.display_name or current_user.username if current_user else None),
        author_email=comment.author_email or (current_user.email if current_user else None),
    )
    return {"comment": receipt.comment, "comments_count": receipt.comments_count}


@router.delete("/{publication_id}/comments/{comment_id}")
def delete_comment(
    publication_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = db.get(PublicationComment, comment_id)
    if comment is None or comment.publication_id != publication_id:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.user_id != current_user.id and not _has_capability(
        current_user, CAP_PUBLICATIONS_UPDATE
    ):
        raise HTTPException(
            status_code=403, detail=f"Missing capability: {CAP_PUBLICATIONS_UPDATE}"
        )

    comments_count = CounterLedger(db).delete_comment(comment_id)
    return {"deleted": True, "comments_count": comments_count}


@router.post("/{publication_id}/views", response_model=ViewResult)
@limiter.limit(settings.RATE_LIMIT_ENGAGEMENT)
def record_view(
    request: Request,
    response: Response,
    publication_id: str,
    view: Optional[ViewCreate] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """
    Count a view.

    Anonymous viewers are tracked with a token cookie; one is issued on the
    first view when the client sends none.
    """
    viewer_token = (view.viewer_token if view else None) or request.cookies.get(
        settings.VIEWER_COOKIE_NAME
    )
    if current_user is None and not viewer_token:
        viewer_token = secrets.token_urlsafe(24)
        response.set_cookie(
            key=settings.VIEWER_COOKIE_NAME,
            value=viewer_token,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
            max_age=60 * 60 * 24 * 365,
        )

    receipt = CounterLedger(db).record_view(
        publication_id,
        user_id=current_user.id if current_user else None,
        viewer_token=None if current_user else viewer_token,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return {
        "publication_id": publication_id,
        "views": receipt.views,
        "unique_hits": receipt.unique_hits,
        "first_view": receipt.first_view,
    }
