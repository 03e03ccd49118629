from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from mediahub.core.config import settings
from mediahub.core.database import get_db, transaction
from mediahub.core.auth import get_current_user
from mediahub.models.user import User
from mediahub.schemas.tag import Tag as TagSchema, TagResolveRequest, TagWithUsage
from mediahub.services.tag_resolver import TagResolver

logger = logging.getLogger(__name__)
router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.get("/", response_model=List[TagWithUsage])
@limiter.limit("60/minute")
def get_tags(
    request: Request,
    search: Optional[str] = Query(None, description="Filter tags by name"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """
    Tags with usage count, for listings and autocomplete.

    Ordered by usage count (most used first), then by name.
    """
    return TagResolver(db).list_with_usage(search=search, limit=limit)


@router.post("/resolve", response_model=List[TagSchema])
def resolve_tags(
    payload: TagResolveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Resolve free-text names to tags, creating the missing ones."""
    with transaction(db, "tag.resolve"):
        tags = TagResolver(db).resolve(payload.names)
    return tags
