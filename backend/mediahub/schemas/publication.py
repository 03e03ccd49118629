from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from mediahub.models.publication import PublicationStatus
from .category import CategoryRef, Subcategory
from .file import File
from .tag import Tag


class PublicationBase(BaseModel):
    title: str
    slug: str
    category_id: str
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    cover_image: Optional[str] = None
    publication_date: Optional[datetime] = None
    has_comments: bool = True
    is_featured: bool = False
    is_leaderboard: bool = False


class PublicationCreate(PublicationBase):
    attachments: List[str] = []  # File IDs in display order
    tags: List[str] = []  # Free-text tag names
    subcategory_ids: List[str] = []
    author_ids: List[str] = []  # Co-author user IDs
    # Accepted for compatibility; new publications always start as draft
    status: Optional[PublicationStatus] = None
    rejection_reason: Optional[str] = None


class PublicationUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    cover_image: Optional[str] = None
    publication_date: Optional[datetime] = None
    has_comments: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_leaderboard: Optional[bool] = None
    attachments: Optional[List[str]] = None  # Replaces the full list
    tags: Optional[List[str]] = None  # Replaces the full set
    subcategory_ids: Optional[List[str]] = None
    author_ids: Optional[List[str]] = None  # Replaces the full set


class AuthorRef(BaseModel):
    id: str
    username: str
    display_name: Optional[str] = None

    class Config:
        from_attributes = True


class RejectRequest(BaseModel):
    reason: str


class Publication(PublicationBase):
    id: str
    creator_id: str
    approved_by: Optional[str] = None
    status: PublicationStatus
    rejection_reason: Optional[str] = None
    views: int
    unique_hits: int
    likes_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryRef] = None
    attachment_files: List[File] = []
    tags: List[Tag] = []
    subcategories: List[Subcategory] = []
    authors: List[AuthorRef] = []

    class Config:
        from_attributes = True


class PublicationList(BaseModel):
    items: List[Publication]
    total: int
    limit: int
    offset: int
