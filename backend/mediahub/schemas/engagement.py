from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional


class LikeResult(BaseModel):
    publication_id: str
    liked: bool
    likes_count: int


class CommentCreate(BaseModel):
    content: str
    author_name: Optional[str] = None
    author_email: Optional[str] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if len(v) > 10000:
            raise ValueError("Comment cannot exceed 10000 characters")
        return v


class Comment(BaseModel):
    id: str
    publication_id: str
    user_id: Optional[str] = None
    author_name: Optional[str] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class CommentResult(BaseModel):
    comment: Comment
    comments_count: int


class ViewCreate(BaseModel):
    viewer_token: Optional[str] = None  # Falls back to the viewer cookie


class ViewResult(BaseModel):
    publication_id: str
    views: int
    unique_hits: int
    first_view: bool
