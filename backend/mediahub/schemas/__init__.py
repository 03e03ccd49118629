from mediahub.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategorySubcategoriesUpdate,
    Subcategory,
    SubcategoryCreate,
)
from mediahub.schemas.tag import Tag, TagResolveRequest, TagWithUsage
from mediahub.schemas.file import File, FileCreate, Folder, FolderCreate, FolderVisibilityUpdate
from mediahub.schemas.publication import (
    Publication,
    PublicationCreate,
    PublicationUpdate,
    PublicationList,
    RejectRequest,
)
from mediahub.schemas.engagement import (
    Comment,
    CommentCreate,
    CommentResult,
    LikeResult,
    ViewCreate,
    ViewResult,
)

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategorySubcategoriesUpdate",
    "Subcategory",
    "SubcategoryCreate",
    "Tag",
    "TagResolveRequest",
    "TagWithUsage",
    "File",
    "FileCreate",
    "Folder",
    "FolderCreate",
    "FolderVisibilityUpdate",
    "Publication",
    "PublicationCreate",
    "PublicationUpdate",
    "PublicationList",
    "RejectRequest",
    "Comment",
    "CommentCreate",
    "CommentResult",
    "LikeResult",
    "ViewCreate",
    "ViewResult",
]
