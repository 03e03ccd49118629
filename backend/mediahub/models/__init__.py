from .user import User
from .category import Category, Subcategory, CategorySubcategory
from .tag import Tag, PublicationTag
from .file import AccessType, Folder, File
from .publication import (
    PublicationStatus,
    Publication,
    PublicationAttachment,
    PublicationAuthor,
    PublicationSubcategory,
)
from .engagement import PublicationLike, PublicationComment, PublicationView

__all__ = [
    "User",
    "Category",
    "Subcategory",
    "CategorySubcategory",
    "Tag",
    "PublicationTag",
    "AccessType",
    "Folder",
    "File",
    "PublicationStatus",
    "Publication",
    "PublicationAttachment",
    "PublicationAuthor",
    "PublicationSubcategory",
    "PublicationLike",
    "PublicationComment",
    "PublicationView",
]
