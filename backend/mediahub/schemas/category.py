from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class SubcategoryBase(BaseModel):
    name: str
    slug: Optional[str] = None  # Derived from name when omitted
    description: Optional[str] = None


class SubcategoryCreate(SubcategoryBase):
    pass


class Subcategory(SubcategoryBase):
    id: str
    slug: str
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryBase(BaseModel):
    name: str
    slug: Optional[str] = None  # Derived from name when omitted
    description: Optional[str] = None
    cover_image: Optional[str] = None
    show_on_menu: bool = True
    menu_order: int = 0


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    show_on_menu: Optional[bool] = None
    menu_order: Optional[int] = None


class CategorySubcategoriesUpdate(BaseModel):
    subcategory_ids: List[str]  # Replaces the full set


class Category(CategoryBase):
    id: str
    slug: str
    created_at: datetime
    updated_at: datetime
    subcategories: List[Subcategory] = []

    class Config:
        from_attributes = True


class CategoryRef(BaseModel):
    """Compact category embedded in publication responses."""

    id: str
    name: str
    slug: str

    class Config:
        from_attributes = True
