from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from mediahub.core.database import get_db
from mediahub.core.auth import CAP_CATEGORIES_MANAGE, require_capability
from mediahub.models.user import User
from mediahub.schemas.category import (
    Category as CategorySchema,
    CategoryCreate,
    CategorySubcategoriesUpdate,
    CategoryUpdate,
    Subcategory as SubcategorySchema,
    SubcategoryCreate,
)
from mediahub.services.categories import CategoryService
from mediahub.services.category_guard import CategoryGuard

router = APIRouter()


@router.get("/", response_model=List[CategorySchema])
def get_categories(menu_only: bool = False, db: Session = Depends(get_db)):
    """Categories ordered by menu position."""
    return CategoryService(db).list_categories(menu_only=menu_only)


@router.get("/subcategories", response_model=List[SubcategorySchema])
def get_subcategories(db: Session = Depends(get_db)):
    return CategoryService(db).list_subcategories()


@router.post("/subcategories", response_model=SubcategorySchema)
def create_subcategory(
    subcategory: SubcategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_CATEGORIES_MANAGE)),
):
    return CategoryService(db).create_subcategory(subcategory.model_dump())


@router.get("/{category_id}", response_model=CategorySchema)
def get_category(category_id: str, db: Session = Depends(get_db)):
    return CategoryService(db).get(category_id)


@router.post("/", response_model=CategorySchema)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_CATEGORIES_MANAGE)),
):
    """Create a category. The slug is derived from the name when omitted."""
    return CategoryService(db).create(category.model_dump())


@router.patch("/{category_id}", response_model=CategorySchema)
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_CATEGORIES_MANAGE)),
):
    return CategoryService(db).update(
        category_id, category_update.model_dump(exclude_unset=True)
    )


@router.put("/{category_id}/subcategories", response_model=CategorySchema)
def set_category_subcategories(
    category_id: str,
    payload: CategorySubcategoriesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_CATEGORIES_MANAGE)),
):
    """Replace the category's subcategory set (applied as a diff)."""
    return CategoryService(db).set_subcategories(category_id, payload.subcategory_ids)


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(CAP_CATEGORIES_MANAGE)),
):
    """
    Delete a category.

    Refused with a 400 while any publication still uses the category.
    """
    deleted = CategoryGuard(db).delete_category(category_id, user_id=current_user.id)
    return {"deleted": deleted}
