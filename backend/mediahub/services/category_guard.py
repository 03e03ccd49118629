from dataclasses import dataclass
from typing import Union
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from mediahub.core.config import settings
from mediahub.core.database import transaction
from mediahub.core.exceptions import NotFoundError, StorageError, ValidationError
from mediahub.core.logging_config import log_audit_event
from mediahub.models.category import Category
from mediahub.models.publication import Publication
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardOk:
    pass


@dataclass(frozen=True)
class GuardBlocked:
    count: int

    @property
    def message(self) -> str:
        return (
            f"Cannot delete category: {self.count} publication(s) are using this "
            "category. Please reassign or delete the publications first."
        )


@dataclass(frozen=True)
class GuardCheckFailed:
    error: str


GuardResult = Union[GuardOk, GuardBlocked, GuardCheckFailed]

REFERENCED_MESSAGE = (
    "Cannot delete category: it is referenced by other records "
    "(publications, etc.). Please remove all references first."
)


class CategoryGuard:
    """Keeps categories that publications still point at from being deleted."""

    def __init__(self, db: Session, fail_open: bool = None):
        self.db = db
        self.fail_open = (
            settings.CATEGORY_DELETE_FAIL_OPEN if fail_open is None else fail_open
        )

    def count_publications(self, category_id: str) -> int:
        return (
            self.db.query(func.count(Publication.id))
            .filter(Publication.category_id == category_id)
            .scalar()
        )

    def can_delete(self, category_id: str) -> GuardResult:
        """
        Decide whether a category may be deleted.

        A failing count query rolls the session back and is reported as
        GuardCheckFailed; ``delete_category`` decides what that means.
        """
        try:
            count = self.count_publications(category_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            return GuardCheckFailed(error=str(e))

        if count > 0:
            return GuardBlocked(count=count)
        return GuardOk()

    def delete_category(self, category_id: str, user_id: str = None) -> bool:
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)

        outcome = self.can_delete(category_id)
        if isinstance(outcome, GuardBlocked):
            logger.info(
                f"Refusing to delete category {category_id}: {outcome.count} publication(s) reference it"
            )
            raise ValidationError(outcome.message, field="category_id", value=outcome.count)

        if isinstance(outcome, GuardCheckFailed):
            if not self.fail_open:
                logger.error(
                    f"Publication count check failed for category {category_id}, refusing delete: {outcome.error}"
                )
                raise StorageError(operation="category.delete")
            logger.warning(
                f"Publication count check failed for category {category_id}, proceeding with delete: {outcome.error}"
            )
            # The rollback in can_delete expired the instance
            category = self.db.get(Category, category_id)
            if category is None:
                raise NotFoundError("Category", category_id)

        with transaction(self.db, "category.delete", category_id=category_id):
            self.db.delete(category)
            try:
                self.db.flush()
            except IntegrityError as e:
                logger.info(f"Category {category_id} still referenced at delete time")
                raise ValidationError(REFERENCED_MESSAGE, field="category_id") from e

        log_audit_event(
            "category.deleted",
            f"Category {category_id} deleted",
            user_id=user_id,
            event_category="catalog",
            category_id=category_id,
            guard="check_failed" if isinstance(outcome, GuardCheckFailed) else "ok",
        )
        return True
