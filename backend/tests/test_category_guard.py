"""Tests for category deletion guard and category management."""

import pytest
from sqlalchemy.exc import OperationalError
from mediahub.core.exceptions import (
    NotFoundError,
    StorageError,
    ValidationError,
)
from mediahub.models.category import Category, CategorySubcategory
from mediahub.services.categories import CategoryService
from mediahub.services.category_guard import (
    CategoryGuard,
    GuardBlocked,
    GuardCheckFailed,
    GuardOk,
)


def _failing_count(category_id):
    raise OperationalError("SELECT count(*) FROM publications", {}, Exception("db gone"))


@pytest.mark.unit
class TestCanDelete:
    """Test the guard decision."""

    def test_unused_category(self, db_session, news_category):
        """No referencing publications -> GuardOk."""
        assert isinstance(CategoryGuard(db_session).can_delete(news_category.id), GuardOk)

    def test_used_category(self, db_session, news_category, make_publication):
        """Referencing publications -> GuardBlocked with the count."""
        make_publication()
        make_publication()

        outcome = CategoryGuard(db_session).can_delete(news_category.id)
        assert outcome == GuardBlocked(count=2)

    def test_count_failure(self, db_session, news_category, monkeypatch):
        """A failing count query is reported, not raised."""
        guard = CategoryGuard(db_session)
        monkeypatch.setattr(guard, "count_publications", _failing_count)

        assert isinstance(guard.can_delete(news_category.id), GuardCheckFailed)


@pytest.mark.unit
class TestDeleteCategory:
    """Test category deletion."""

    def test_delete_unused(self, db_session, news_category):
        """An unused category is deleted."""
        category_id = news_category.id
        assert CategoryGuard(db_session).delete_category(category_id) is True
        assert db_session.get(Category, category_id) is None

    def test_delete_blocked_names_count(self, db_session, news_category, make_publication):
        """Deletion is refused with the number of referencing publications."""
        make_publication()

        with pytest.raises(ValidationError) as exc_info:
            CategoryGuard(db_session).delete_category(news_category.id)

        assert "1 publication(s)" in exc_info.value.message
        assert exc_info.value.field == "category_id"
        assert db_session.get(Category, news_category.id) is not None

    def test_delete_missing(self, db_session):
        """Unknown ids raise NotFoundError."""
        with pytest.raises(NotFoundError):
            CategoryGuard(db_session).delete_category("no-such-category")

    def test_fail_open_deletes_unused(self, db_session, news_category, monkeypatch):
        """With fail-open, a failed check still lets a safe delete through."""
        category_id = news_category.id
        guard = CategoryGuard(db_session, fail_open=True)
        monkeypatch.setattr(guard, "count_publications", _failing_count)

        assert guard.delete_category(category_id) is True
        assert db_session.get(Category, category_id) is None

    def test_fail_open_still_stopped_by_foreign_key(
        self, db_session, news_category, make_publication, monkeypatch
    ):
        """With fail-open, the RESTRICT foreign key is the backstop."""
        make_publication()
        guard = CategoryGuard(db_session, fail_open=True)
        monkeypatch.setattr(guard, "count_publications", _failing_count)

        with pytest.raises(ValidationError) as exc_info:
            guard.delete_category(news_category.id)

        assert "referenced by other records" in exc_info.value.message
        assert db_session.get(Category, news_category.id) is not None

    def test_fail_closed(self, db_session, news_category, monkeypatch):
        """With fail-closed, a failed check refuses the delete."""
        guard = CategoryGuard(db_session, fail_open=False)
        monkeypatch.setattr(guard, "count_publications", _failing_count)

        with pytest.raises(StorageError):
            guard.delete_category(news_category.id)
        assert db_session.get(Category, news_category.id) is not None


@pytest.mark.unit
class TestCategoryService:
    """Test category and subcategory management."""

    def test_create_derives_slug(self, db_session):
        """The slug defaults to the normalized name."""
        category = CategoryService(db_session).create({"name": "Live Music"})
        assert category.slug == "live-music"

    def test_create_duplicate_slug(self, db_session, news_category):
        """Slugs are unique."""
        with pytest.raises(ValidationError) as exc_info:
            CategoryService(db_session).create({"name": "Breaking", "slug": "news"})
        assert exc_info.value.field == "slug"

    def test_create_duplicate_name(self, db_session, news_category):
        """Names are unique."""
        with pytest.raises(ValidationError) as exc_info:
            CategoryService(db_session).create({"name": "News", "slug": "other"})
        assert exc_info.value.field == "name"

    def test_update(self, db_session, news_category):
        """Partial updates touch only the given fields."""
        updated = CategoryService(db_session).update(
            news_category.id, {"description": "Daily news", "menu_order": 5}
        )
        assert updated.description == "Daily news"
        assert updated.menu_order == 5
        assert updated.name == "News"

    def test_list_ordered_by_menu(self, db_session, news_category, videos_category, audio_category):
        """Categories are listed by menu order."""
        names = [c.name for c in CategoryService(db_session).list_categories()]
        assert names == ["News", "Videos", "Audio"]

    def test_set_subcategories_diff(self, db_session, news_category):
        """Re-assigning keeps the links that survive and swaps the rest."""
        service = CategoryService(db_session)
        local = service.create_subcategory({"name": "Local"})
        world = service.create_subcategory({"name": "World"})
        sport = service.create_subcategory({"name": "Sport"})

        service.set_subcategories(news_category.id, [local.id, world.id])
        world_link_id = (
            db_session.query(CategorySubcategory.id)
            .filter(CategorySubcategory.subcategory_id == world.id)
            .scalar()
        )

        category = service.set_subcategories(news_category.id, [world.id, sport.id])

        assert [s.name for s in category.subcategories] == ["Sport", "World"]
        kept_link_id = (
            db_session.query(CategorySubcategory.id)
            .filter(CategorySubcategory.subcategory_id == world.id)
            .scalar()
        )
        assert kept_link_id == world_link_id

    def test_set_subcategories_unknown(self, db_session, news_category):
        """Unknown subcategory ids are rejected."""
        with pytest.raises(NotFoundError):
            CategoryService(db_session).set_subcategories(news_category.id, ["missing"])

    def test_null_flags_rejected(self, db_session, news_category):
        """Explicit nulls for NOT NULL fields are a validation error, not a conflict."""
        service = CategoryService(db_session)
        for field in ("show_on_menu", "menu_order"):
            with pytest.raises(ValidationError) as exc_info:
                service.update(news_category.id, {field: None})
            assert exc_info.value.field == field


@pytest.mark.unit
class TestCategoryRenameMediaFamily:
    """Renames that change the media family re-check published content."""

    def _approved(self, manager, make_publication, moderator_user, **overrides):
        publication = make_publication(**overrides)
        manager.submit_for_review(publication.id)
        return manager.approve(publication.id, approver_id=moderator_user.id)

    def test_rename_blocked_by_approved_publication(
        self, db_session, manager, make_publication, moderator_user, news_category, image_file
    ):
        """An image-only approved publication keeps News from becoming Videos."""
        self._approved(manager, make_publication, moderator_user, attachments=[image_file.id])

        with pytest.raises(ValidationError) as exc_info:
            CategoryService(db_session).update(
                news_category.id, {"name": "Videos", "slug": "videos"}
            )

        assert exc_info.value.field == "name"
        assert "1 publication(s)" in exc_info.value.message
        db_session.refresh(news_category)
        assert news_category.name == "News"

    def test_slug_only_change_names_slug(
        self, db_session, manager, make_publication, moderator_user, news_category
    ):
        """A slug-only rename reports the slug field."""
        self._approved(manager, make_publication, moderator_user)

        with pytest.raises(ValidationError) as exc_info:
            CategoryService(db_session).update(news_category.id, {"slug": "audio-news"})
        assert exc_info.value.field == "slug"

    def test_rename_allowed_when_content_matches(
        self, db_session, manager, make_publication, moderator_user, news_category, video_file
    ):
        """Video-first publications may move into a video category."""
        self._approved(manager, make_publication, moderator_user, attachments=[video_file.id])

        updated = CategoryService(db_session).update(news_category.id, {"name": "News Videos"})
        assert updated.name == "News Videos"

    def test_drafts_do_not_block_rename(
        self, db_session, make_publication, news_category, image_file
    ):
        """Drafts are checked on submit, not on rename."""
        make_publication(attachments=[image_file.id])

        updated = CategoryService(db_session).update(
            news_category.id, {"name": "Videos", "slug": "videos"}
        )
        assert updated.slug == "videos"
