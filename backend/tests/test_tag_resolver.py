"""Tests for tag resolution."""

import pytest
from mediahub.models.tag import Tag, PublicationTag
from mediahub.services.tag_resolver import TagResolver


@pytest.mark.unit
class TestTagNormalization:
    """Test tag slug normalization."""

    def test_variants_share_a_slug(self):
        """Case, accents and stray whitespace do not matter."""
        slugs = {TagResolver.normalize(n) for n in ["Ebola ", "ebola", "ÉBOLA"]}
        assert slugs == {"ebola"}

    def test_slug_length_capped(self):
        """Tag slugs are at most 50 characters."""
        assert len(TagResolver.normalize("x" * 80)) == 50


@pytest.mark.unit
class TestResolve:
    """Test resolving names to Tag rows."""

    def test_variants_resolve_to_one_tag(self, db_session):
        """Spelling variants in one call create exactly one tag."""
        tags = TagResolver(db_session).resolve(["Ebola ", "ebola", "ÉBOLA"])
        db_session.commit()

        assert len(tags) == 1
        assert tags[0].slug == "ebola"
        assert tags[0].name == "Ebola"  # First spelling wins
        assert db_session.query(Tag).count() == 1

    def test_duplicates_in_one_call(self, db_session):
        """Resolving ["A", "A", "a"] yields a single tag."""
        tags = TagResolver(db_session).resolve(["A", "A", "a"])
        db_session.commit()

        assert len(tags) == 1
        assert db_session.query(Tag).count() == 1

    def test_existing_tags_are_reused(self, db_session):
        """A second call finds the tag created by the first."""
        resolver = TagResolver(db_session)
        first = resolver.resolve(["Science"])
        db_session.commit()
        second = resolver.resolve(["science", "SCIENCE"])
        db_session.commit()

        assert [t.id for t in second] == [first[0].id]
        assert db_session.query(Tag).count() == 1

    def test_blank_names_dropped(self, db_session):
        """Empty and whitespace-only names are ignored."""
        assert TagResolver(db_session).resolve(["", "   ", None]) == []
        assert db_session.query(Tag).count() == 0

    def test_sorted_by_name(self, db_session):
        """Results come back sorted by tag name."""
        tags = TagResolver(db_session).resolve(["zeta", "Alpha", "mid"])
        db_session.commit()

        assert [t.name for t in tags] == ["Alpha", "mid", "zeta"]

    def test_concurrent_creation_is_refetched(self, db_session):
        """An insert losing a uniqueness race returns the winner's row."""
        winner = Tag(name="Race", slug="race")
        db_session.add(winner)
        db_session.commit()

        tag = TagResolver(db_session)._create("race", "race")
        db_session.commit()

        assert tag.id == winner.id
        assert db_session.query(Tag).count() == 1


@pytest.mark.unit
class TestAssignAndUsage:
    """Test publication association and usage listing."""

    def test_assign_replaces_set(self, db_session, make_publication):
        """Assigning replaces the previous tags; an empty list clears them."""
        publication = make_publication()
        resolver = TagResolver(db_session)
        tags = resolver.resolve(["one", "two"])
        resolver.assign_to_publication(publication.id, [t.id for t in tags])
        db_session.commit()
        assert db_session.query(PublicationTag).count() == 2

        resolver.assign_to_publication(publication.id, [tags[0].id, tags[0].id])
        db_session.commit()
        links = db_session.query(PublicationTag).all()
        assert [link.tag_id for link in links] == [tags[0].id]

        resolver.assign_to_publication(publication.id, [])
        db_session.commit()
        assert db_session.query(PublicationTag).count() == 0

    def test_list_with_usage(self, db_session, make_publication):
        """Most used tags come first; unused tags are still listed."""
        make_publication(tags=["popular", "rare"])
        make_publication(tags=["popular"])
        TagResolver(db_session).resolve(["unused"])
        db_session.commit()

        rows = TagResolver(db_session).list_with_usage()
        usage = [(row["tag"].slug, row["usage_count"]) for row in rows]
        assert usage == [("popular", 2), ("rare", 1), ("unused", 0)]

    def test_list_with_usage_search(self, db_session):
        """Search filters by name."""
        TagResolver(db_session).resolve(["Climate", "Sports"])
        db_session.commit()

        rows = TagResolver(db_session).list_with_usage(search="clim")
        assert [row["tag"].name for row in rows] == ["Climate"]
