"""Tests for category, tag and file API endpoints."""

import pytest
from mediahub.models.category import Category


@pytest.mark.unit
class TestCategoriesAPI:
    """Test category endpoints."""

    def test_list_categories_in_menu_order(self, client, videos_category, audio_category, news_category):
        """Categories come back ordered by menu position."""
        response = client.get("/api/categories/")
        assert response.status_code == 200
        assert [c["slug"] for c in response.json()] == ["news", "videos", "audio"]

    def test_create_requires_capability(self, client, auth_headers):
        """Plain authors cannot manage categories."""
        response = client.post("/api/categories/", json={"name": "Sport"}, headers=auth_headers)
        assert response.status_code == 403

    def test_create_derives_slug(self, client, moderator_headers):
        """The slug is derived from the name when omitted."""
        response = client.post(
            "/api/categories/", json={"name": "Santé Publique"}, headers=moderator_headers
        )
        assert response.status_code == 200
        assert response.json()["slug"] == "sante-publique"

    def test_duplicate_name_rejected(self, client, moderator_headers, news_category):
        """A second category with the same name is a 400."""
        response = client.post("/api/categories/", json={"name": "News"}, headers=moderator_headers)
        assert response.status_code == 400
        assert response.json()["field"] == "name"

    def test_set_subcategories(self, client, moderator_headers, news_category):
        """Subcategory sets are replaced through PUT."""
        created = client.post(
            "/api/categories/subcategories",
            json={"name": "Outbreaks"},
            headers=moderator_headers,
        ).json()

        response = client.put(
            f"/api/categories/{news_category.id}/subcategories",
            json={"subcategory_ids": [created["id"]]},
            headers=moderator_headers,
        )
        assert response.status_code == 200
        assert [s["slug"] for s in response.json()["subcategories"]] == ["outbreaks"]

    def test_delete_unused_category(self, client, moderator_headers, db_session, audio_category):
        """Unused categories are deleted."""
        response = client.delete(f"/api/categories/{audio_category.id}", headers=moderator_headers)

        assert response.status_code == 200
        assert response.json() == {"deleted": True}
        assert db_session.query(Category).filter_by(slug="audio").count() == 0

    def test_delete_category_in_use(self, client, moderator_headers, make_publication, news_category):
        """Categories still used by publications cannot be deleted."""
        make_publication()
        make_publication()

        response = client.delete(f"/api/categories/{news_category.id}", headers=moderator_headers)

        assert response.status_code == 400
        data = response.json()
        assert data["message"].startswith("Cannot delete category: 2 publication(s)")
        assert data["field"] == "category_id"

    def test_delete_missing_category(self, client, moderator_headers):
        """Deleting an unknown category is a 404."""
        response = client.delete("/api/categories/missing", headers=moderator_headers)
        assert response.status_code == 404


@pytest.mark.unit
class TestTagsAPI:
    """Test tag endpoints."""

    def test_resolve_creates_and_reuses(self, client, auth_headers):
        """Resolving twice returns the same tags."""
        first = client.post(
            "/api/tags/resolve", json={"names": ["Ebola", "Vaccines"]}, headers=auth_headers
        )
        assert first.status_code == 200

        second = client.post(
            "/api/tags/resolve", json={"names": ["vaccines", "EBOLA"]}, headers=auth_headers
        )
        assert sorted(t["id"] for t in second.json()) == sorted(t["id"] for t in first.json())

    def test_resolve_requires_auth(self, client):
        response = client.post("/api/tags/resolve", json={"names": ["Ebola"]})
        assert response.status_code == 401

    def test_list_with_usage(self, client, make_publication):
        """Usage counts order the tag listing."""
        make_publication(tags=["Ebola", "Vaccines"])
        make_publication(tags=["Ebola"])

        response = client.get("/api/tags/")
        assert response.status_code == 200
        data = response.json()
        assert [(t["tag"]["slug"], t["usage_count"]) for t in data] == [
            ("ebola", 2),
            ("vaccines", 1),
        ]


@pytest.mark.unit
class TestFilesAPI:
    """Test file and folder endpoints."""

    def test_file_in_public_folder_is_public(self, client, auth_headers, public_folder):
        """Files created in a public folder are public whatever was requested."""
        response = client.post(
            "/api/files/",
            json={
                "filename": "logo.png",
                "mime_type": "image/png",
                "folder_id": public_folder.id,
                "access_type": "private",
            },
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["access_type"] == "public"

    def test_file_in_private_folder_keeps_request(self, client, auth_headers, private_folder):
        """Private folders do not change the requested access type."""
        response = client.post(
            "/api/files/",
            json={
                "filename": "notes.pdf",
                "mime_type": "application/pdf",
                "folder_id": private_folder.id,
            },
            headers=auth_headers,
        )
        assert response.json()["access_type"] == "private"

    def test_folder_visibility_does_not_cascade(self, client, auth_headers, test_user):
        """Making a folder private later leaves its files public."""
        folder = client.post(
            "/api/files/folders", json={"name": "Campaign", "is_public": True}, headers=auth_headers
        ).json()
        file = client.post(
            "/api/files/",
            json={"filename": "poster.jpg", "mime_type": "image/jpeg", "folder_id": folder["id"]},
            headers=auth_headers,
        ).json()

        response = client.patch(
            f"/api/files/folders/{folder['id']}/visibility",
            json={"is_public": False},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_public"] is False

        response = client.get(f"/api/files/{file['id']}", headers=auth_headers)
        assert response.json()["access_type"] == "public"

    def test_visibility_change_by_stranger_forbidden(self, client, auth_headers, public_folder):
        """Folders without an owner need the files.manage capability."""
        response = client.patch(
            f"/api/files/folders/{public_folder.id}/visibility",
            json={"is_public": False},
            headers=auth_headers,
        )
        assert response.status_code == 403

    def test_missing_file(self, client, auth_headers):
        response = client.get("/api/files/missing", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["entity"] == "File"
