#!/usr/bin/env python3
"""
Script to seed a MediaHub database with sample content.

Creates a user, the Videos/Audio/News categories, a few files and one
publication per category, going through the service layer so the same
rules apply as through the API.

Usage: python3 inject_sample_data.py
"""

from mediahub.core.database import Base, SessionLocal, engine, transaction
from mediahub.core.exceptions import MediaHubError
from mediahub.models.user import User
from mediahub.services.categories import CategoryService
from mediahub.services.files import FileService
from mediahub.services.publication_lifecycle import PublicationLifecycleManager
import mediahub.models  # noqa: F401


SAMPLE_USER = {
    "username": "editor",
    "email": "editor@example.com",
    "display_name": "Sample Editor",
}

SAMPLE_CATEGORIES = [
    {"name": "News", "menu_order": 0},
    {"name": "Videos", "menu_order": 1},
    {"name": "Audio", "menu_order": 2},
]

SAMPLE_FILES = [
    {"filename": "outbreak-briefing.mp4", "mime_type": "video/mp4", "file_size": 48_000_000},
    {"filename": "weekly-podcast.mp3", "mime_type": "audio/mpeg", "file_size": 12_000_000},
    {"filename": "cover.jpg", "mime_type": "image/jpeg", "file_size": 240_000},
]

SAMPLE_PUBLICATIONS = [
    {
        "title": "Outbreak briefing",
        "category": "videos",
        "attachments": ["outbreak-briefing.mp4", "cover.jpg"],
        "tags": ["Ebola", "Briefing"],
    },
    {
        "title": "Weekly podcast, episode 1",
        "category": "audio",
        "attachments": ["weekly-podcast.mp3"],
        "tags": ["Podcast"],
    },
    {
        "title": "Vaccination campaign starts",
        "category": "news",
        "attachments": ["cover.jpg"],
        "tags": ["Vaccines", "Ebola"],
    },
]


def get_or_create_user(db) -> User:
    user = db.query(User).filter(User.username == SAMPLE_USER["username"]).first()
    if user:
        print(f"⊘ User already exists: {user.username}")
        return user

    user = User(**SAMPLE_USER)
    with transaction(db, "seed.user"):
        db.add(user)
    db.refresh(user)
    print(f"✓ Added user: {user.username} (ID: {user.id})")
    return user


def inject_sample_data():
    """Inject sample categories, files and publications."""
    print("🔌 Connecting to database...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        user = get_or_create_user(db)

        categories = CategoryService(db)
        existing = {c.slug: c for c in categories.list_categories()}
        for data in SAMPLE_CATEGORIES:
            slug = data["name"].lower()
            if slug in existing:
                print(f"⊘ Category already exists: {data['name']}")
                continue
            existing[slug] = categories.create(data)
            print(f"✓ Added category: {data['name']}")

        files = FileService(db)
        file_ids = {}
        for data in SAMPLE_FILES:
            file = files.create_file(data, user_id=user.id)
            file_ids[data["filename"]] = file.id

        manager = PublicationLifecycleManager(db)
        added_count = 0
        for data in SAMPLE_PUBLICATIONS:
            try:
                publication = manager.create(
                    {
                        "title": data["title"],
                        "slug": data["title"],
                        "category_id": existing[data["category"]].id,
                        "attachments": [file_ids[name] for name in data["attachments"]],
                        "tags": data["tags"],
                    },
                    creator_id=user.id,
                )
            except MediaHubError as e:
                print(f"⊘ Skipped '{data['title']}': {e.message}")
                continue

            manager.submit_for_review(publication.id, user_id=user.id)
            manager.approve(publication.id, approver_id=user.id)
            print(f"✓ Added publication: {publication.title} ({publication.slug})")
            added_count += 1

        print()
        print(f"✓ Successfully added {added_count} publication(s)")

    finally:
        db.close()
        print()
        print("✓ Database connection closed")


if __name__ == "__main__":
    print("=" * 60)
    print("  MediaHub Sample Data Script")
    print("=" * 60)
    print()

    inject_sample_data()
