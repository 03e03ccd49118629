"""
Pytest configuration and fixtures for MediaHub tests.
"""

import os

# Settings are read at import time; these must be in place before any
# mediahub module is imported.
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("COOKIE_SECURE", "false")

import pytest
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from mediahub.core.database import Base, get_db
from mediahub.core.auth import (
    CAP_CATEGORIES_MANAGE,
    CAP_FILES_MANAGE,
    CAP_PUBLICATIONS_APPROVE,
    CAP_PUBLICATIONS_DELETE,
    CAP_PUBLICATIONS_UPDATE,
    create_access_token,
)
from mediahub.models.user import User
from mediahub.models.category import Category
from mediahub.models.file import AccessType, File, Folder
from mediahub.services.publication_lifecycle import PublicationLifecycleManager
import mediahub.models  # noqa: F401


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

MODERATOR_CAPABILITIES = [
    CAP_PUBLICATIONS_APPROVE,
    CAP_PUBLICATIONS_UPDATE,
    CAP_PUBLICATIONS_DELETE,
    CAP_CATEGORIES_MANAGE,
    CAP_FILES_MANAGE,
]


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_app(db_session):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from mediahub.api.endpoints import categories, files, publications, tags
    from mediahub.api.errors import install_error_handlers

    # Create app without lifespan to avoid event loop issues
    test_app = FastAPI(title="MediaHub - Test", version="1.0.0")
    install_error_handlers(test_app)

    test_app.include_router(
        publications.router, prefix="/api/publications", tags=["publications"]
    )
    test_app.include_router(
        categories.router, prefix="/api/categories", tags=["categories"]
    )
    test_app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
    test_app.include_router(files.router, prefix="/api/files", tags=["files"])

    @test_app.get("/health")
    def health():
        return {"status": "ok"}

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(scope="function")
def test_user(db_session) -> User:
    """Create a test user (a plain author)."""
    user = User(
        username="author",
        email="author@example.com",
        display_name="Test Author",
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def moderator_user(db_session) -> User:
    """Create a second user who acts as moderator."""
    user = User(
        username="moderator",
        email="moderator@example.com",
        display_name="Moderator",
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def auth_headers(test_user) -> dict:
    """Bearer headers for the author, without capabilities."""
    access_token = create_access_token(data={"sub": test_user.id})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def authenticated_client(client, test_user) -> TestClient:
    """Client authenticated as the author via the auth cookie."""
    access_token = create_access_token(data={"sub": test_user.id})
    client.cookies.set("auth_token", access_token)
    return client


@pytest.fixture(scope="function")
def moderator_headers(moderator_user) -> dict:
    """Bearer headers for the moderator with every capability."""
    access_token = create_access_token(
        data={"sub": moderator_user.id}, capabilities=MODERATOR_CAPABILITIES
    )
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def videos_category(db_session) -> Category:
    category = Category(name="Videos", slug="videos", menu_order=1)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def audio_category(db_session) -> Category:
    category = Category(name="Audio", slug="audio", menu_order=2)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture(scope="function")
def news_category(db_session) -> Category:
    category = Category(name="News", slug="news", menu_order=0)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


def _make_file(db_session, filename: str, mime_type: str) -> File:
    file = File(
        filename=filename,
        original_name=filename,
        file_path=f"uploads/{filename}",
        file_size=1024,
        mime_type=mime_type,
        access_type=AccessType.PRIVATE.value,
    )
    db_session.add(file)
    db_session.commit()
    db_session.refresh(file)
    return file


@pytest.fixture(scope="function")
def image_file(db_session) -> File:
    return _make_file(db_session, "cover.png", "image/png")


@pytest.fixture(scope="function")
def video_file(db_session) -> File:
    return _make_file(db_session, "clip.mp4", "video/mp4")


@pytest.fixture(scope="function")
def audio_file(db_session) -> File:
    return _make_file(db_session, "episode.mp3", "audio/mpeg")


@pytest.fixture(scope="function")
def public_folder(db_session) -> Folder:
    folder = Folder(name="Press kit", is_public=True, access_type=AccessType.PUBLIC.value)
    db_session.add(folder)
    db_session.commit()
    db_session.refresh(folder)
    return folder


@pytest.fixture(scope="function")
def private_folder(db_session) -> Folder:
    folder = Folder(name="Drafts", is_public=False)
    db_session.add(folder)
    db_session.commit()
    db_session.refresh(folder)
    return folder


@pytest.fixture(scope="function")
def manager(db_session) -> PublicationLifecycleManager:
    return PublicationLifecycleManager(db_session)


@pytest.fixture(scope="function")
def make_publication(manager, test_user, news_category):
    """Factory creating draft publications (News category unless given)."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "title": f"Publication {counter['n']}",
            "slug": f"publication-{counter['n']}",
            "category_id": news_category.id,
        }
        data.update(overrides)
        return manager.create(data, creator_id=test_user.id)

    return _make
