# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import gzip
import json
import os
from datetime import datetime

import pytest

# Set test environment
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from cms_import import models  # noqa: E402
from cms_import.config import Settings  # noqa: E402
from cms_import.database import create_db_engine, init_db, make_session_factory  # noqa: E402
from cms_import.services.article_store import ArticleStore  # noqa: E402
from cms_import.storage.local_provider import LocalCheckpointStore  # noqa: E402


def make_story(story_id, **overrides) -> dict:
    """A minimal valid export record, in the CMS's hyphenated key format."""
    story = {
        "id": str(story_id),
        "headline": f"Headline {story_id}",
        "slug": f"story-{story_id}",
        "story-template": "text",
        "summary": f"Summary {story_id}",
        "hero-image-s3-key": f"sabq/2024-01/{story_id}.jpg",
        "sections": [{"id": 1, "slug": "technology", "name": "تقنية"}],
        "tags": [{"id": 10, "name": "Riyadh Season"}],
        "cards": [
            {
                "story-elements": [
                    {"type": "text", "text": f"<p>Body {story_id}</p>"},
                ]
            }
        ],
        "created-at": 1704067200000,
        "updated-at": 1704067200000,
        "published-at": 1704067200000,
    }
    story.update(overrides)
    return story


def write_export(path, lines, compress: bool = False):
    """Write records (dicts) or raw strings as one line each."""
    text = "\n".join(line if isinstance(line, str) else json.dumps(line, ensure_ascii=False) for line in lines)
    text += "\n"
    if compress:
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(text)
    else:
        path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with the import schema."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def admin_user(session_factory):
    with session_factory() as db:
        user = models.User(
            id="admin-1",
            email="admin@example.com",
            name="Admin",
            role=models.UserRole.ADMIN.value,
            created_at=datetime(2024, 1, 1),
        )
        db.add(user)
        db.commit()
    return "admin-1"


@pytest.fixture
def store(session_factory):
    return ArticleStore(session_factory)


@pytest.fixture
def checkpoint_store(tmp_path):
    return LocalCheckpointStore(base_path=str(tmp_path / "checkpoints"))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        LOCAL_STORAGE_PATH=str(tmp_path / "checkpoints"),
        IMPORT_ERROR_LOG=str(tmp_path / "errors.log"),
        IMPORT_PROGRESS_KEY="cms_import/progress.json",
        IMPORT_CHECKPOINT_EVERY=500,
        IMPORT_IMAGE_BASE_URL="https://images.example.com/",
        IMPORT_SOURCE_MARKER="quintype",
        _env_file=None,
    )


@pytest.fixture
def story_factory():
    return make_story


@pytest.fixture
def export_writer():
    return write_export
