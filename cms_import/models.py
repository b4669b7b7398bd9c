# cms_import/models.py
"""
Import target database models

Tables:
- User: Platform users (read only here, used for the fallback author)
- Category: News categories, one per external section slug
- Tag: Free-form tags, one per stable slug
- Article: Imported stories; primary key is the upstream story id
- ArticleTag: Article <-> tag association
"""

from datetime import datetime
from enum import Enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from cms_import.database import Base

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def new_id() -> str:
    return str(uuid.uuid4())


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class ArticleType(str, Enum):
    """Editorial classification of an article."""
    NEWS = "news"
    OPINION = "opinion"


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class UserRole(str, Enum):
    READER = "reader"
    EDITOR = "editor"
    ADMIN = "admin"


# -----------------------------------------------------------------------------
# User
# -----------------------------------------------------------------------------

class User(Base):
    """Platform users. The importer only reads this table."""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=new_id)
    email = Column(Text, unique=True, nullable=False)
    name = Column(Text, nullable=True)
    role = Column(String(32), default=UserRole.READER.value, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# -----------------------------------------------------------------------------
# Category
# -----------------------------------------------------------------------------

class Category(Base):
    """News categories. Slug is the stable external key."""
    __tablename__ = "categories"

    id = Column(String(64), primary_key=True, default=new_id)
    name_ar = Column(Text, nullable=False)
    name_en = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False)
    color = Column(String(16), nullable=True)
    status = Column(String(16), default="active", nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# -----------------------------------------------------------------------------
# Tag
# -----------------------------------------------------------------------------

class Tag(Base):
    """Tags. Slug is derived from the tag name and is unique."""
    __tablename__ = "tags"

    id = Column(String(64), primary_key=True, default=new_id)
    name_ar = Column(Text, nullable=False)
    name_en = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# -----------------------------------------------------------------------------
# Article
# -----------------------------------------------------------------------------

class Article(Base):
    """
    Articles.

    Imported rows keep the upstream story id as their primary key so that
    re-running an import is naturally idempotent. `import_source` is the
    provenance marker used to scope dedup preloading.
    """
    __tablename__ = "articles"

    id = Column(String(64), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    subtitle = Column(Text, nullable=True)
    slug = Column(Text, unique=True, nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    category_id = Column(String(64), ForeignKey("categories.id"), nullable=True)
    author_id = Column(String(64), ForeignKey("users.id"), nullable=False)

    article_type = Column(String(16), default=ArticleType.NEWS.value, nullable=False)
    news_type = Column(String(16), default="regular", nullable=False)
    publish_type = Column(String(16), default="instant", nullable=False)
    status = Column(String(16), default=ArticleStatus.DRAFT.value, nullable=False)
    views = Column(Integer, default=0, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)

    # Provenance
    import_source = Column(String(32), nullable=True)  # e.g. "quintype"
    source_metadata = Column(JSONType, nullable=True)  # {"type", "original_id", "message"}
    seo = Column(JSONType, nullable=True)

    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_articles_import_source", "import_source"),
        Index("ix_articles_category_id", "category_id"),
        Index("ix_articles_published_at", "published_at"),
    )


# -----------------------------------------------------------------------------
# ArticleTag
# -----------------------------------------------------------------------------

class ArticleTag(Base):
    """Article-tag association. The pair is the primary key."""
    __tablename__ = "article_tags"

    article_id = Column(String(64), ForeignKey("articles.id"), primary_key=True)
    tag_id = Column(String(64), ForeignKey("tags.id"), primary_key=True)
