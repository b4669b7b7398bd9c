"""
Persistent store for imported content.

Every write is conflict-tolerant: inserting a row that already exists is a
no-op, never an error. That is what makes re-running or resuming an import
safe. Writes use dialect-specific INSERT ... ON CONFLICT DO NOTHING on
Postgres (production) and SQLite (tests).

In dry-run mode nothing is written; creates hand back fresh ids so the rest
of the pipeline behaves as if the writes succeeded.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from cms_import import models
from cms_import.models import UserRole, new_id

logger = logging.getLogger(__name__)

# Keeps each statement well under driver bind-parameter limits
MAX_ROWS_PER_STATEMENT = 1000


def _chunks(rows: Sequence[dict], size: int) -> Iterable[Sequence[dict]]:
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


def conflict_tolerant_insert(db: Session, model, index_elements: list[str] | None = None):
    """INSERT ... ON CONFLICT DO NOTHING for the session's dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model.__table__)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model.__table__)
    else:
        raise NotImplementedError(f"Conflict-tolerant insert not supported for dialect: {dialect}")
    return stmt.on_conflict_do_nothing(index_elements=index_elements)


class ArticleStore:
    """Read/write contract the import pipeline needs from the database."""

    def __init__(self, session_factory: sessionmaker, dry_run: bool = False):
        self._session_factory = session_factory
        self.dry_run = dry_run

    # -------------------------------------------------------------------------
    # Reads (cache preloading)
    # -------------------------------------------------------------------------

    def find_fallback_author(self, preferred_id: str | None = None) -> str | None:
        """Preferred user if it exists, else the first admin, else any user."""
        with self._session_factory() as db:
            if preferred_id:
                found = db.execute(
                    select(models.User.id).where(models.User.id == preferred_id)
                ).scalar_one_or_none()
                if found:
                    return found
                logger.warning(f"Configured author {preferred_id} not found, falling back to an admin user")

            admin = db.execute(
                select(models.User.id)
                .where(models.User.role == UserRole.ADMIN.value)
                .order_by(models.User.created_at)
                .limit(1)
            ).scalar_one_or_none()
            if admin:
                return admin

            return db.execute(
                select(models.User.id).order_by(models.User.created_at).limit(1)
            ).scalar_one_or_none()

    def load_category_keys(self) -> list[tuple[str, str, str]]:
        """(id, name_ar, slug) for every category."""
        with self._session_factory() as db:
            rows = db.execute(
                select(models.Category.id, models.Category.name_ar, models.Category.slug)
            ).all()
        return [tuple(row) for row in rows]

    def load_tag_keys(self) -> list[tuple[str, str]]:
        """(id, slug) for every tag."""
        with self._session_factory() as db:
            rows = db.execute(select(models.Tag.id, models.Tag.slug)).all()
        return [tuple(row) for row in rows]

    def load_imported_article_ids(self, import_source: str) -> set[str]:
        """Ids of articles carrying the given provenance marker."""
        with self._session_factory() as db:
            ids = db.execute(
                select(models.Article.id).where(models.Article.import_source == import_source)
            ).scalars()
            return set(ids)

    def fetch_tag_ids(self, slugs: Iterable[str]) -> dict[str, str]:
        """slug -> id for the given slugs that exist."""
        slugs = list(slugs)
        if not slugs:
            return {}
        with self._session_factory() as db:
            rows = db.execute(
                select(models.Tag.slug, models.Tag.id).where(models.Tag.slug.in_(slugs))
            ).all()
        return {slug: tag_id for slug, tag_id in rows}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create_category(self, values: dict[str, Any]) -> str:
        """
        Idempotent single-row create keyed by slug.

        Returns the id of the new row, or of the row that already held the slug.
        """
        if self.dry_run:
            return new_id()

        row = {"id": new_id(), **values}
        with self._session_factory() as db:
            stmt = (
                conflict_tolerant_insert(db, models.Category, index_elements=["slug"])
                .values(row)
                .returning(models.Category.__table__.c.id)
            )
            created = db.execute(stmt).scalar_one_or_none()
            if created is None:
                created = db.execute(
                    select(models.Category.id).where(models.Category.slug == values["slug"])
                ).scalar_one()
            db.commit()
        return created

    def insert_tags(self, rows: Sequence[dict[str, Any]]) -> list[tuple[str, str]]:
        """
        Multi-row insert of tags, skipping slugs that already exist.

        Returns:
            (id, slug) for the rows actually inserted
        """
        if not rows:
            return []
        rows = [{"id": new_id(), **row} for row in rows]
        if self.dry_run:
            return [(row["id"], row["slug"]) for row in rows]

        inserted: list[tuple[str, str]] = []
        with self._session_factory() as db:
            table = models.Tag.__table__
            for chunk in _chunks(rows, MAX_ROWS_PER_STATEMENT):
                stmt = (
                    conflict_tolerant_insert(db, models.Tag, index_elements=["slug"])
                    .values(list(chunk))
                    .returning(table.c.id, table.c.slug)
                )
                inserted.extend((tag_id, slug) for tag_id, slug in db.execute(stmt).all())
            db.commit()
        return inserted

    def insert_articles(self, articles: Sequence[dict[str, Any]], links: Sequence[dict[str, Any]]) -> set[str]:
        """
        Articles then article-tag links, in one transaction.

        Rows that conflict with existing ones (same id, slug, or link pair)
        are skipped silently. Links are only written for articles this call
        inserted.

        Returns:
            Ids of the articles actually inserted
        """
        if not articles:
            return set()
        if self.dry_run:
            return {row["id"] for row in articles}

        inserted: set[str] = set()
        with self._session_factory() as db:
            try:
                id_column = models.Article.__table__.c.id
                for chunk in _chunks(articles, MAX_ROWS_PER_STATEMENT):
                    stmt = conflict_tolerant_insert(db, models.Article).values(list(chunk)).returning(id_column)
                    inserted.update(db.execute(stmt).scalars())

                link_rows = [link for link in links if link["article_id"] in inserted]
                for chunk in _chunks(link_rows, MAX_ROWS_PER_STATEMENT):
                    db.execute(conflict_tolerant_insert(db, models.ArticleTag).values(list(chunk)))
                db.commit()
            except Exception:
                db.rollback()
                raise
        return inserted
