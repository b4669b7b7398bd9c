"""CMS import schema

Revision ID: 001_cms_import_schema
Revises:
Create Date: 2026-10-18

Creates the tables the story importer reads and writes: users (read only),
categories, tags, articles and the article_tags association.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_cms_import_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.Text, unique=True, nullable=False),
        sa.Column('name', sa.Text, nullable=True),
        sa.Column('role', sa.String(32), nullable=False, server_default='reader'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name_ar', sa.Text, nullable=False),
        sa.Column('name_en', sa.Text, nullable=False),
        sa.Column('slug', sa.Text, unique=True, nullable=False),
        sa.Column('color', sa.String(16), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('display_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name_ar', sa.Text, nullable=False),
        sa.Column('name_en', sa.Text, nullable=False),
        sa.Column('slug', sa.Text, unique=True, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'articles',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('subtitle', sa.Text, nullable=True),
        sa.Column('slug', sa.Text, unique=True, nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('excerpt', sa.Text, nullable=True),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('category_id', sa.String(64), sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('author_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('article_type', sa.String(16), nullable=False, server_default='news'),
        sa.Column('news_type', sa.String(16), nullable=False, server_default='regular'),
        sa.Column('publish_type', sa.String(16), nullable=False, server_default='instant'),
        sa.Column('status', sa.String(16), nullable=False, server_default='draft'),
        sa.Column('views', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_featured', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('import_source', sa.String(32), nullable=True),
        sa.Column('source_metadata', postgresql.JSONB, nullable=True),
        sa.Column('seo', postgresql.JSONB, nullable=True),
        sa.Column('published_at', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_articles_import_source', 'articles', ['import_source'])
    op.create_index('ix_articles_category_id', 'articles', ['category_id'])
    op.create_index('ix_articles_published_at', 'articles', ['published_at'])

    op.create_table(
        'article_tags',
        sa.Column('article_id', sa.String(64), sa.ForeignKey('articles.id'), primary_key=True),
        sa.Column('tag_id', sa.String(64), sa.ForeignKey('tags.id'), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table('article_tags')
    op.drop_index('ix_articles_published_at', table_name='articles')
    op.drop_index('ix_articles_category_id', table_name='articles')
    op.drop_index('ix_articles_import_source', table_name='articles')
    op.drop_table('articles')
    op.drop_table('tags')
    op.drop_table('categories')
    op.drop_table('users')
