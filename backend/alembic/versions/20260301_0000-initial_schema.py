"""initial schema

Revision ID: initial_schema
Revises:
Create Date: 2026-03-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=191), nullable=False),
        sa.Column('email', sa.String(length=191), nullable=False),
        sa.Column('display_name', sa.String(length=191), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create categories table
    op.create_table('categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=191), nullable=False),
        sa.Column('slug', sa.String(length=191), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cover_image', sa.String(length=512), nullable=True),
        sa.Column('show_on_menu', sa.Boolean(), nullable=False),
        sa.Column('menu_order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_categories_name'), 'categories', ['name'], unique=True)
    op.create_index(op.f('ix_categories_slug'), 'categories', ['slug'], unique=True)

    # Create subcategories table
    op.create_table('subcategories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=191), nullable=False),
        sa.Column('slug', sa.String(length=191), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_subcategories_slug'), 'subcategories', ['slug'], unique=True)

    # Create category_subcategories table
    op.create_table('category_subcategories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('subcategory_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['subcategory_id'], ['subcategories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_id', 'subcategory_id', name='uq_category_subcategory')
    )
    op.create_index(op.f('ix_category_subcategories_category_id'), 'category_subcategories', ['category_id'], unique=False)
    op.create_index(op.f('ix_category_subcategories_subcategory_id'), 'category_subcategories', ['subcategory_id'], unique=False)

    # Create tags table
    op.create_table('tags',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=191), nullable=False),
        sa.Column('slug', sa.String(length=191), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tags_slug'), 'tags', ['slug'], unique=True)

    # Create folders table
    op.create_table('folders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=191), nullable=False),
        sa.Column('parent_id', sa.String(length=36), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('access_type', sa.String(length=20), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['folders.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_folders_parent_id'), 'folders', ['parent_id'], unique=False)
    op.create_index(op.f('ix_folders_user_id'), 'folders', ['user_id'], unique=False)

    # Create files table
    op.create_table('files',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('filename', sa.String(length=191), nullable=False),
        sa.Column('original_name', sa.String(length=191), nullable=False),
        sa.Column('file_path', sa.String(length=512), nullable=False),
        sa.Column('thumbnail_path', sa.String(length=512), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('mime_type', sa.String(length=191), nullable=False),
        sa.Column('folder_id', sa.String(length=36), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('access_type', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['folder_id'], ['folders.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_files_folder_id'), 'files', ['folder_id'], unique=False)
    op.create_index(op.f('ix_files_user_id'), 'files', ['user_id'], unique=False)

    # Create publications table
    op.create_table('publications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=191), nullable=False),
        sa.Column('slug', sa.String(length=191), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('meta_title', sa.String(length=191), nullable=True),
        sa.Column('meta_description', sa.Text(), nullable=True),
        sa.Column('cover_image', sa.String(length=512), nullable=True),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('creator_id', sa.String(length=36), nullable=False),
        sa.Column('approved_by', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('publication_date', sa.DateTime(), nullable=True),
        sa.Column('has_comments', sa.Boolean(), nullable=False),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('is_leaderboard', sa.Boolean(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('unique_hits', sa.Integer(), nullable=False),
        sa.Column('likes_count', sa.Integer(), nullable=False),
        sa.Column('comments_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_publications_slug'), 'publications', ['slug'], unique=True)
    op.create_index(op.f('ix_publications_category_id'), 'publications', ['category_id'], unique=False)
    op.create_index(op.f('ix_publications_creator_id'), 'publications', ['creator_id'], unique=False)
    op.create_index(op.f('ix_publications_status'), 'publications', ['status'], unique=False)
    op.create_index(op.f('ix_publications_publication_date'), 'publications', ['publication_date'], unique=False)
    op.create_index(op.f('ix_publications_is_featured'), 'publications', ['is_featured'], unique=False)
    op.create_index(op.f('ix_publications_is_leaderboard'), 'publications', ['is_leaderboard'], unique=False)
    op.create_index(op.f('ix_publications_created_at'), 'publications', ['created_at'], unique=False)

    # Create publication_attachments table
    op.create_table('publication_attachments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('file_id', sa.String(length=36), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['file_id'], ['files.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('publication_id', 'file_id', name='uq_publication_attachment')
    )
    op.create_index(op.f('ix_publication_attachments_publication_id'), 'publication_attachments', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_attachments_file_id'), 'publication_attachments', ['file_id'], unique=False)

    # Create publication_tags table
    op.create_table('publication_tags',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('tag_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('publication_id', 'tag_id', name='uq_publication_tag')
    )
    op.create_index(op.f('ix_publication_tags_publication_id'), 'publication_tags', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_tags_tag_id'), 'publication_tags', ['tag_id'], unique=False)

    # Create publication_subcategories table
    op.create_table('publication_subcategories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('subcategory_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['subcategory_id'], ['subcategories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('publication_id', 'subcategory_id', name='uq_publication_subcategory')
    )
    op.create_index(op.f('ix_publication_subcategories_publication_id'), 'publication_subcategories', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_subcategories_subcategory_id'), 'publication_subcategories', ['subcategory_id'], unique=False)

    # Create publication_authors table
    op.create_table('publication_authors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('publication_id', 'user_id', name='uq_publication_author')
    )
    op.create_index(op.f('ix_publication_authors_publication_id'), 'publication_authors', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_authors_user_id'), 'publication_authors', ['user_id'], unique=False)

    # Create publication_likes table
    op.create_table('publication_likes',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('publication_id', 'user_id', name='uq_publication_like')
    )
    op.create_index(op.f('ix_publication_likes_publication_id'), 'publication_likes', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_likes_user_id'), 'publication_likes', ['user_id'], unique=False)

    # Create publication_comments table
    op.create_table('publication_comments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('author_name', sa.String(length=191), nullable=True),
        sa.Column('author_email', sa.String(length=191), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_publication_comments_publication_id'), 'publication_comments', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_comments_user_id'), 'publication_comments', ['user_id'], unique=False)
    op.create_index(op.f('ix_publication_comments_created_at'), 'publication_comments', ['created_at'], unique=False)

    # Create publication_views table
    op.create_table('publication_views',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('publication_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('viewer_token', sa.String(length=191), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['publication_id'], ['publications.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_publication_views_publication_id'), 'publication_views', ['publication_id'], unique=False)
    op.create_index(op.f('ix_publication_views_user_id'), 'publication_views', ['user_id'], unique=False)
    op.create_index(op.f('ix_publication_views_viewer_token'), 'publication_views', ['viewer_token'], unique=False)
    # One first-view row per signed-in viewer, and per token for anonymous viewers
    op.create_index(
        'uq_publication_view_user', 'publication_views', ['publication_id', 'user_id'],
        unique=True,
        sqlite_where=sa.text('user_id IS NOT NULL'),
        postgresql_where=sa.text('user_id IS NOT NULL'),
    )
    op.create_index(
        'uq_publication_view_token', 'publication_views', ['publication_id', 'viewer_token'],
        unique=True,
        sqlite_where=sa.text('user_id IS NULL AND viewer_token IS NOT NULL'),
        postgresql_where=sa.text('user_id IS NULL AND viewer_token IS NOT NULL'),
    )


def downgrade() -> None:
    op.drop_table('publication_views')
    op.drop_table('publication_comments')
    op.drop_table('publication_likes')
    op.drop_table('publication_authors')
    op.drop_table('publication_subcategories')
    op.drop_table('publication_tags')
    op.drop_table('publication_attachments')
    op.drop_table('publications')
    op.drop_table('files')
    op.drop_table('folders')
    op.drop_table('tags')
    op.drop_table('category_subcategories')
    op.drop_table('subcategories')
    op.drop_table('categories')
    op.drop_table('users')
