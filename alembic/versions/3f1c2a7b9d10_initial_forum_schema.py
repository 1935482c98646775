"""Initial forum schema

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7b9d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('mobile_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'forum_categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('forum_categories.id'), nullable=True),
        sa.Column('city', sa.String(length=50), nullable=True),
        sa.Column('state', sa.String(length=50), nullable=True),
        sa.Column('property_type', sa.String(length=30), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('parent_id', 'slug', name='uq_forum_categories_parent_slug'),
    )
    op.create_index('ix_forum_categories_id', 'forum_categories', ['id'])
    op.create_index('ix_forum_categories_parent_id', 'forum_categories', ['parent_id'])
    op.create_index('ix_forum_categories_display_order', 'forum_categories', ['display_order'])
    op.create_index('ix_forum_categories_city', 'forum_categories', ['city'])
    op.create_index(
        'uq_forum_categories_root_slug',
        'forum_categories',
        ['slug'],
        unique=True,
        postgresql_where=sa.text('parent_id IS NULL'),
        sqlite_where=sa.text('parent_id IS NULL'),
    )

    op.create_table(
        'forum_posts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False, unique=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('forum_categories.id'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_sticky', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reply_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reply_at', sa.DateTime(), nullable=True),
        sa.Column('last_reply_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_forum_posts_id', 'forum_posts', ['id'])
    op.create_index('ix_forum_posts_category_id', 'forum_posts', ['category_id'])
    op.create_index('ix_forum_posts_author_id', 'forum_posts', ['author_id'])
    op.create_index('ix_forum_posts_created_at', 'forum_posts', ['created_at'])
    op.create_index('ix_forum_posts_listing', 'forum_posts', ['is_sticky', 'last_reply_at', 'created_at'])

    op.create_table(
        'forum_replies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('post_id', sa.Integer(), sa.ForeignKey('forum_posts.id'), nullable=False),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('forum_replies.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_forum_replies_id', 'forum_replies', ['id'])
    op.create_index('ix_forum_replies_post_id', 'forum_replies', ['post_id'])
    op.create_index('ix_forum_replies_author_id', 'forum_replies', ['author_id'])
    op.create_index('ix_forum_replies_parent_id', 'forum_replies', ['parent_id'])
    op.create_index('ix_forum_replies_created_at', 'forum_replies', ['created_at'])

    op.create_table(
        'forum_reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('target_type', sa.String(length=10), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('target_type', 'target_id', 'user_id', 'type', name='uq_forum_reactions_toggle'),
        sa.CheckConstraint("target_type IN ('POST', 'REPLY')", name='check_reaction_target_type'),
        sa.CheckConstraint(
            "type IN ('THANKS', 'LAUGH', 'CONFUSED', 'SAD', 'ANGRY', 'LOVE')",
            name='check_reaction_type'
        ),
    )
    op.create_index('ix_forum_reactions_id', 'forum_reactions', ['id'])
    op.create_index('ix_forum_reactions_target', 'forum_reactions', ['target_type', 'target_id'])
    op.create_index('ix_forum_reactions_user_id', 'forum_reactions', ['user_id'])


def downgrade() -> None:
    op.drop_table('forum_reactions')
    op.drop_table('forum_replies')
    op.drop_table('forum_posts')
    op.drop_table('forum_categories')
    op.drop_table('users')
