"""Create users, friendship, friend request, post, comment and like tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Tables:
    users            accounts (unique phone_number)
    user_friends     friend-set edges, one row per direction
    friend_requests  request lifecycle, one row per unordered user pair
    posts            description + inline data-URI image
    comments         belong to a post, removed with it
    post_likes       like edges, one row per (post, user)

Rollback: downgrade() drops every table (all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _user_fk(name: str, primary_key: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.Uuid(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        primary_key=primary_key,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_phone_number", "users", ["phone_number"], unique=True)

    op.create_table(
        "user_friends",
        _user_fk("user_id", primary_key=True),
        _user_fk("friend_id", primary_key=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "friend_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("from_user_id"),
        _user_fk("to_user_id"),
        sa.Column("pair_low", sa.Uuid(), nullable=False),
        sa.Column("pair_high", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'pending'")),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        # Closes the check-then-insert race between two sends for one pair
        sa.UniqueConstraint("pair_low", "pair_high", name="uq_friend_requests_pair"),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_friend_requests_not_self"),
        sa.CheckConstraint("pair_low < pair_high", name="ck_friend_requests_pair_order"),
        sa.CheckConstraint(
            "(pair_low = from_user_id AND pair_high = to_user_id) "
            "OR (pair_low = to_user_id AND pair_high = from_user_id)",
            name="ck_friend_requests_pair_users",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_friend_requests_status",
        ),
    )
    op.create_index("idx_friend_requests_to_status", "friend_requests", ["to_user_id", "status"])
    op.create_index("idx_friend_requests_from_status", "friend_requests", ["from_user_id", "status"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        _user_fk("user_id"),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_posts_created_at", "posts", ["created_at"])
    op.create_index("idx_posts_user_created_at", "posts", ["user_id", "created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("user_id"),
        sa.Column("text", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "post_likes",
        sa.Column(
            "post_id",
            sa.Uuid(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        _user_fk("user_id", primary_key=True),
        _timestamp("created_at"),
    )


def downgrade() -> None:
    op.drop_table("post_likes")
    op.drop_index("ix_comments_post_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_posts_user_created_at", table_name="posts")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
    op.drop_index("idx_friend_requests_from_status", table_name="friend_requests")
    op.drop_index("idx_friend_requests_to_status", table_name="friend_requests")
    op.drop_table("friend_requests")
    op.drop_table("user_friends")
    op.drop_index("ix_users_phone_number", table_name="users")
    op.drop_table("users")
