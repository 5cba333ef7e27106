"""create profiles, chat, listings and direct message tables

Revision ID: 4b1e7c2a9d10
Revises:
Create Date: 2026-10-19 09:00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4b1e7c2a9d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("now()"),
    )


def upgrade() -> None:
    """Create profiles, chat_messages, listings, threads and thread_messages."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(length=20), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(length=30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("occupation", sa.Text(), nullable=True),
        sa.Column("motivation", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("age IS NULL OR (age >= 0 AND age <= 130)", name="ck_profiles_age"),
    )
    op.create_index("ix_profiles_username", "profiles", ["username"], unique=True)

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(length=20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chat_messages_user_id", "chat_messages", ["user_id"])

    op.create_table(
        "listings",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(length=20), nullable=False),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=200), nullable=False),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=1000), nullable=True),
        sa.Column("region_code", sa.String(length=8), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("price >= 0 AND price <= 1000000000", name="ck_listings_price"),
    )
    op.create_index("ix_listings_user_id", "listings", ["user_id"])
    op.create_index("ix_listings_username", "listings", ["username"])
    op.create_index("ix_listings_region_code", "listings", ["region_code"])

    op.create_table(
        "threads",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("user_a_id", sa.String(length=64), nullable=False),
        sa.Column("user_b_id", sa.String(length=64), nullable=False),
        sa.Column("user_a_username", sa.String(length=20), nullable=True),
        sa.Column("user_b_username", sa.String(length=20), nullable=True),
        sa.Column("listing_id", sa.BigInteger(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="SET NULL"),
        sa.CheckConstraint("user_a_id < user_b_id", name="ck_threads_pair_order"),
    )
    op.create_index("ix_threads_user_a_id", "threads", ["user_a_id"])
    op.create_index("ix_threads_user_b_id", "threads", ["user_b_id"])
    op.create_index("ix_threads_listing_id", "threads", ["listing_id"])
    # NULL listing_id is its own key: one general thread per pair.
    op.create_index(
        "ux_threads_pair_general",
        "threads",
        ["user_a_id", "user_b_id"],
        unique=True,
        postgresql_where=sa.text("listing_id IS NULL"),
    )
    op.create_index(
        "ux_threads_pair_listing",
        "threads",
        ["user_a_id", "user_b_id", "listing_id"],
        unique=True,
        postgresql_where=sa.text("listing_id IS NOT NULL"),
    )

    op.create_table(
        "thread_messages",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), nullable=False),
        sa.Column("thread_id", sa.BigInteger(), nullable=False),
        sa.Column("sender_id", sa.String(length=64), nullable=False),
        sa.Column("sender_username", sa.String(length=20), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["thread_id"], ["threads.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_thread_messages_thread_id_id", "thread_messages", ["thread_id", "id"]
    )


def downgrade() -> None:
    """Drop all plaza tables."""
    op.drop_index("ix_thread_messages_thread_id_id", table_name="thread_messages")
    op.drop_table("thread_messages")
    op.drop_index("ux_threads_pair_listing", table_name="threads")
    op.drop_index("ux_threads_pair_general", table_name="threads")
    op.drop_index("ix_threads_listing_id", table_name="threads")
    op.drop_index("ix_threads_user_b_id", table_name="threads")
    op.drop_index("ix_threads_user_a_id", table_name="threads")
    op.drop_table("threads")
    op.drop_index("ix_listings_region_code", table_name="listings")
    op.drop_index("ix_listings_username", table_name="listings")
    op.drop_index("ix_listings_user_id", table_name="listings")
    op.drop_table("listings")
    op.drop_index("ix_chat_messages_user_id", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("ix_profiles_username", table_name="profiles")
    op.drop_table("profiles")
