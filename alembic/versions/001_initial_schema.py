"""Initial schema - journal, community, chat and circles

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("firebase_uid", sa.String(128), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_image_url", sa.String(1024), nullable=True),
        sa.Column("username", sa.String(20), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("theme", sa.String(10), nullable=False, server_default="system"),
        sa.Column("dashboard_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("firebase_uid", name="uq_users_firebase_uid"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    # Drinks
    op.create_table(
        "drinks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("maker", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("subtype", sa.String(100), nullable=True),
        sa.Column("rating", sa.Numeric(2, 1), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("nose", sa.JSON(), nullable=True),
        sa.Column("palate", sa.JSON(), nullable=True),
        sa.Column("finish", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True, server_default="USD"),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("pairings", sa.JSON(), nullable=True),
        sa.Column("occasion", sa.String(255), nullable=True),
        sa.Column("mood", sa.String(255), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_drinks"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_drinks_user_id_users", ondelete="CASCADE"),
    )
    op.create_index("ix_drinks_user_id", "drinks", ["user_id"])
    op.create_index("ix_drinks_type", "drinks", ["type"])

    # Follows
    op.create_table(
        "follows",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("follower_id", sa.Uuid(), nullable=False),
        sa.Column("following_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_follows"),
        sa.ForeignKeyConstraint(["follower_id"], ["users.id"], name="fk_follows_follower_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["following_id"], ["users.id"], name="fk_follows_following_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
    )
    op.create_index("ix_follows_follower_id", "follows", ["follower_id"])
    op.create_index("ix_follows_following_id", "follows", ["following_id"])

    # Cheers
    op.create_table(
        "cheers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("drink_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_cheers"),
        sa.ForeignKeyConstraint(["drink_id"], ["drinks.id"], name="fk_cheers_drink_id_drinks", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_cheers_user_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("drink_id", "user_id", name="uq_cheers_pair"),
    )
    op.create_index("ix_cheers_drink_id", "cheers", ["drink_id"])
    op.create_index("ix_cheers_user_id", "cheers", ["user_id"])

    # Comments
    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("drink_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_comments"),
        sa.ForeignKeyConstraint(["drink_id"], ["drinks.id"], name="fk_comments_drink_id_drinks", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_comments_user_id_users", ondelete="CASCADE"),
    )
    op.create_index("ix_comments_drink_id", "comments", ["drink_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("drink_id", sa.Uuid(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_notifications_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"], name="fk_notifications_actor_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["drink_id"], ["drinks.id"], name="fk_notifications_drink_id_drinks", ondelete="CASCADE"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    # Conversations
    op.create_table(
        "conversations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pair_key", sa.String(73), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_message_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_conversations"),
        sa.UniqueConstraint("pair_key", name="uq_conversations_pair_key"),
    )

    op.create_table(
        "conversation_participants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("last_read_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_conversation_participants"),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"],
            name="fk_conversation_participants_conversation_id_conversations", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"],
            name="fk_conversation_participants_user_id_users", ondelete="CASCADE",
        ),
        sa.UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participants_pair"),
    )
    op.create_index("ix_conversation_participants_conversation_id", "conversation_participants", ["conversation_id"])
    op.create_index("ix_conversation_participants_user_id", "conversation_participants", ["user_id"])

    # Messages
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_messages"),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversations.id"],
            name="fk_messages_conversation_id_conversations", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"], name="fk_messages_sender_id_users", ondelete="CASCADE"),
    )
    op.create_index("ix_messages_conversation_id", "messages", ["conversation_id"])

    # Circles
    op.create_table(
        "circles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_circles"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_circles_created_by_users", ondelete="CASCADE"),
    )

    op.create_table(
        "circle_members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("circle_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_circle_members"),
        sa.ForeignKeyConstraint(["circle_id"], ["circles.id"], name="fk_circle_members_circle_id_circles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_circle_members_user_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("circle_id", "user_id", name="uq_circle_members_pair"),
    )
    op.create_index("ix_circle_members_circle_id", "circle_members", ["circle_id"])
    op.create_index("ix_circle_members_user_id", "circle_members", ["user_id"])

    op.create_table(
        "circle_invites",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("circle_id", sa.Uuid(), nullable=False),
        sa.Column("inviter_id", sa.Uuid(), nullable=False),
        sa.Column("invitee_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_circle_invites"),
        sa.ForeignKeyConstraint(["circle_id"], ["circles.id"], name="fk_circle_invites_circle_id_circles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["inviter_id"], ["users.id"], name="fk_circle_invites_inviter_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["invitee_id"], ["users.id"], name="fk_circle_invites_invitee_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("circle_id", "invitee_id", name="uq_circle_invites_pair"),
    )
    op.create_index("ix_circle_invites_circle_id", "circle_invites", ["circle_id"])
    op.create_index("ix_circle_invites_invitee_id", "circle_invites", ["invitee_id"])

    op.create_table(
        "circle_posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("circle_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("drink_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_circle_posts"),
        sa.ForeignKeyConstraint(["circle_id"], ["circles.id"], name="fk_circle_posts_circle_id_circles", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_circle_posts_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["drink_id"], ["drinks.id"], name="fk_circle_posts_drink_id_drinks", ondelete="SET NULL"),
    )
    op.create_index("ix_circle_posts_circle_id", "circle_posts", ["circle_id"])


def downgrade() -> None:
    op.drop_table("circle_posts")
    op.drop_table("circle_invites")
    op.drop_table("circle_members")
    op.drop_table("circles")
    op.drop_table("messages")
    op.drop_table("conversation_participants")
    op.drop_table("conversations")
    op.drop_table("notifications")
    op.drop_table("comments")
    op.drop_table("cheers")
    op.drop_table("follows")
    op.drop_table("drinks")
    op.drop_table("users")
