"""Create trip folder tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates users, trip_folders, folder_members, trip_files, folder_files.
How:   Portable column types (sa.Uuid stores native UUID on PostgreSQL).

Rollback: downgrade() drops every table (destructive — all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column(
            "is_private",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Private accounts cannot list folders or be added to one",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "trip_folders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("trip_date", sa.Date(), nullable=False),
        sa.Column(
            "is_shared",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="True exactly when the folder has more than one member",
        ),
        sa.Column("image", sa.LargeBinary(), nullable=True),
        sa.Column("image_type", sa.String(100), nullable=True),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            comment="Optimistic concurrency counter, bumped on every UPDATE",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Listings filter on visibility first
    op.create_index("idx_trip_folders_is_shared", "trip_folders", ["is_shared"])

    op.create_table(
        "folder_members",
        sa.Column("folder_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "joined_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["folder_id"], ["trip_folders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("folder_id", "user_id"),
    )
    # "Folders I belong to" is the listing query
    op.create_index("ix_folder_members_user_id", "folder_members", ["user_id"])

    op.create_table(
        "trip_files",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("user_set_date", sa.Date(), nullable=True),
        sa.Column("uploaded_by", sa.Uuid(), nullable=True),
        sa.Column("image", sa.LargeBinary(), nullable=True),
        sa.Column("image_type", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "folder_files",
        sa.Column("folder_id", sa.Uuid(), nullable=False),
        sa.Column("file_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["folder_id"], ["trip_folders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["file_id"], ["trip_files.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("folder_id", "file_id"),
    )


def downgrade() -> None:
    """
    Drop every table.

    WARNING: destructive. Folder and file data is permanently lost.
    """
    op.drop_table("folder_files")
    op.drop_table("trip_files")
    op.drop_index("ix_folder_members_user_id", table_name="folder_members")
    op.drop_table("folder_members")
    op.drop_index("idx_trip_folders_is_shared", table_name="trip_folders")
    op.drop_table("trip_folders")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
