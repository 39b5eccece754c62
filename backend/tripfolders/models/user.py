"""
TripFolders Backend — User SQLAlchemy Model
============================================

What:  ORM model for the `users` table.
Why:   Folders reference users by id; the membership rules read `username`
       and `is_private`.
Who:   Owned by the account service that registers users and issues tokens.
       This application only reads it (see services/user_directory.py).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tripfolders.database import Base


class User(Base):
    """
    An account that can own and share trip folders.

    `is_private` accounts keep everything to themselves: they can neither
    browse folder listings nor be added to someone else's folder.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )

    is_private: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', is_private={self.is_private})>"
