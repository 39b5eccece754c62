"""
TripFolders Backend — Trip File SQLAlchemy Model
=================================================

What:  ORM model for the `trip_files` table.
Why:   A trip file is a titled, dated note with an optional embedded image,
       attached to a folder by reference (see FolderFile).
How:   The image is stored inline as bytes plus its mime type; templates
       read it back through `image_data_uri`.

A file is not owned by a folder: deleting the folder only removes the
association row, the file record itself is kept.
"""

import base64
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, LargeBinary, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tripfolders.database import Base


class TripFile(Base):
    __tablename__ = "trip_files"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # The date the user says the file belongs to, not the upload time
    user_set_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    image: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    image_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def image_data_uri(self) -> Optional[str]:
        """`data:` URI usable directly as an <img> src, or None without an image."""
        if self.image is None or not self.image_type:
            return None
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{self.image_type};base64,{encoded}"

    def __repr__(self) -> str:
        return f"<TripFile(id={self.id}, title='{self.title}')>"
