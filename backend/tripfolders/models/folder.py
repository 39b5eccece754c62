"""
TripFolders Backend — Trip Folder SQLAlchemy Models
====================================================

What:  ORM models for `trip_folders` and its two association tables,
       `folder_members` (who belongs to a folder) and `folder_files`
       (which files are attached, in attachment order).
Why:   A folder is the unit of sharing. Membership decides who sees it and
       whether it is private or shared.
How:   Both collections are ordered lists (`ordering_list`) loaded eagerly
       with `selectin`, so async code never triggers a lazy load.

Table Design Rationale:
    - folder_members has a composite primary key (folder_id, user_id):
      the database itself refuses a duplicate member.
    - is_shared is stored (not computed in SQL) so listings can filter on
      it with a plain index. It is derived from the member count and only
      services/membership.py writes it.
    - version is SQLAlchemy's `version_id_col`: every UPDATE of a folder row
      carries `WHERE version = :seen`, so two requests that both read the
      folder and both write it cannot silently overwrite each other.
    - folder_files cascades with the folder, trip_files does not: deleting a
      folder detaches its files and leaves the file records behind.
"""

import enum
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Uuid,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tripfolders.database import Base


class Visibility(str, enum.Enum):
    """Who can find a folder in listings: only its creator, or its members."""

    PRIVATE = "private"
    SHARED = "shared"


def visibility_for(member_count: int) -> Visibility:
    """A folder with more than one member is shared; otherwise it is private."""
    return Visibility.SHARED if member_count > 1 else Visibility.PRIVATE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FolderMember(Base):
    """One user's membership in one folder."""

    __tablename__ = "folder_members"

    folder_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("trip_folders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # No foreign key: a membership outlives the account it points at, so the
    # member count (and visibility) only changes through the membership rules
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<FolderMember(folder_id={self.folder_id}, user_id={self.user_id})>"


class FolderFile(Base):
    """A file attached to a folder; `position` preserves attachment order."""

    __tablename__ = "folder_files"

    folder_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("trip_folders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("trip_files.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class TripFolder(Base):
    """
    A named, dated collection of trip files shared among its members.

    Lifecycle:
        1. Created by membership.new_folder() with its creator as the only
           member (private)
        2. Members join/leave through membership.add_member()/remove_member();
           visibility follows the member count
        3. Renamed, redated and given files through folder_service, which
           never touches members or visibility
        4. Deleted by any member; attached files stay in trip_files

    Read members through `member_ids` and visibility through `visibility`.
    """

    __tablename__ = "trip_folders"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    trip_date: Mapped[date] = mapped_column(Date, nullable=False)

    is_shared: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Optional embedded thumbnail kept with the folder record; no route writes it
    image: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    image_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    memberships: Mapped[List[FolderMember]] = relationship(
        order_by=FolderMember.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    attachments: Mapped[List[FolderFile]] = relationship(
        order_by=FolderFile.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_trip_folders_is_shared", "is_shared"),
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def member_ids(self) -> List[uuid.UUID]:
        return [m.user_id for m in self.memberships]

    @property
    def file_ids(self) -> List[uuid.UUID]:
        return [a.file_id for a in self.attachments]

    @property
    def visibility(self) -> Visibility:
        return Visibility.SHARED if self.is_shared else Visibility.PRIVATE

    def has_member(self, user_id: uuid.UUID) -> bool:
        return user_id in self.member_ids

    def touch(self) -> None:
        """
        Mark the folder row as changed.

        Guarantees an UPDATE (and therefore a version check) even when the
        only change is in an association table.
        """
        self.updated_at = _utcnow()

    def __repr__(self) -> str:
        return (
            f"<TripFolder(id={self.id}, name='{self.name}', "
            f"members={len(self.memberships)}, shared={self.is_shared})>"
        )
