"""
TripFolders Backend — Folder and File Stores
=============================================

What:  Query and persistence helpers for trip folders and trip files.
Why:   Keeps SQLAlchemy statements and driver-error translation out of the
       business logic. Services see TripFolder/TripFile objects and our own
       exceptions, never `None` or a raw SQLAlchemyError.
How:   Stateless classes taking the request's AsyncSession on every call.

Error translation:
    missing row               → NotFoundError
    StaleDataError            → InvalidOperationError(CONCURRENT_UPDATE)
                                (the version check lost a race)
    any other SQLAlchemyError → DatabaseError (details logged, not shown)

    On a failed flush the session is rolled back here, so the request-level
    commit in get_db_session finds nothing pending.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from tripfolders.exceptions import (
    DatabaseError,
    InvalidOperationError,
    NotFoundError,
    Rejection,
)
from tripfolders.models import FolderMember, TripFile, TripFolder, Visibility

logger = logging.getLogger(__name__)


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def _flush(db: AsyncSession, action: str, context: dict) -> None:
    """Flush pending changes, translating failures and rolling back."""
    try:
        await db.flush()
    except StaleDataError:
        await db.rollback()
        logger.warning("Concurrent update detected while trying to %s: %s", action, context)
        raise InvalidOperationError(Rejection.CONCURRENT_UPDATE, context=context)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Database error while trying to %s: %s | %s", action, str(e), context)
        raise DatabaseError(
            message="Could not save your changes. Please try again.",
            context={**context, "error_type": type(e).__name__},
        )


class FolderStore:
    """Persistent collection of TripFolder records."""

    async def get(self, db: AsyncSession, folder_id: uuid.UUID) -> TripFolder:
        """
        Load one folder with its members and attachments.

        Raises:
            NotFoundError: no folder with this id
            DatabaseError: query failed
        """
        try:
            result = await db.execute(select(TripFolder).where(TripFolder.id == folder_id))
            folder = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching folder %s: %s", folder_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the trip folder. Please try again.",
                context={"folder_id": str(folder_id)},
            )

        if folder is None:
            raise NotFoundError(resource="trip folder", resource_id=str(folder_id))
        return folder

    async def find(
        self,
        db: AsyncSession,
        member_id: uuid.UUID,
        visibility: Visibility,
        name_filter: Optional[str] = None,
    ) -> List[TripFolder]:
        """
        Folders that `member_id` belongs to with the given visibility.

        name_filter is matched case-insensitively as a literal substring;
        LIKE wildcards typed by the user are escaped.

        Query plan:
            trip_folders JOIN folder_members ON folder_id
            WHERE user_id = :member AND is_shared = :shared
            → idx on folder_members.user_id, then idx_trip_folders_is_shared
        """
        query = (
            select(TripFolder)
            .join(FolderMember, FolderMember.folder_id == TripFolder.id)
            .where(
                FolderMember.user_id == member_id,
                TripFolder.is_shared.is_(visibility is Visibility.SHARED),
            )
        )

        if name_filter and name_filter.strip():
            pattern = f"%{escape_like(name_filter.strip())}%"
            query = query.where(TripFolder.name.ilike(pattern, escape="\\"))

        query = query.order_by(TripFolder.trip_date.desc(), TripFolder.name)

        try:
            result = await db.execute(query)
            return list(result.scalars().unique().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing folders: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve trip folders. Please try again.",
                context={"member_id": str(member_id), "visibility": visibility.value},
            )

    async def save(self, db: AsyncSession, folder: TripFolder) -> TripFolder:
        """Add (if new) and flush; the request commit makes it durable."""
        db.add(folder)
        await _flush(db, "save trip folder", {"folder_id": str(folder.id)})
        return folder

    async def delete(self, db: AsyncSession, folder: TripFolder) -> None:
        """
        Delete a folder and its association rows.

        Attached TripFile records are left in place.
        """
        folder_id = str(folder.id)
        await db.delete(folder)
        await _flush(db, "delete trip folder", {"folder_id": folder_id})


class FileStore:
    """Persistent collection of TripFile records."""

    async def save(self, db: AsyncSession, trip_file: TripFile) -> uuid.UUID:
        db.add(trip_file)
        await _flush(db, "save trip file", {"title": trip_file.title})
        return trip_file.id

    async def get(self, db: AsyncSession, file_id: uuid.UUID) -> TripFile:
        """
        Raises:
            NotFoundError: no file with this id
        """
        try:
            trip_file = await db.get(TripFile, file_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching file %s: %s", file_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the trip file. Please try again.",
                context={"file_id": str(file_id)},
            )
        if trip_file is None:
            raise NotFoundError(resource="trip file", resource_id=str(file_id))
        return trip_file

    async def get_many(
        self, db: AsyncSession, file_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, TripFile]:
        """Files keyed by id; ids that do not resolve are simply absent."""
        ids = list(file_ids)
        if not ids:
            return {}
        try:
            result = await db.execute(select(TripFile).where(TripFile.id.in_(ids)))
        except SQLAlchemyError as e:
            logger.error("Database error fetching %d files: %s", len(ids), str(e))
            raise DatabaseError(
                message="Could not retrieve trip files. Please try again.",
                context={"file_count": len(ids)},
            )
        return {f.id: f for f in result.scalars().all()}


# ── Singleton Instances ───────────────────────────────────────────────────
folder_store = FolderStore()
file_store = FileStore()
