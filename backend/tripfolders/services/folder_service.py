"""
TripFolders Backend — Folder Service (Business Logic Orchestrator)
===================================================================

What:  One method per folder operation the web layer exposes.
Why:   Routes stay thin: they parse the request, call one method here, and
       pick a redirect. Everything in between lives in this class.
How:   Composes the folder/file stores, the user directory, the image
       service, and the membership engine. Every method receives the
       request's AsyncSession; nothing is committed here (get_db_session
       commits once the route returns).

Orchestration (add member):
    ┌──────────┐   ┌────────────┐   ┌──────────────┐   ┌────────────┐
    │  Load    │──▶│  Require   │──▶│  Membership  │──▶│  Flush     │
    │  folder  │   │  member    │   │  engine      │   │  (version  │
    │  (store) │   │            │   │  add_member  │   │   checked) │
    └──────────┘   └────────────┘   └──────────────┘   └────────────┘

Field edits (rename, redate, attach file) go through this class and never
through the membership engine; they do not touch members or visibility.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tripfolders.models import FolderFile, TripFile, TripFolder, User, Visibility
from tripfolders.schemas.folder import FileForm, FolderDetail, FolderForm, UserSummary
from tripfolders.services import membership
from tripfolders.services.folder_store import file_store, folder_store
from tripfolders.services.image_service import image_service
from tripfolders.services.user_directory import user_directory

logger = logging.getLogger(__name__)


class FolderService:
    """
    Business logic layer for trip folder operations.

    Error Handling Strategy:
        Stores raise NotFoundError/DatabaseError, the membership engine raises
        InvalidOperationError, form parsing raises ValidationError. This class
        lets all of them propagate; the web layer decides where each one
        sends the user.
    """

    async def create_folder(
        self, db: AsyncSession, user: User, form: FolderForm
    ) -> TripFolder:
        """Create a private folder with `user` as its only member."""
        folder = membership.new_folder(form.name, form.trip_date, user)
        await folder_store.save(db, folder)
        logger.info("Folder %s created by %s", folder.id, user.username)
        return folder

    async def get_member_folder(
        self, db: AsyncSession, folder_id: uuid.UUID, user: User
    ) -> TripFolder:
        """
        Load a folder the user belongs to.

        Raises:
            NotFoundError: folder does not exist
            InvalidOperationError: NOT_MEMBER
        """
        folder = await folder_store.get(db, folder_id)
        membership.require_member(folder, user)
        return folder

    async def get_folder_detail(
        self, db: AsyncSession, folder_id: uuid.UUID, user: User
    ) -> FolderDetail:
        """
        Folder plus member usernames and attached files, for the folder page.

        Members whose account no longer resolves show as "". Attached ids
        that no longer resolve to a file are skipped.
        """
        folder = await self.get_member_folder(db, folder_id, user)
        usernames = await user_directory.usernames_for(db, folder.member_ids)

        file_ids = folder.file_ids
        found = await file_store.get_many(db, file_ids)
        files = []
        for file_id in file_ids:
            trip_file = found.get(file_id)
            if trip_file is None:
                logger.warning("Folder %s references missing file %s", folder.id, file_id)
                continue
            files.append(trip_file)

        return FolderDetail(folder=folder, usernames=usernames, files=files)

    async def list_folders(
        self,
        db: AsyncSession,
        user: User,
        scope: Visibility,
        name_filter: Optional[str] = None,
    ) -> List[TripFolder]:
        """
        The user's folders with the requested visibility.

        Raises:
            InvalidOperationError: PRIVATE_ACCOUNT for private accounts,
                whatever the scope
        """
        scope = membership.listing_scope(user, scope)
        return await folder_store.find(db, user.id, scope, name_filter)

    async def add_member_candidates(
        self, db: AsyncSession, user: User, query: Optional[str] = None
    ) -> List[UserSummary]:
        users = await user_directory.search(db, user, query)
        return [UserSummary.model_validate(u) for u in users]

    async def add_member(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        user: User,
        target_username: Optional[str],
    ) -> TripFolder:
        """
        Add another account to the folder (see membership.add_member).

        Raises:
            NotFoundError, InvalidOperationError
        """
        folder = await self.get_member_folder(db, folder_id, user)

        async def resolve(username: str) -> Optional[User]:
            return await user_directory.find_by_username(db, username)

        await membership.add_member(folder, user, target_username, resolve)
        await folder_store.save(db, folder)
        return folder

    async def remove_member(
        self, db: AsyncSession, folder_id: uuid.UUID, user: User
    ) -> TripFolder:
        """
        Take the requesting user out of the folder.

        Raises:
            NotFoundError: folder does not exist
            InvalidOperationError: NOT_MEMBER
        """
        folder = await folder_store.get(db, folder_id)
        membership.remove_member(folder, user)
        await folder_store.save(db, folder)
        return folder

    async def update_folder(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        user: User,
        form: FolderForm,
    ) -> TripFolder:
        """Rename and/or redate a folder."""
        folder = await self.get_member_folder(db, folder_id, user)
        folder.name = form.name
        folder.trip_date = form.trip_date
        folder.touch()
        await folder_store.save(db, folder)
        logger.info("Folder %s updated by %s", folder.id, user.username)
        return folder

    async def delete_folder(
        self, db: AsyncSession, folder_id: uuid.UUID, user: User
    ) -> None:
        """
        Delete a folder. Any member may do this.

        The folder's files are detached, not deleted: their TripFile rows
        stay in the database without a folder pointing at them.
        """
        folder = await self.get_member_folder(db, folder_id, user)
        orphaned = len(folder.attachments)
        await folder_store.delete(db, folder)
        logger.info(
            "Folder %s deleted by %s (%d files left without a folder)",
            folder_id,
            user.username,
            orphaned,
        )

    async def attach_file(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        user: User,
        form: FileForm,
    ) -> TripFile:
        """
        Create a trip file from the add-file form and attach it to the folder.

        The image is decoded before anything is written, so a bad image
        leaves both the folder and the file table untouched.
        """
        folder = await self.get_member_folder(db, folder_id, user)

        trip_file = TripFile(
            title=form.title,
            description=form.description,
            user_set_date=form.user_set_date,
            uploaded_by=user.id,
        )
        image_service.apply(trip_file, form.image)

        await file_store.save(db, trip_file)
        folder.attachments.append(FolderFile(file_id=trip_file.id))
        folder.touch()
        await folder_store.save(db, folder)

        logger.info(
            "File %s attached to folder %s by %s (image=%s)",
            trip_file.id,
            folder.id,
            user.username,
            trip_file.image_type or "none",
        )
        return trip_file


# ── Singleton Instance ────────────────────────────────────────────────────
folder_service = FolderService()
