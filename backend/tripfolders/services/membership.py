"""
TripFolders Backend — Folder Membership & Visibility Engine
============================================================

What:  The rules for who belongs to a trip folder, who may join or leave it,
       and whether it is private or shared.
Why:   Visibility is derived from membership. Keeping every write to
       `memberships` and `is_shared` in this module means the two can never
       disagree (a shared folder with one member, a private one with three).
How:   Plain functions over a loaded TripFolder. They either mutate the
       folder completely or raise InvalidOperationError before touching it;
       the caller persists the result in one flush.
Who:   Called by FolderService. Nothing else writes `memberships` or
       `is_shared`.

State Machine:
    new_folder()          members=[creator]            → PRIVATE
    add_member()          members += [target]          → SHARED (count ≥ 2)
    remove_member()       members -= [requester]       → PRIVATE iff count ≤ 1

AddMember preconditions, checked in this order:
    1. requester is authenticated            (AuthError, before we run)
    2. requester is not a private account    → REQUESTER_PRIVATE
    3. a target username was given           → MISSING_TARGET
    4. target exists, is not private, and is
       not the requester                     → INVALID_TARGET
    5. target is not already a member        → ALREADY_MEMBER
"""

import logging
from datetime import date
from typing import Awaitable, Callable, Optional

from tripfolders.exceptions import InvalidOperationError, Rejection
from tripfolders.models import FolderMember, TripFolder, User, Visibility, visibility_for

logger = logging.getLogger(__name__)

UsernameResolver = Callable[[str], Awaitable[Optional[User]]]


def _sync_visibility(folder: TripFolder) -> None:
    """Recompute `is_shared` from the member count and mark the row dirty."""
    folder.is_shared = visibility_for(len(folder.memberships)) is Visibility.SHARED
    folder.touch()


def new_folder(name: str, trip_date: date, creator: User) -> TripFolder:
    """Build a folder whose only member is its creator."""
    folder = TripFolder(
        name=name,
        trip_date=trip_date,
        memberships=[FolderMember(user_id=creator.id)],
        attachments=[],
    )
    _sync_visibility(folder)
    return folder


async def add_member(
    folder: TripFolder,
    requester: User,
    target_username: Optional[str],
    resolve: UsernameResolver,
) -> User:
    """
    Add the account named `target_username` to `folder`.

    Args:
        folder: Loaded folder (memberships populated)
        requester: The authenticated user making the request
        target_username: Username typed or picked in the add-user form
        resolve: Looks a username up in the user directory; returns None
                 when no such account exists

    Returns:
        The user that was added.

    Raises:
        InvalidOperationError: one of REQUESTER_PRIVATE, MISSING_TARGET,
            INVALID_TARGET, ALREADY_MEMBER. The folder is untouched.
    """
    context = {"folder_id": str(folder.id), "requester_id": str(requester.id)}

    if requester.is_private:
        raise InvalidOperationError(Rejection.REQUESTER_PRIVATE, context=context)

    username = (target_username or "").strip()
    if not username:
        raise InvalidOperationError(Rejection.MISSING_TARGET, context=context)

    target = await resolve(username)
    if target is None or target.is_private or target.id == requester.id:
        context["target_username"] = username
        raise InvalidOperationError(Rejection.INVALID_TARGET, context=context)

    if folder.has_member(target.id):
        context["target_id"] = str(target.id)
        raise InvalidOperationError(Rejection.ALREADY_MEMBER, context=context)

    was = folder.visibility
    folder.memberships.append(FolderMember(user_id=target.id))
    _sync_visibility(folder)

    logger.info(
        "Folder %s: %s added %s (%d members, %s -> %s)",
        folder.id,
        requester.username,
        target.username,
        len(folder.memberships),
        was.value,
        folder.visibility.value,
    )
    return target


def remove_member(folder: TripFolder, requester: User) -> None:
    """
    Take `requester` out of `folder`. Members can only remove themselves.

    Raises:
        InvalidOperationError: NOT_MEMBER if the requester does not belong
            to the folder. The folder is untouched.
    """
    membership = next(
        (m for m in folder.memberships if m.user_id == requester.id),
        None,
    )
    if membership is None:
        raise InvalidOperationError(
            Rejection.NOT_MEMBER,
            context={"folder_id": str(folder.id), "requester_id": str(requester.id)},
        )

    was = folder.visibility
    folder.memberships.remove(membership)
    _sync_visibility(folder)

    logger.info(
        "Folder %s: %s left (%d members, %s -> %s)",
        folder.id,
        requester.username,
        len(folder.memberships),
        was.value,
        folder.visibility.value,
    )


def require_member(folder: TripFolder, requester: User) -> None:
    """Refuse access to a folder the requester does not belong to."""
    if not folder.has_member(requester.id):
        raise InvalidOperationError(
            Rejection.NOT_MEMBER,
            context={"folder_id": str(folder.id), "requester_id": str(requester.id)},
        )


def listing_scope(requester: User, scope: Visibility) -> Visibility:
    """
    Gate for folder listings.

    A private account may not browse listings at all, whichever scope it
    asks for and whatever folders it belongs to.
    """
    if requester.is_private:
        raise InvalidOperationError(
            Rejection.PRIVATE_ACCOUNT,
            context={"requester_id": str(requester.id), "scope": scope.value},
        )
    return scope
