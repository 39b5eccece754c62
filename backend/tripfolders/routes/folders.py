"""
TripFolders Backend — Trip Folder Route Handlers
=================================================

What:  The HTML views and form endpoints under /tripFolders.
Why:   Entry point for everything a signed-in user does with folders.
How:   Each handler resolves the user (get_current_user), calls one
       FolderService method, and either renders a template or redirects.

Error routing:
    AuthError               → "/"             (global handler, main.py)
    NotFoundError           → "/tripFolders"  (global handler, main.py)
    DatabaseError           → "/tripFolders"  (global handler, generic text)
    InvalidOperationError   → back to the form the user came from, except
                              NOT_MEMBER which goes to the folder list
    ValidationError         → back to the form the user came from

Browsers submit PUT/DELETE as POST with ?_method= (MethodOverrideMiddleware).
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tripfolders.database import get_db_session
from tripfolders.exceptions import InvalidOperationError, Rejection, ValidationError
from tripfolders.models import User, Visibility
from tripfolders.routes.deps import get_current_user, redirect_to, render
from tripfolders.schemas.folder import FileForm, FolderForm, parse_form
from tripfolders.services.folder_service import folder_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tripFolders", tags=["Trip Folders"])

LIST_URL = "/tripFolders"


def _folder_url(folder_id: uuid.UUID, suffix: str = "") -> str:
    return f"{LIST_URL}/{folder_id}{suffix}"


def _rejected(exc: InvalidOperationError, origin_url: str):
    """Send a refused request back where it came from."""
    logger.warning("Operation refused (%s): %s", exc.reason.value, exc.context)
    if exc.reason is Rejection.NOT_MEMBER:
        return redirect_to(LIST_URL, exc.message)
    return redirect_to(origin_url, exc.message)


# ══════════════════════════════════════════════════════════════════════════
# Listing & Creation
# ══════════════════════════════════════════════════════════════════════════


@router.get("", summary="Trip folders landing page")
async def folders_home(
    request: Request,
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
):
    return render(request, "tripFolders/index.html", {"user": user, "errorMessage": errorMessage})


async def _render_listing(
    request: Request,
    db: AsyncSession,
    user: User,
    scope: Visibility,
    folder_name: Optional[str],
    error_message: Optional[str],
):
    """
    Render the private or shared listing.

    A private account gets the listing page with the refusal message and no
    folders, rather than a redirect, so the page can explain what to change.
    """
    context = {
        "user": user,
        "tripFolders": [],
        "searchOptions": {"folderName": folder_name or ""},
        "errorMessage": error_message,
    }
    try:
        context["tripFolders"] = await folder_service.list_folders(db, user, scope, folder_name)
    except InvalidOperationError as e:
        logger.info("Listing refused for %s: %s", user.username, e.reason.value)
        context["errorMessage"] = e.message
    return render(request, f"tripFolders/{scope.value}.html", context)


@router.get("/private", summary="List the user's private folders")
async def list_private(
    request: Request,
    folderName: Optional[str] = Query(default=None),
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await _render_listing(request, db, user, Visibility.PRIVATE, folderName, errorMessage)


@router.get("/shared", summary="List the user's shared folders")
async def list_shared(
    request: Request,
    folderName: Optional[str] = Query(default=None),
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await _render_listing(request, db, user, Visibility.SHARED, folderName, errorMessage)


@router.get("/create", summary="New folder form")
async def create_form(
    request: Request,
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
):
    return render(request, "tripFolders/create.html", {"user": user, "errorMessage": errorMessage})


@router.post("/create", summary="Create a folder")
async def create_folder(
    folder_name: Optional[str] = Form(default=None, alias="folderName"),
    trip_date: Optional[str] = Form(default=None, alias="tripDate"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        form = parse_form(FolderForm, name=folder_name, trip_date=trip_date)
    except ValidationError as e:
        return redirect_to(f"{LIST_URL}/create", e.message)

    folder = await folder_service.create_folder(db, user, form)
    return redirect_to(_folder_url(folder.id))


# ══════════════════════════════════════════════════════════════════════════
# Folder Page
# ══════════════════════════════════════════════════════════════════════════


@router.get("/{folder_id:uuid}", summary="Folder detail")
async def show_folder(
    request: Request,
    folder_id: uuid.UUID,
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        detail = await folder_service.get_folder_detail(db, folder_id, user)
    except InvalidOperationError as e:
        return _rejected(e, LIST_URL)

    return render(
        request,
        "tripFolders/folderPage/show.html",
        {
            "user": user,
            "tripFolder": detail.folder,
            "usernames": detail.usernames,
            "tripFiles": detail.files,
            "errorMessage": errorMessage,
        },
    )


@router.put("/{folder_id:uuid}", summary="Rename or redate a folder")
async def update_folder(
    folder_id: uuid.UUID,
    folder_name: Optional[str] = Form(default=None, alias="folderName"),
    trip_date: Optional[str] = Form(default=None, alias="tripDate"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    edit_url = _folder_url(folder_id, "/editFolder")
    try:
        form = parse_form(FolderForm, name=folder_name, trip_date=trip_date)
        await folder_service.update_folder(db, folder_id, user, form)
    except ValidationError as e:
        return redirect_to(edit_url, e.message)
    except InvalidOperationError as e:
        return _rejected(e, edit_url)
    return redirect_to(_folder_url(folder_id))


@router.delete("/{folder_id:uuid}", summary="Delete a folder")
async def delete_folder(
    folder_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        await folder_service.delete_folder(db, folder_id, user)
    except InvalidOperationError as e:
        return _rejected(e, _folder_url(folder_id))
    return redirect_to(LIST_URL)


@router.get("/{folder_id:uuid}/editFolder", summary="Edit folder form")
async def edit_form(
    request: Request,
    folder_id: uuid.UUID,
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        folder = await folder_service.get_member_folder(db, folder_id, user)
    except InvalidOperationError as e:
        return _rejected(e, LIST_URL)
    return render(
        request,
        "tripFolders/folderPage/editFolder.html",
        {"user": user, "tripFolder": folder, "errorMessage": errorMessage},
    )


# ══════════════════════════════════════════════════════════════════════════
# Membership
# ══════════════════════════════════════════════════════════════════════════


@router.get("/{folder_id:uuid}/addUser", summary="Add member form")
async def add_user_form(
    request: Request,
    folder_id: uuid.UUID,
    username: Optional[str] = Query(default=None),
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        folder = await folder_service.get_member_folder(db, folder_id, user)
    except InvalidOperationError as e:
        return _rejected(e, LIST_URL)

    candidates = await folder_service.add_member_candidates(db, user, username)
    return render(
        request,
        "tripFolders/folderPage/addUser.html",
        {
            "user": user,
            "tripFolder": folder,
            "users": candidates,
            "searchOptions": {"username": username or ""},
            "errorMessage": errorMessage,
        },
    )


@router.put("/{folder_id:uuid}/addUser", summary="Add a member")
async def add_user(
    folder_id: uuid.UUID,
    add_username: Optional[str] = Form(default=None, alias="addUsername"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        await folder_service.add_member(db, folder_id, user, add_username)
    except InvalidOperationError as e:
        return _rejected(e, _folder_url(folder_id, "/addUser"))
    return redirect_to(_folder_url(folder_id))


@router.put("/{folder_id:uuid}/removeUser", summary="Leave a folder")
async def remove_user(
    folder_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        await folder_service.remove_member(db, folder_id, user)
    except InvalidOperationError as e:
        logger.warning("Leave refused (%s): %s", e.reason.value, e.context)
        return redirect_to(_folder_url(folder_id), e.message)
    return redirect_to(LIST_URL)


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════


@router.get("/{folder_id:uuid}/addFile", summary="Add file form")
async def add_file_form(
    request: Request,
    folder_id: uuid.UUID,
    errorMessage: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        folder = await folder_service.get_member_folder(db, folder_id, user)
    except InvalidOperationError as e:
        return _rejected(e, LIST_URL)
    return render(
        request,
        "tripFiles/addFile.html",
        {"user": user, "tripFolder": folder, "errorMessage": errorMessage},
    )


@router.post("/{folder_id:uuid}/addFile", summary="Create a file and attach it")
async def add_file(
    folder_id: uuid.UUID,
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    user_set_date: Optional[str] = Form(default=None, alias="userSetDate"),
    image: Optional[str] = Form(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    add_url = _folder_url(folder_id, "/addFile")
    try:
        form = parse_form(
            FileForm,
            title=title,
            description=description,
            user_set_date=user_set_date,
            image=image,
        )
        await folder_service.attach_file(db, folder_id, user, form)
    except ValidationError as e:
        return redirect_to(add_url, e.message)
    except InvalidOperationError as e:
        return _rejected(e, add_url)
    return redirect_to(_folder_url(folder_id))
