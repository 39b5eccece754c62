"""
TripFolders Backend — Shared Route Dependencies
================================================

What:  Things every view needs: the signed-in user, the template renderer,
       and redirect helpers that carry an error message.
Why:   Each route module would otherwise repeat token extraction and the
       `?errorMessage=` URL building.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from tripfolders.config import settings
from tripfolders.database import get_db_session
from tripfolders.models import User
from tripfolders.services.user_directory import user_directory

templates = Jinja2Templates(directory=settings.templates_dir)


def _token_from_request(request: Request) -> Optional[str]:
    """Identity token from the session cookie, or an Authorization bearer header."""
    token = request.cookies.get(settings.token_cookie_name)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    scheme, _, credentials = auth.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    FastAPI dependency resolving the signed-in user.

    Raises:
        AuthError: handled globally by redirecting to the entry page
    """
    return await user_directory.authenticate(db, _token_from_request(request))


def redirect_to(url: str, error_message: Optional[str] = None) -> RedirectResponse:
    """
    303 redirect, optionally carrying `errorMessage` for the target view.

    303 makes the browser follow up with a GET even after a PUT/DELETE
    form submission.
    """
    if error_message:
        url = f"{url}?{urlencode({'errorMessage': error_message})}"
    return RedirectResponse(url=url, status_code=303)


def render(
    request: Request,
    view: str,
    context: Dict[str, Any],
    status_code: int = 200,
):
    """Render `view` with the request and an `errorMessage` slot always present."""
    context.setdefault("errorMessage", None)
    return templates.TemplateResponse(request, view, context, status_code=status_code)
