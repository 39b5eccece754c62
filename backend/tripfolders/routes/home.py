"""
TripFolders Backend — Entry Page
=================================

What:  GET / — the page unauthenticated users land on.
Why:   AuthError and unexpected failures redirect here with an errorMessage,
       so this view must render without a signed-in user.
"""

from typing import Optional

from fastapi import APIRouter, Query, Request

from tripfolders.routes.deps import render

router = APIRouter(tags=["Home"])


@router.get("/", summary="Entry page")
async def index(request: Request, errorMessage: Optional[str] = Query(default=None)):
    return render(request, "index.html", {"errorMessage": errorMessage})
