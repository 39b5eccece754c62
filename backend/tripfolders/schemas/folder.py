"""
TripFolders Backend — Pydantic Form and View Schemas
=====================================================

What:  Pydantic models for the HTML forms we accept and the view contexts
       we hand to the templates.
Why:   Form fields arrive as strings; these models coerce and validate them
       (non-empty names, ISO dates) before any service runs.
How:   Routes build a schema from the submitted fields; pydantic errors are
       converted into our ValidationError by `parse_form()`.
"""

import uuid
from datetime import date
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from tripfolders.exceptions import ValidationError
from tripfolders.models import TripFile, TripFolder

FormT = TypeVar("FormT", bound=BaseModel)


# ══════════════════════════════════════════════════════════════════════════
# Form Models — What the browser submits
# ══════════════════════════════════════════════════════════════════════════


class FolderForm(BaseModel):
    """Fields of the create-folder and edit-folder forms."""

    name: str = Field(min_length=1, max_length=200, description="Folder display name")
    trip_date: date = Field(description="Date of the trip (YYYY-MM-DD)")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Folder name cannot be blank")
        return stripped


class FileForm(BaseModel):
    """
    Fields of the add-file form.

    `image` is the raw JSON string produced by the upload widget
    (`{"type": "<mime>", "data": "<base64>"}`); it is decoded by the image
    service, not here.
    """

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None)
    user_set_date: Optional[date] = Field(default=None)
    image: Optional[str] = Field(default=None)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Title cannot be blank")
        return stripped

    @field_validator("user_set_date", "description", "image", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Empty form inputs are submitted as "" rather than omitted."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EncodedImage(BaseModel):
    """Decoded upload widget payload."""

    type: str
    data: str


def parse_form(schema: Type[FormT], **fields) -> FormT:
    """
    Validate submitted form fields against `schema`.

    Raises:
        ValidationError: with the first field error as the user-facing message
    """
    try:
        return schema(**fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            message=f"Invalid {field or 'input'}: {first.get('msg', 'invalid value')}",
            field=field,
            context={"errors": len(e.errors())},
        )


# ══════════════════════════════════════════════════════════════════════════
# View Models — What the templates receive
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    """A user as shown in candidate lists and member lists."""

    id: uuid.UUID
    username: str
    is_private: bool = False

    model_config = {"from_attributes": True}


class FolderDetail(BaseModel):
    """
    Everything the folder page shows.

    usernames: one entry per member, in join order; a member whose account
        no longer resolves is shown as "".
    files: attached files in attachment order; unresolvable ids are skipped.
    """

    folder: TripFolder
    usernames: List[str]
    files: List[TripFile]

    model_config = {"arbitrary_types_allowed": True}


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancer and container probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
