# Models package init
"""
Importing this package registers every model with Base.metadata, which
Alembic autogenerate and the test suite's create_all both rely on.
"""

from tripfolders.models.file import TripFile
from tripfolders.models.folder import (
    FolderFile,
    FolderMember,
    TripFolder,
    Visibility,
    visibility_for,
)
from tripfolders.models.user import User

__all__ = [
    "FolderFile",
    "FolderMember",
    "TripFile",
    "TripFolder",
    "User",
    "Visibility",
    "visibility_for",
]
