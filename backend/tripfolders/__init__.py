"""
TripFolders Backend — Application Package Initializer
=====================================================

What: Marks the `tripfolders` directory as a Python package.
Why:  Enables module imports like `from tripfolders.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │      Routes (HTML views + forms)    │  ← HTTP concerns, redirects
    ├─────────────────────────────────────┤
    │   Services (folders, membership)    │  ← Business rules
    ├─────────────────────────────────────┤
    │   Stores (folder, file, directory)  │  ← Queries and persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The membership engine (services/membership.py) is the only code allowed
    to change who belongs to a folder and whether that folder is shared.
"""

__version__ = "1.0.0"
