"""Centralized dependency type aliases for FastAPI routes.

Import shared dependencies from this single module:
    from app.core.deps import SessionDep, SettingsDep, StorageDep

Auth-related aliases (AuthContextDep, CurrentAccountDep) live in
app.auth.dependencies next to the session verifier.
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from app.core.settings import Settings, get_settings
from app.db.engine import get_session
from app.uploads.storage import UploadStorage, get_upload_storage

# Database session
SessionDep = Annotated[Session, Depends(get_session)]

# Application settings
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Upload root on disk
StorageDep = Annotated[UploadStorage, Depends(get_upload_storage)]
