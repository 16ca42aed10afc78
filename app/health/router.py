"""Health domain router.

Health check endpoint for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.constants import Routes
from app.core.deps import SessionDep, StorageDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])


@router.get("")
async def health(session: SessionDep, storage: StorageDep):
    """Check database connectivity and that the upload root is writable."""
    database = "ok"
    try:
        session.exec(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        database = "error"

    uploads = "ok" if storage.is_writable() else "error"

    if database == "ok" and uploads == "ok":
        return {"status": "ok", "database": database, "uploads": uploads}
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "database": database, "uploads": uploads},
    )
