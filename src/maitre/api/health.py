"""Health check endpoint.

Learn: reports the server as up and probes the user database with
SELECT 1. A failed probe degrades the status but still answers 200, so
a load balancer can tell "process alive" from "database gone".
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maitre import __version__
from maitre.db.engine import get_db

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    database = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("health.database_unreachable", error=str(e))
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "server": "ok",
        "version": __version__,
        "database": database,
    }
