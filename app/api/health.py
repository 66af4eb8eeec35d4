# app/api/health.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.db.engine_sync import get_sync_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["System"])
def get_system_health(session: Session = Depends(get_sync_session)):
    """
    Liveness plus a round trip to the database.
    Answers 503 when the database cannot be reached.
    """
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unreachable"},
        )
    return {"status": "ok", "database": "ok"}
