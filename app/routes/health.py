import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from app.database import get_session

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    started = time.perf_counter()

    try:
        session.exec(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return JSONResponse(
            status_code=503,
            content={"message": "degraded", "data": {"database": "failed"}},
        )

    return {
        "message": "ok",
        "data": {
            "database": "ok",
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "timestamp": datetime.utcnow().isoformat(),
        },
    }
