import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techphone.core.config import APP_NAME, APP_VERSION
from techphone.db.session import get_db
from techphone.db.supabase import is_configured as baas_configured
from techphone.utils.helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error(f"[Health] Database check failed: {e}")
        database = "error"
    return {
        "status": "OK",
        "timestamp": utcnow().isoformat(),
        "service": APP_NAME,
        "version": APP_VERSION,
        "database": database,
        "baas": "configured" if baas_configured() else "disabled",
    }
