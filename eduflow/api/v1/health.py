# eduflow/api/v1/health.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from eduflow.db.session import Database, get_app_database

router = APIRouter()


@router.get("/health")
def health(db: Database = Depends(get_app_database)):
    """Database liveness check"""
    if not db.ping():
        return JSONResponse(status_code=500, content={"ok": False, "message": "Database connection failed."})
    return {"ok": True}
