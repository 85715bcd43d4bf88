# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from database import get_db
from models.log import Log
from schemas.user import TokenUser
from utils.authentication import authorize_roles

router = APIRouter(prefix="/logs", tags=["Logs"])

# --- SCHEMAS ---
class LogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: Optional[datetime] = None
    meta: Optional[Any] = None

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int


def _parse_day(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    if end_of_day and len(value) == 10:  # YYYY-MM-DD
        value += " 23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status.upper())

    # Malformed dates are ignored
    dt_from = _parse_day(date_from)
    if dt_from:
        query = query.filter(Log.ts >= dt_from)
    dt_to = _parse_day(date_to, end_of_day=True)
    if dt_to:
        query = query.filter(Log.ts <= dt_to)

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
