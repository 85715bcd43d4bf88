from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session
from models.log import Log

def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    # Behind a proxy the original client is the first X-Forwarded-For hop
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
