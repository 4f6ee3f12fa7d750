# backend/tenancy/routers/history.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_principal
from ..db import get_db
from ..schemas import TenantHistoryPageOut
from ..services.tenant_history import query_history

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/tenants", response_model=TenantHistoryPageOut)
def tenant_history(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    departure_type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    unit_id: Optional[int] = None,
    property_id: Optional[int] = None,
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    res = query_history(
        db,
        org_id=p.org_id,
        page=page,
        limit=limit,
        departure_type=departure_type,
        date_from=date_from,
        date_to=date_to,
        search=search,
        unit_id=unit_id,
        property_id=property_id,
    )
    return {"items": res.rows, "total": res.total, "page": res.page, "limit": res.limit}
