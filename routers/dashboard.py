# routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_session
from dependencies import verify_token
from permissions import Principal
from schemas.dashboard import DashboardStats
from services import dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get(
     "/stats",
     response_model=DashboardStats,
     response_model_exclude_none=True,
     summary="Dashboard totals for the current user",
)
def get_stats(db: Session = Depends(get_session), principal: Principal = Depends(verify_token)):
     return dashboard_service.get_stats(db, principal)
