from datetime import date

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.api.deps import require_roles
from app.core.config import ANALYTICS_REPORT_ROLES, DRUG_TRENDS_ROLES
from app.core.db import get_db
from app.schemas.analytics import AnalyticsReportResponse, DrugTrendsResponse
from app.schemas.auth import CurrentUser
from app.services.analytics import build_analytics_report, build_drug_trends


router = APIRouter()


@router.get("/report", response_model=AnalyticsReportResponse)
def get_analytics_report(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_roles(ANALYTICS_REPORT_ROLES)),
):
    report = build_analytics_report(db=db, start_date=start_date, end_date=end_date)
    return AnalyticsReportResponse(report=report)


@router.get("/drug/{drug_id}/trends", response_model=DrugTrendsResponse)
def get_drug_demand_trends(
    drug_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_roles(DRUG_TRENDS_ROLES)),
):
    data = build_drug_trends(db=db, medicine_id=drug_id)
    return DrugTrendsResponse(data=data)
