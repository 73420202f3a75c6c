from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_roles
from app.core.config import (
    ANNUAL_REPORT_ROLES,
    DEFAULT_PREDICTION_DAYS,
    MAX_PREDICTION_DAYS,
    MAX_REPORT_YEAR,
    MIN_REPORT_YEAR,
)
from app.core.db import get_db
from app.schemas.annual_report import AnnualReportListResponse, AnnualReportResponse
from app.schemas.auth import CurrentUser
from app.schemas.forecast_model import ModelStateResponse, ModelUpdateRequest, PredictionsResponse
from app.services.annual_report import generate_annual_report, get_report, list_reports
from app.services.forecast_models import get_predictions, train_model, update_model


router = APIRouter()


@router.post("/train", response_model=ModelStateResponse)
def train_forecast_model(
    drug_id: int | None = Query(default=None, alias="drugId", ge=1),
    source: str = Query(default="demand"),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return train_model(db=db, medicine_id=drug_id, source=source)


@router.get("/predictions", response_model=PredictionsResponse)
def get_forecast_predictions(
    days: int = Query(default=DEFAULT_PREDICTION_DAYS, ge=1, le=MAX_PREDICTION_DAYS),
    drug_id: int | None = Query(default=None, alias="drugId", ge=1),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    return get_predictions(db=db, days=days, medicine_id=drug_id)


@router.post("/update", response_model=ModelStateResponse)
def update_forecast_model(
    payload: ModelUpdateRequest | None = None,
    drug_id: int | None = Query(default=None, alias="drugId", ge=1),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(get_current_user),
):
    raw_observations = payload.data if payload is not None else None
    return update_model(db=db, raw_observations=raw_observations, medicine_id=drug_id)


@router.post("/analyze/{year}", response_model=AnnualReportResponse)
def analyze_year(
    year: int = Path(..., ge=MIN_REPORT_YEAR, le=MAX_REPORT_YEAR),
    db: Session = Depends(get_db),
    _user: CurrentUser = Depends(require_roles(ANNUAL_REPORT_ROLES)),
):
    return AnnualReportResponse(data=generate_annual_report(db=db, year=year))


@router.get("/reports", response_model=AnnualReportListResponse)
def get_reports(
    year: int | None = Query(default=None),
    report_type: str | None = Query(default=None, alias="type"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_roles(ANNUAL_REPORT_ROLES)),
):
    reports = list_reports(db=db, user=user, year=year, report_type=report_type)
    return AnnualReportListResponse(count=len(reports), data=reports)


@router.get("/reports/{report_id}", response_model=AnnualReportResponse)
def get_single_report(
    report_id: int = Path(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_roles(ANNUAL_REPORT_ROLES)),
):
    return AnnualReportResponse(data=get_report(db=db, user=user, report_id=report_id))
