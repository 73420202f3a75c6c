from __future__ import annotations

import random
from datetime import date
from typing import Sequence

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import DRUG_TRENDS_HISTORY_LIMIT, REPORT_HORIZON_DAYS
from app.core.forecasting import model as forecast_model
from app.core.forecasting.domain import Prediction
from app.core.forecasting.report import build_report
from app.models.models import Medicine
from app.schemas.analytics import (
    AnalyticsReportSchema,
    DrugTrendsData,
    ObservationSchema,
    PredictionSchema,
    ReportPeriod,
    ReportSummarySchema,
)
from app.services.time_series import load_demand_observations


def to_prediction_schemas(predictions: Sequence[Prediction]) -> list[PredictionSchema]:
    return [
        PredictionSchema(date=p.date, predicted_quantity=p.predicted_quantity)
        for p in predictions
    ]


def build_analytics_report(
    db: Session,
    start_date: date | None,
    end_date: date | None,
    horizon_days: int = REPORT_HORIZON_DAYS,
    rng: random.Random | None = None,
) -> AnalyticsReportSchema:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate must not be after endDate",
        )

    historical = load_demand_observations(db, start_date=start_date, end_date=end_date)

    # A fresh model per request; nothing is shared between callers.
    state = forecast_model.train(historical)
    predictions = forecast_model.predict(state, horizon_days=horizon_days, rng=rng)
    report = build_report(historical, predictions, period_start=start_date, period_end=end_date)

    return AnalyticsReportSchema(
        period=ReportPeriod(start=report.period_start, end=report.period_end),
        summary=ReportSummarySchema(
            total_drugs=report.summary.total_drugs,
            average_demand=report.summary.average_demand,
            peak_demand=report.summary.peak_demand,
            low_demand=report.summary.low_demand,
        ),
        historical_data=[
            ObservationSchema.model_validate(obs, from_attributes=True)
            for obs in report.historical_data
        ],
        predictions=to_prediction_schemas(report.predictions),
    )


def build_drug_trends(
    db: Session,
    medicine_id: int,
    horizon_days: int = REPORT_HORIZON_DAYS,
    rng: random.Random | None = None,
) -> DrugTrendsData:
    medicine = db.query(Medicine).filter(Medicine.id == medicine_id).first()
    if medicine is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Medicine not found")

    historical = load_demand_observations(
        db,
        medicine_id=medicine_id,
        limit=DRUG_TRENDS_HISTORY_LIMIT,
    )

    state = forecast_model.train(historical)
    predictions = forecast_model.predict(state, horizon_days=horizon_days, rng=rng)

    return DrugTrendsData(
        historical=[ObservationSchema.model_validate(obs, from_attributes=True) for obs in historical],
        predictions=to_prediction_schemas(predictions),
    )
