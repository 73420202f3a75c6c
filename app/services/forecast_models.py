from __future__ import annotations

import logging
import random
from datetime import date
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import DEFAULT_PREDICTION_DAYS
from app.core.forecasting import model as forecast_model
from app.core.forecasting.domain import ForecastModelState, Observation
from app.core.forecasting.errors import EmptyInputError
from app.models.models import ForecastModelRecord, Medicine
from app.schemas.forecast_model import ModelStateResponse, PredictionsResponse
from app.services.analytics import to_prediction_schemas
from app.services.time_series import load_demand_observations, load_order_observations


logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"
TRAINING_SOURCES = ("demand", "orders")


def scope_name(medicine_id: int | None) -> str:
    return GLOBAL_SCOPE if medicine_id is None else f"medicine-{medicine_id}"


def _state_from_record(record: ForecastModelRecord | None) -> ForecastModelState:
    if record is None or not record.trained:
        return ForecastModelState()

    observations = tuple(
        Observation(date=date.fromisoformat(item["date"]), quantity=float(item["quantity"]))
        for item in record.observations or []
    )
    return ForecastModelState(
        observations=observations,
        mean=record.mean,
        stddev=record.stddev,
        trained=True,
    )


def load_model_state(db: Session, scope: str) -> ForecastModelState:
    record = db.query(ForecastModelRecord).filter(ForecastModelRecord.scope == scope).first()
    return _state_from_record(record)


def save_model_state(db: Session, scope: str, state: ForecastModelState) -> ForecastModelRecord:
    """Persist a model state under ``scope``. Concurrent writers: last write wins."""

    record = db.query(ForecastModelRecord).filter(ForecastModelRecord.scope == scope).first()
    if record is None:
        record = ForecastModelRecord(scope=scope)
        db.add(record)

    record.observations = [
        {"date": obs.date.isoformat(), "quantity": float(obs.quantity)}
        for obs in state.observations
    ]
    record.mean = state.mean
    record.stddev = state.stddev
    record.trained = state.trained

    db.commit()
    db.refresh(record)
    return record


def _ensure_medicine(db: Session, medicine_id: int | None) -> None:
    if medicine_id is None:
        return
    medicine = db.query(Medicine).filter(Medicine.id == medicine_id).first()
    if medicine is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Medicine not found")


def _state_response(message: str, scope: str, state: ForecastModelState) -> ModelStateResponse:
    return ModelStateResponse(
        message=message,
        scope=scope,
        observations=len(state.observations),
        mean=state.mean,
        stddev=state.stddev,
    )


def train_model(
    db: Session,
    medicine_id: int | None = None,
    source: str = "demand",
) -> ModelStateResponse:
    if source not in TRAINING_SOURCES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported training source '{source}'",
        )
    _ensure_medicine(db, medicine_id)

    if source == "orders":
        observations = load_order_observations(db, medicine_id=medicine_id)
    else:
        observations = load_demand_observations(db, medicine_id=medicine_id)

    if not observations:
        raise EmptyInputError("No historical data available for training")

    scope = scope_name(medicine_id)
    state = forecast_model.train(observations)
    save_model_state(db, scope, state)

    logger.info(
        "Trained forecast model scope=%s source=%s observations=%s",
        scope,
        source,
        len(state.observations),
    )
    return _state_response("Model trained successfully", scope, state)


def get_predictions(
    db: Session,
    days: int = DEFAULT_PREDICTION_DAYS,
    medicine_id: int | None = None,
    rng: random.Random | None = None,
) -> PredictionsResponse:
    scope = scope_name(medicine_id)
    state = load_model_state(db, scope)
    predictions = forecast_model.predict(state, horizon_days=days, rng=rng)
    return PredictionsResponse(scope=scope, predictions=to_prediction_schemas(predictions))


def update_model(
    db: Session,
    raw_observations: Any,
    medicine_id: int | None = None,
) -> ModelStateResponse:
    if not isinstance(raw_observations, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data format")
    _ensure_medicine(db, medicine_id)

    scope = scope_name(medicine_id)
    state = forecast_model.update(load_model_state(db, scope), raw_observations)
    save_model_state(db, scope, state)

    logger.info(
        "Updated forecast model scope=%s appended=%s total=%s",
        scope,
        len(raw_observations),
        len(state.observations),
    )
    return _state_response("Model updated successfully", scope, state)
