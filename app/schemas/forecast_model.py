from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from app.schemas.analytics import PredictionSchema


class ModelUpdateRequest(BaseModel):
    # Validated by the service so a non-list body gets the same 400 as a missing one.
    data: Any = None


class ModelStateResponse(BaseModel):
    success: bool = True
    message: str
    scope: str
    observations: int
    mean: float
    stddev: float


class PredictionsResponse(BaseModel):
    success: bool = True
    scope: str
    predictions: list[PredictionSchema]
