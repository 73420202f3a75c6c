"""Demand model over a single quantity time series.

The model keeps the mean and sample standard deviation of the observed
quantities. A prediction for each future day is the last observed quantity
plus uniform noise in ``[-stddev, +stddev]``, floored at zero. There is no
trend or seasonality component.
"""

from __future__ import annotations

import logging
import random
import statistics
from datetime import timedelta
from typing import Any, Iterable, Mapping

from app.core.forecasting.domain import (
    ForecastModelState,
    Observation,
    Prediction,
    parse_observation,
)
from app.core.forecasting.errors import (
    EmptyInputError,
    ForecastError,
    HorizonOutOfRangeError,
    UntrainedModelError,
)


logger = logging.getLogger(__name__)


def _coerce(observations: Iterable[Observation | Mapping[str, Any]]) -> tuple[Observation, ...]:
    if observations is None:
        raise EmptyInputError("No observations available to train the model")
    return tuple(parse_observation(item) for item in observations)


def _statistics(values: list[float]) -> tuple[float, float]:
    mean = statistics.fmean(values)
    # Sample standard deviation; a single point has no spread.
    stddev = statistics.stdev(values) if len(values) > 1 else 0.0
    return mean, stddev


def train(observations: Iterable[Observation | Mapping[str, Any]]) -> ForecastModelState:
    parsed = _coerce(observations)
    if not parsed:
        raise EmptyInputError("No observations available to train the model")

    mean, stddev = _statistics([obs.quantity for obs in parsed])
    return ForecastModelState(observations=parsed, mean=mean, stddev=stddev, trained=True)


def update(
    state: ForecastModelState,
    observations: Iterable[Observation | Mapping[str, Any]],
) -> ForecastModelState:
    """Append observations and recompute statistics over the full series.

    Appended observations are neither deduplicated nor re-sorted.
    """

    if not state.trained:
        return train(observations)

    parsed = _coerce(observations)
    combined = state.observations + parsed
    mean, stddev = _statistics([obs.quantity for obs in combined])
    return ForecastModelState(observations=combined, mean=mean, stddev=stddev, trained=True)


def predict(
    state: ForecastModelState,
    horizon_days: int = 7,
    rng: random.Random | None = None,
) -> list[Prediction]:
    if not state.trained or state.last_observation is None:
        raise UntrainedModelError("Model not trained")
    if horizon_days < 1:
        raise ValueError(f"horizon_days must be >= 1, got {horizon_days}")

    last = state.last_observation
    try:
        last.date + timedelta(days=horizon_days)
    except OverflowError:
        raise HorizonOutOfRangeError(
            f"Cannot predict {horizon_days} days past {last.date.isoformat()}"
        ) from None

    rng = rng or random.Random()
    spread = state.stddev

    predictions: list[Prediction] = []
    for offset in range(1, horizon_days + 1):
        variation = rng.uniform(-spread, spread) if spread > 0 else 0.0
        predictions.append(
            Prediction(
                date=last.date + timedelta(days=offset),
                predicted_quantity=max(0.0, float(last.quantity) + variation),
            )
        )
    return predictions


class ForecastModel:
    """Per-request wrapper around a ForecastModelState.

    ``train`` and ``update`` report failure through their return value and
    keep the exception in ``last_error``; ``predict`` raises.
    """

    def __init__(self, state: ForecastModelState | None = None, rng: random.Random | None = None) -> None:
        self.state = state or ForecastModelState()
        self.last_error: ForecastError | None = None
        self._rng = rng

    @property
    def trained(self) -> bool:
        return self.state.trained

    def train(self, observations: Iterable[Observation | Mapping[str, Any]]) -> bool:
        try:
            self.state = train(observations)
        except ForecastError as exc:
            logger.warning("Error training model: %s", exc)
            self.last_error = exc
            return False
        self.last_error = None
        return True

    def update(self, observations: Iterable[Observation | Mapping[str, Any]]) -> bool:
        try:
            self.state = update(self.state, observations)
        except ForecastError as exc:
            logger.warning("Error updating model: %s", exc)
            self.last_error = exc
            return False
        self.last_error = None
        return True

    def predict(self, horizon_days: int = 7) -> list[Prediction]:
        return predict(self.state, horizon_days=horizon_days, rng=self._rng)
