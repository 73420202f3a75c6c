from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping

from app.core.forecasting.errors import InvalidObservationError


@dataclass(frozen=True)
class Observation:
    """A single historical demand data point for a medicine."""

    date: date
    """Calendar day the quantity was recorded for."""

    quantity: float
    """Units demanded on that day. Never negative."""

    def __post_init__(self) -> None:
        if not isinstance(self.date, date):
            raise InvalidObservationError(f"Observation date must be a date, got {self.date!r}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, (int, float)):
            raise InvalidObservationError(
                f"Observation quantity must be a number, got {self.quantity!r}"
            )
        try:
            finite = math.isfinite(self.quantity)
        except OverflowError:
            finite = False
        if not finite:
            raise InvalidObservationError(
                f"Observation quantity must be finite, got {self.quantity!r}"
            )
        if self.quantity < 0:
            raise InvalidObservationError(
                f"Observation quantity must be non-negative, got {self.quantity!r}"
            )


@dataclass(frozen=True)
class Prediction:
    """Forward-looking demand estimate for one calendar day."""

    date: date
    predicted_quantity: float


@dataclass(frozen=True)
class ForecastModelState:
    """Explicit state of a demand model.

    Every model operation takes a state value and returns a new one, so two
    requests working on the same stored model never share a mutable object.
    """

    observations: tuple[Observation, ...] = ()
    mean: float = 0.0
    stddev: float = 0.0
    trained: bool = False

    @property
    def last_observation(self) -> Observation | None:
        return self.observations[-1] if self.observations else None


@dataclass(frozen=True)
class ReportSummary:
    total_drugs: int
    """Number of historical records (not distinct medicines)."""

    average_demand: float
    peak_demand: float
    low_demand: float


@dataclass(frozen=True)
class AnalyticsReport:
    period_start: date | None
    period_end: date | None
    summary: ReportSummary
    historical_data: list[Observation] = field(default_factory=list)
    predictions: list[Prediction] = field(default_factory=list)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
    raise InvalidObservationError(f"Unparseable observation date: {value!r}")


def _parse_quantity(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidObservationError(f"Observation quantity must be a number, got {value!r}")
    if isinstance(value, (int, float, str)):
        try:
            return float(value)
        except (ValueError, OverflowError):
            pass
    raise InvalidObservationError(f"Observation quantity must be a number, got {value!r}")


def parse_observation(raw: Observation | Mapping[str, Any]) -> Observation:
    """Build an Observation from a mapping with ``date`` and ``quantity`` keys.

    Dates may be ``date``/``datetime`` objects or ISO-8601 strings; a
    trailing ``Z`` is accepted. Time-of-day is dropped.
    """

    if isinstance(raw, Observation):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidObservationError(f"Observation must be a mapping, got {type(raw).__name__}")
    if "date" not in raw or "quantity" not in raw:
        raise InvalidObservationError("Observation requires 'date' and 'quantity'")

    return Observation(date=_parse_date(raw["date"]), quantity=_parse_quantity(raw["quantity"]))
