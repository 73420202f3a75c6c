from __future__ import annotations


class ForecastError(Exception):
    """Base class for demand forecasting failures."""


class EmptyInputError(ForecastError):
    """No observations were available to train on or summarize."""


class UntrainedModelError(ForecastError):
    """Predictions were requested from a model that was never trained."""


class InvalidObservationError(ForecastError):
    """An observation had a negative/non-numeric quantity or an unparseable date."""


class HorizonOutOfRangeError(ForecastError):
    """The prediction horizon would run past the last representable calendar date."""
