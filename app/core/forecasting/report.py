from __future__ import annotations

from datetime import date
from typing import Sequence

from app.core.forecasting.domain import AnalyticsReport, Observation, Prediction, ReportSummary
from app.core.forecasting.errors import EmptyInputError


def summarize(historical: Sequence[Observation]) -> ReportSummary:
    """Aggregate historical quantities into report summary statistics.

    ``total_drugs`` is the number of records, not the number of distinct
    medicines.
    """

    if not historical:
        raise EmptyInputError("No historical data available for the requested period")

    quantities = [float(obs.quantity) for obs in historical]
    return ReportSummary(
        total_drugs=len(quantities),
        average_demand=sum(quantities) / len(quantities),
        peak_demand=max(quantities),
        low_demand=min(quantities),
    )


def build_report(
    historical: Sequence[Observation],
    predictions: Sequence[Prediction],
    period_start: date | None = None,
    period_end: date | None = None,
) -> AnalyticsReport:
    return AnalyticsReport(
        period_start=period_start,
        period_end=period_end,
        summary=summarize(historical),
        historical_data=list(historical),
        predictions=list(predictions),
    )
