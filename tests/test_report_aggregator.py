from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.core.forecasting.domain import Observation, Prediction
from app.core.forecasting.errors import EmptyInputError
from app.core.forecasting.report import build_report, summarize


def _series(quantities: list[float]) -> list[Observation]:
    start = date(2024, 1, 1)
    return [Observation(date=start + timedelta(days=i), quantity=q) for i, q in enumerate(quantities)]


def test_summary_over_three_records():
    summary = summarize(_series([100, 150, 200]))

    assert summary.total_drugs == 3
    assert summary.average_demand == pytest.approx(150.0)
    assert summary.peak_demand == 200
    assert summary.low_demand == 100


def test_total_drugs_counts_records_not_distinct_values():
    summary = summarize(_series([5, 5, 5, 5]))

    assert summary.total_drugs == 4


def test_empty_history_is_rejected():
    with pytest.raises(EmptyInputError):
        summarize([])


def test_build_report_keeps_series_and_period():
    historical = _series([1, 2])
    predictions = [Prediction(date=date(2024, 1, 3), predicted_quantity=2.5)]

    report = build_report(
        historical,
        predictions,
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 31),
    )

    assert report.period_start == date(2024, 1, 1)
    assert report.period_end == date(2024, 1, 31)
    assert report.historical_data == historical
    assert report.predictions == predictions
    assert report.summary.average_demand == pytest.approx(1.5)
