from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.core.db import get_db
from app.main import app
from app.models.models import ForecastModelRecord
from tests.test_utils import add_demand_series, auth_headers, create_medicine, create_order


@pytest.fixture
def client(db_session):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_train_requires_authentication(client):
    resp = client.post("/api/ml/train")
    assert resp.status_code == 401, resp.text


def test_train_without_history_is_a_bad_request(client):
    resp = client.post("/api/ml/train", headers=auth_headers("consumer"))
    assert resp.status_code == 400, resp.text
    assert resp.json() == {
        "success": False,
        "message": "No historical data available for training",
    }


def test_predictions_before_training_conflict(client):
    resp = client.get("/api/ml/predictions", headers=auth_headers())
    assert resp.status_code == 409, resp.text
    assert resp.json()["message"] == "Model not trained"


def test_train_then_predict_global_model(client, db_session):
    med = create_medicine(db_session, "Azithromycin")
    add_demand_series(
        db_session,
        med,
        [(date(2024, 1, 1), 100), (date(2024, 1, 2), 150)],
    )

    resp = client.post("/api/ml/train", headers=auth_headers())
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["scope"] == "global"
    assert body["observations"] == 2
    assert body["mean"] == pytest.approx(125.0)
    stddev = body["stddev"]

    record = db_session.query(ForecastModelRecord).filter_by(scope="global").one()
    assert record.trained is True
    assert record.observations == [
        {"date": "2024-01-01", "quantity": 100.0},
        {"date": "2024-01-02", "quantity": 150.0},
    ]

    resp = client.get("/api/ml/predictions", params={"days": 2}, headers=auth_headers())
    assert resp.status_code == 200, resp.text
    predictions = resp.json()["predictions"]
    assert [p["date"] for p in predictions] == ["2024-01-03", "2024-01-04"]
    for p in predictions:
        assert p["predictedQuantity"] >= 0
        assert 150 - stddev <= p["predictedQuantity"] <= 150 + stddev


def test_predictions_default_to_seven_days(client, db_session):
    med = create_medicine(db_session, "Ranitidine")
    add_demand_series(db_session, med, [(date(2024, 1, 1), 8)])
    client.post("/api/ml/train", headers=auth_headers())

    resp = client.get("/api/ml/predictions", headers=auth_headers())
    assert resp.status_code == 200, resp.text
    assert len(resp.json()["predictions"]) == 7


@pytest.mark.parametrize("days", [0, 366])
def test_predictions_days_out_of_range(client, days):
    resp = client.get("/api/ml/predictions", params={"days": days}, headers=auth_headers())
    assert resp.status_code == 422, resp.text


def test_per_medicine_scope_is_independent(client, db_session):
    med_a = create_medicine(db_session, "Levothyroxine")
    med_b = create_medicine(db_session, "Warfarin")
    add_demand_series(db_session, med_a, [(date(2024, 1, 1), 10), (date(2024, 1, 2), 10)])
    add_demand_series(db_session, med_b, [(date(2024, 1, 1), 70)])

    resp = client.post("/api/ml/train", params={"drugId": med_a.id}, headers=auth_headers())
    assert resp.status_code == 200, resp.text
    assert resp.json()["scope"] == f"medicine-{med_a.id}"

    resp = client.get(
        "/api/ml/predictions",
        params={"drugId": med_a.id, "days": 3},
        headers=auth_headers(),
    )
    assert [p["predictedQuantity"] for p in resp.json()["predictions"]] == [10.0, 10.0, 10.0]

    # The global model was never trained.
    resp = client.get("/api/ml/predictions", headers=auth_headers())
    assert resp.status_code == 409, resp.text


def test_train_from_order_history(client, db_session):
    med = create_medicine(db_session, "Diclofenac", price=3.0)
    create_order(db_session, datetime(2024, 7, 1, 10, 0), [(med, 5)])
    create_order(db_session, datetime(2024, 7, 1, 12, 0), [(med, 5)])
    create_order(db_session, datetime(2024, 7, 2, 12, 0), [(med, 10)])

    resp = client.post("/api/ml/train", params={"source": "orders"}, headers=auth_headers())
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["observations"] == 2
    assert body["stddev"] == 0.0

    resp = client.get("/api/ml/predictions", params={"days": 1}, headers=auth_headers())
    assert resp.json()["predictions"] == [{"date": "2024-07-03", "predictedQuantity": 10.0}]


def test_train_with_unknown_source(client):
    resp = client.post("/api/ml/train", params={"source": "weather"}, headers=auth_headers())
    assert resp.status_code == 400, resp.text


def test_train_unknown_medicine(client):
    resp = client.post("/api/ml/train", params={"drugId": 4242}, headers=auth_headers())
    assert resp.status_code == 404, resp.text


def test_update_untrained_model_trains_it(client):
    resp = client.post(
        "/api/ml/update",
        json={"data": [{"date": "2024-03-01", "quantity": 12}, {"date": "2024-03-02", "quantity": 12}]},
        headers=auth_headers(),
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["message"] == "Model updated successfully"
    assert body["observations"] == 2

    resp = client.get("/api/ml/predictions", params={"days": 1}, headers=auth_headers())
    assert resp.json()["predictions"] == [{"date": "2024-03-03", "predictedQuantity": 12.0}]


def test_update_appends_to_trained_model(client, db_session):
    med = create_medicine(db_session, "Clopidogrel")
    start = date(2024, 1, 1)
    add_demand_series(db_session, med, [(start + timedelta(days=i), q) for i, q in enumerate([10, 20, 30])])
    client.post("/api/ml/train", headers=auth_headers())

    resp = client.post(
        "/api/ml/update",
        json={"data": [{"date": "2024-01-04", "quantity": 40}]},
        headers=auth_headers(),
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["observations"] == 4
    assert body["mean"] == pytest.approx(25.0)

    record = db_session.query(ForecastModelRecord).filter_by(scope="global").one()
    assert record.observations[-1] == {"date": "2024-01-04", "quantity": 40.0}


@pytest.mark.parametrize("payload", [{}, {"data": None}])
def test_update_with_missing_data_is_invalid_format(client, payload):
    resp = client.post("/api/ml/update", json=payload, headers=auth_headers())
    assert resp.status_code == 400, resp.text
    assert resp.json()["detail"] == "Invalid data format"


def test_update_with_negative_quantity_is_rejected(client):
    resp = client.post(
        "/api/ml/update",
        json={"data": [{"date": "2024-03-01", "quantity": -5}]},
        headers=auth_headers(),
    )
    assert resp.status_code == 400, resp.text
    assert resp.json()["success"] is False


def test_update_with_empty_list_on_untrained_model(client):
    resp = client.post("/api/ml/update", json={"data": []}, headers=auth_headers())
    assert resp.status_code == 400, resp.text


@pytest.mark.parametrize("data", ["oops", 5, {"date": "2024-03-01", "quantity": 1}])
def test_update_with_non_list_data_is_invalid_format(client, data):
    resp = client.post("/api/ml/update", json={"data": data}, headers=auth_headers())
    assert resp.status_code == 400, resp.text
    assert resp.json()["detail"] == "Invalid data format"


@pytest.mark.parametrize(
    "quantity",
    ['"inf"', '"nan"', "1e999", "1" + "0" * 400],
)
def test_update_with_non_finite_quantity_is_rejected(client, quantity):
    body = '{"data": [{"date": "2024-03-01", "quantity": %s}]}' % quantity
    resp = client.post(
        "/api/ml/update",
        content=body,
        headers={**auth_headers(), "Content-Type": "application/json"},
    )
    assert resp.status_code == 400, resp.text
    assert resp.json()["success"] is False

    resp = client.get("/api/ml/predictions", headers=auth_headers())
    assert resp.status_code == 409, resp.text


def test_predictions_past_last_calendar_date_are_a_bad_request(client):
    resp = client.post(
        "/api/ml/update",
        json={"data": [{"date": "9999-12-30", "quantity": 4}]},
        headers=auth_headers(),
    )
    assert resp.status_code == 200, resp.text

    resp = client.get("/api/ml/predictions", params={"days": 7}, headers=auth_headers())
    assert resp.status_code == 400, resp.text
    assert resp.json()["success"] is False
