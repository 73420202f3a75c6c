from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from app.core.forecasting.domain import Observation
from app.models.models import MedicineDemand, Order, OrderItem


def load_demand_observations(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    medicine_id: int | None = None,
    limit: int | None = None,
) -> list[Observation]:
    """Read recorded medicine demand as observations ordered by date ascending."""

    query = db.query(MedicineDemand)
    if medicine_id is not None:
        query = query.filter(MedicineDemand.medicine_id == medicine_id)
    if start_date is not None:
        query = query.filter(MedicineDemand.date >= start_date)
    if end_date is not None:
        query = query.filter(MedicineDemand.date <= end_date)

    query = query.order_by(MedicineDemand.date.asc(), MedicineDemand.id.asc())
    if limit is not None:
        query = query.limit(limit)

    return [Observation(date=row.date, quantity=float(row.quantity)) for row in query.all()]


def load_order_observations(
    db: Session,
    start_date: date | None = None,
    end_date: date | None = None,
    medicine_id: int | None = None,
) -> list[Observation]:
    """Sum ordered item quantities per order day."""

    query = (
        db.query(Order.order_date, OrderItem.quantity)
        .join(OrderItem, OrderItem.order_id == Order.id)
    )
    if medicine_id is not None:
        query = query.filter(OrderItem.medicine_id == medicine_id)
    if start_date is not None:
        query = query.filter(Order.order_date >= datetime.combine(start_date, time.min))
    if end_date is not None:
        query = query.filter(
            Order.order_date < datetime.combine(end_date + timedelta(days=1), time.min)
        )

    totals: dict[date, float] = defaultdict(float)
    for order_date, quantity in query.all():
        totals[order_date.date()] += float(quantity or 0)

    return [Observation(date=day, quantity=totals[day]) for day in sorted(totals)]
