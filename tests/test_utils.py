from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Session

from app.models.models import Medicine, MedicineDemand, Order, OrderItem


def create_medicine(session: Session, name: str, **kwargs) -> Medicine:
    medicine = Medicine(
        name=name,
        category=kwargs.get("category", "Other"),
        price=kwargs.get("price", 10.0),
        stock_quantity=kwargs.get("stock_quantity", 100),
        low_stock_threshold=kwargs.get("low_stock_threshold", 10),
        manufacturer_id=kwargs.get("manufacturer_id"),
        retailer_id=kwargs.get("retailer_id"),
    )
    session.add(medicine)
    session.flush()
    return medicine


def add_demand(session: Session, medicine: Medicine, day: date, quantity: float) -> MedicineDemand:
    row = MedicineDemand(medicine_id=medicine.id, date=day, quantity=quantity)
    session.add(row)
    session.flush()
    return row


def add_demand_series(session: Session, medicine: Medicine, series: list[tuple[date, float]]) -> None:
    for day, quantity in series:
        add_demand(session, medicine, day, quantity)


def create_order(
    session: Session,
    order_date: datetime,
    items: list[tuple[Medicine, int]],
    retailer_id: str = "retailer-1",
    consumer_id: str = "consumer-1",
    shipping_state: str | None = "Kerala",
    total_amount: float | None = None,
) -> Order:
    order_items = [
        OrderItem(medicine_id=medicine.id, quantity=quantity, price=medicine.price)
        for medicine, quantity in items
    ]
    if total_amount is None:
        total_amount = sum(item.price * item.quantity for item in order_items)

    order = Order(
        consumer_id=consumer_id,
        retailer_id=retailer_id,
        total_amount=total_amount,
        shipping_state=shipping_state,
        order_date=order_date,
        items=order_items,
    )
    session.add(order)
    session.flush()
    return order


def auth_headers(role: str = "admin", user_id: str = "user-1") -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}
