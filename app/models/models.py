from __future__ import annotations

from sqlalchemy import JSON, Date, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, Boolean, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Medicine(Base):
    __tablename__ = "medicine"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Other")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    manufacturer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    retailer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)


class MedicineDemand(Base):
    __tablename__ = "medicine_demand"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    medicine_id: Mapped[int] = mapped_column(ForeignKey("medicine.id"), nullable=False, index=True)
    date: Mapped[Date] = mapped_column(Date, nullable=False, index=True)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    medicine: Mapped[Medicine] = relationship("Medicine")


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    consumer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    retailer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    shipping_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    order_date: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    medicine_id: Mapped[int] = mapped_column(ForeignKey("medicine.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)

    order: Mapped[Order] = relationship("Order", back_populates="items")
    medicine: Mapped[Medicine] = relationship("Medicine")


class AnalyticsReportRecord(Base):
    __tablename__ = "analytics_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    # 1-12 for monthly reports, 0 for whole-year reports.
    month: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    report_type: Mapped[str] = mapped_column(String(20), nullable=False)

    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    predictions: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    recommendations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    related_entities: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    model_version: Mapped[str | None] = mapped_column(String(20), nullable=True)
    last_updated: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("year", "month", "report_type", name="uq_analytics_reports_year_month_type"),
    )


class ForecastModelRecord(Base):
    __tablename__ = "forecast_models"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    scope: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    observations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    mean: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    stddev: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    trained: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
