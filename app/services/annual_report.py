from __future__ import annotations

import logging
import random
from collections import defaultdict
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.config import (
    LOW_STOCK_HIGH_PRIORITY_COUNT,
    MAX_REPORT_YEAR,
    MIN_REPORT_YEAR,
    MODEL_VERSION,
    NEXT_YEAR_GROWTH_MAX,
    NEXT_YEAR_GROWTH_MIN,
    RECOMMENDATION_TEMPLATES,
    REPORT_TYPES,
    SEASONAL_TRENDS,
    TOP_SELLING_LIMIT,
)
from app.models.models import AnalyticsReportRecord, Medicine, Order
from app.schemas.annual_report import AnalyticsReportRecordSchema
from app.schemas.auth import CurrentUser


logger = logging.getLogger(__name__)

SALES_REPORT_TYPE = "sales"
ANNUAL_REPORT_MONTH = 0

# Which related_entities list grants a non-admin role access to a report.
ROLE_ENTITY_KEYS = {
    "retailer": "retailers",
    "manufacturer": "manufacturers",
    "supplier": "suppliers",
}


def _to_schema(record: AnalyticsReportRecord) -> AnalyticsReportRecordSchema:
    return AnalyticsReportRecordSchema(
        id=record.id,
        year=record.year,
        month=record.month,
        report_type=record.report_type,
        data=record.data or {},
        predictions=record.predictions,
        recommendations=record.recommendations or [],
        related_entities=record.related_entities or {},
        model_version=record.model_version,
        last_updated=record.last_updated,
        created_at=record.created_at,
    )


def _build_recommendations(low_stock_count: int) -> list[dict]:
    recommendations: list[dict] = []
    for template in RECOMMENDATION_TEMPLATES:
        priority = template["priority"]
        if priority is None:
            priority = "high" if low_stock_count > LOW_STOCK_HIGH_PRIORITY_COUNT else "medium"
        recommendations.append(
            {
                "title": template["title"],
                "description": template["description"].format(low_stock_count=low_stock_count),
                "priority": priority,
            }
        )
    return recommendations


def _top_selling(
    medicines_by_id: dict[int, Medicine],
    medicines_sold: dict[int, int],
) -> list[dict]:
    ranked = sorted(medicines_sold.items(), key=lambda item: (-item[1], item[0]))
    top: list[dict] = []
    for medicine_id, quantity in ranked[:TOP_SELLING_LIMIT]:
        medicine = medicines_by_id.get(medicine_id)
        top.append(
            {
                "id": medicine_id,
                "name": medicine.name if medicine is not None else "Unknown",
                "quantity": quantity,
                "revenue": float(medicine.price) * quantity if medicine is not None else 0.0,
            }
        )
    return top


def _find_annual_report(db: Session, year: int) -> AnalyticsReportRecord | None:
    return (
        db.query(AnalyticsReportRecord)
        .filter(
            AnalyticsReportRecord.year == year,
            AnalyticsReportRecord.month == ANNUAL_REPORT_MONTH,
            AnalyticsReportRecord.report_type == SALES_REPORT_TYPE,
        )
        .first()
    )


def _save_annual_report(db: Session, year: int, fields: dict) -> AnalyticsReportRecord:
    """Upsert the (year, 0, "sales") row.

    When another writer inserts the same key between our lookup and commit,
    the unique constraint rejects our row and we update theirs instead.
    """

    record = _find_annual_report(db, year)
    if record is None:
        record = AnalyticsReportRecord(
            year=year,
            month=ANNUAL_REPORT_MONTH,
            report_type=SALES_REPORT_TYPE,
            **fields,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Annual report for year=%s inserted concurrently, updating it", year)
            record = _find_annual_report(db, year)
            if record is None:
                raise
        else:
            db.refresh(record)
            return record

    for key, value in fields.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return record


def generate_annual_report(
    db: Session,
    year: int,
    rng: random.Random | None = None,
) -> AnalyticsReportRecordSchema:
    """Build the yearly sales analysis from orders and stock levels and upsert it.

    Reports are keyed by (year, month=0, "sales"); regenerating a year
    replaces the stored report.
    """

    if year < MIN_REPORT_YEAR or year > MAX_REPORT_YEAR:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a valid year",
        )

    rng = rng or random.Random()

    medicines = db.query(Medicine).order_by(Medicine.id).all()
    medicines_by_id = {m.id: m for m in medicines}

    start = datetime(year, 1, 1)
    end = datetime(year + 1, 1, 1)
    orders = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.order_date >= start, Order.order_date < end)
        .order_by(Order.order_date, Order.id)
        .all()
    )

    orders_by_month = [0] * 12
    sales_by_month = [0.0] * 12
    medicines_sold: dict[int, int] = defaultdict(int)
    customers_by_region: dict[str, int] = defaultdict(int)

    for order in orders:
        month = order.order_date.month - 1
        orders_by_month[month] += 1
        sales_by_month[month] += float(order.total_amount or 0)

        for item in order.items:
            medicines_sold[item.medicine_id] += item.quantity

        region = order.shipping_state or "Unknown"
        customers_by_region[region] += 1

    low_stock_medicines = [
        {
            "id": m.id,
            "name": m.name,
            "currentStock": m.stock_quantity,
            "threshold": m.low_stock_threshold,
        }
        for m in medicines
        if m.stock_quantity <= m.low_stock_threshold
    ]

    total_sales = sum(sales_by_month)
    next_year_sales_prediction = [
        amount * (1 + rng.uniform(NEXT_YEAR_GROWTH_MIN, NEXT_YEAR_GROWTH_MAX))
        for amount in sales_by_month
    ]
    growth_rate = (sum(next_year_sales_prediction) / (total_sales + 1) - 1) * 100

    data = {
        "totalOrders": len(orders),
        "totalSales": total_sales,
        "averageMonthlySales": total_sales / 12,
        "ordersByMonth": orders_by_month,
        "salesByMonth": sales_by_month,
        "topSellingMedicines": _top_selling(medicines_by_id, medicines_sold),
        "customersByRegion": dict(customers_by_region),
        "lowStockMedicines": low_stock_medicines,
    }
    predictions = {
        "nextYearSalesPrediction": next_year_sales_prediction,
        "seasonalTrends": [dict(trend) for trend in SEASONAL_TRENDS],
        "growthRate": growth_rate,
    }
    related_entities = {
        "medicines": [str(m.id) for m in medicines],
        "retailers": sorted({o.retailer_id for o in orders if o.retailer_id}),
        "manufacturers": sorted({m.manufacturer_id for m in medicines if m.manufacturer_id}),
        "suppliers": [],
    }

    record = _save_annual_report(
        db,
        year,
        {
            "data": data,
            "predictions": predictions,
            "recommendations": _build_recommendations(len(low_stock_medicines)),
            "related_entities": related_entities,
            "model_version": MODEL_VERSION,
            "last_updated": datetime.now(timezone.utc),
        },
    )

    logger.info(
        "Generated annual sales report year=%s orders=%s low_stock=%s",
        year,
        len(orders),
        len(low_stock_medicines),
    )
    return _to_schema(record)


def _can_access(user: CurrentUser, record: AnalyticsReportRecord) -> bool:
    if user.is_admin:
        return True
    key = ROLE_ENTITY_KEYS.get(user.role)
    if key is None:
        return False
    related = (record.related_entities or {}).get(key) or []
    return user.id in related


def list_reports(
    db: Session,
    user: CurrentUser,
    year: int | None = None,
    report_type: str | None = None,
) -> list[AnalyticsReportRecordSchema]:
    if report_type is not None and report_type not in REPORT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown report type '{report_type}'",
        )

    query = db.query(AnalyticsReportRecord)
    if year is not None:
        query = query.filter(AnalyticsReportRecord.year == year)
    if report_type is not None:
        query = query.filter(AnalyticsReportRecord.report_type == report_type)

    rows = query.order_by(AnalyticsReportRecord.year.desc(), AnalyticsReportRecord.id.desc()).all()

    return [
        _to_schema(row)
        for row in rows
        if _can_access(user, row)
    ]


def get_report(db: Session, user: CurrentUser, report_id: int) -> AnalyticsReportRecordSchema:
    record = db.query(AnalyticsReportRecord).filter(AnalyticsReportRecord.id == report_id).first()
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report not found with id of {report_id}",
        )

    if not _can_access(user, record):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"User {user.id} is not authorized to access this report",
        )

    return _to_schema(record)
