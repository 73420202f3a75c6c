from __future__ import annotations

import os


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rxsupply.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Periodic regeneration of the current year's sales report.
ANALYTICS_SCHEDULER_ENABLED = os.getenv("ANALYTICS_SCHEDULER_ENABLED", "false").lower()
ANALYTICS_SCHEDULER_INTERVAL_MINUTES = int(
    os.getenv("ANALYTICS_SCHEDULER_INTERVAL_MINUTES", "1440")
)

DEFAULT_PREDICTION_DAYS = 7
MAX_PREDICTION_DAYS = 365
REPORT_HORIZON_DAYS = 30
DRUG_TRENDS_HISTORY_LIMIT = 100
TOP_SELLING_LIMIT = 10
# Reports cover [year-01-01, year+1-01-01), so the last reportable year is one short of datetime.max.
MIN_REPORT_YEAR = 1
MAX_REPORT_YEAR = 9998
MODEL_VERSION = "1.0"

# Roles forwarded by the gateway in X-User-Role.
ANALYTICS_REPORT_ROLES = frozenset({"admin", "manager"})
DRUG_TRENDS_ROLES = frozenset({"admin", "manager", "pharmacist"})
ANNUAL_REPORT_ROLES = frozenset({"admin", "retailer", "manufacturer", "supplier"})

REPORT_TYPES = ("sales", "inventory", "demand", "supply_chain", "trend")

# Static seasonal tags attached to every annual report. Not derived from data.
SEASONAL_TRENDS: list[dict] = [
    {"season": "Winter", "topCategories": ["Respiratory", "Antibiotics"]},
    {"season": "Spring", "topCategories": ["Respiratory", "Analgesics"]},
    {"season": "Summer", "topCategories": ["Gastrointestinal", "Analgesics"]},
    {"season": "Fall", "topCategories": ["Respiratory", "Antibiotics"]},
]

# {low_stock_count} is filled in when the report is built.
RECOMMENDATION_TEMPLATES: list[dict] = [
    {
        "title": "Inventory Optimization",
        "description": "Restock {low_stock_count} medicines that are below threshold levels.",
        "priority": None,
    },
    {
        "title": "Seasonal Preparation",
        "description": "Increase inventory for Respiratory medicines before Winter season.",
        "priority": "medium",
    },
]
LOW_STOCK_HIGH_PRIORITY_COUNT = 5

# Multiplier range applied to each month's sales for the next-year estimate.
NEXT_YEAR_GROWTH_MIN = 0.05
NEXT_YEAR_GROWTH_MAX = 0.35
