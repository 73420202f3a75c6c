from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class RecommendationSchema(BaseModel):
    title: str
    description: str
    priority: Literal["low", "medium", "high"] = "medium"


class AnalyticsReportRecordSchema(BaseModel):
    id: int
    year: int
    month: int = 0
    report_type: str = Field(alias="reportType")
    data: dict[str, Any]
    predictions: dict[str, Any] | None = None
    recommendations: list[RecommendationSchema] = []
    related_entities: dict[str, list[str]] = Field(alias="relatedEntities", default_factory=dict)
    model_version: str | None = Field(alias="modelVersion", default=None)
    last_updated: datetime = Field(alias="lastUpdated")
    created_at: datetime = Field(alias="createdAt")

    class Config:
        from_attributes = True
        populate_by_name = True
        protected_namespaces = ()


class AnnualReportResponse(BaseModel):
    success: bool = True
    data: AnalyticsReportRecordSchema


class AnnualReportListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[AnalyticsReportRecordSchema]
