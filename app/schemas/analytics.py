from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class ObservationSchema(BaseModel):
    date: date
    quantity: float

    class Config:
        from_attributes = True


class PredictionSchema(BaseModel):
    date: date
    predicted_quantity: float = Field(alias="predictedQuantity", ge=0)

    class Config:
        from_attributes = True
        populate_by_name = True


class ReportPeriod(BaseModel):
    start: date | None = None
    end: date | None = None


class ReportSummarySchema(BaseModel):
    total_drugs: int = Field(alias="totalDrugs")
    average_demand: float = Field(alias="averageDemand")
    peak_demand: float = Field(alias="peakDemand")
    low_demand: float = Field(alias="lowDemand")

    class Config:
        from_attributes = True
        populate_by_name = True


class AnalyticsReportSchema(BaseModel):
    period: ReportPeriod
    summary: ReportSummarySchema
    historical_data: list[ObservationSchema] = Field(alias="historicalData")
    predictions: list[PredictionSchema]

    class Config:
        populate_by_name = True


class AnalyticsReportResponse(BaseModel):
    success: bool = True
    report: AnalyticsReportSchema


class DrugTrendsData(BaseModel):
    historical: list[ObservationSchema]
    predictions: list[PredictionSchema]


class DrugTrendsResponse(BaseModel):
    success: bool = True
    data: DrugTrendsData
