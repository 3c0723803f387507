"""Pydantic schemas for KPI entries, aggregates, dashboards and targets."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer

from restaurant_kpi.analytics import AlertStatus, BucketAnalytics, TargetSet, Thresholds
from restaurant_kpi.models import KpiEntry
from restaurant_kpi.services.dashboard import DashboardSummary
from restaurant_kpi.services.reports import SummaryReport

# Decimals travel as JSON numbers, not strings.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
CalendarDate = date


class KpiEntryCreateRequest(BaseModel):
    restaurant_id: UUID
    entry_date: str = Field(..., description="YYYY-MM-DD", examples=["2024-01-08"])
    revenue: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, examples=[1000])
    labour_cost: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, examples=[300])
    food_cost: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2, examples=[320])
    orders: int = Field(..., ge=0, examples=[50])


class KpiEntryUpdateRequest(BaseModel):
    revenue: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    labour_cost: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    food_cost: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    orders: Optional[int] = Field(default=None, ge=0)


class KpiEntryOut(BaseModel):
    id: UUID
    restaurant_id: UUID
    restaurant_name: str
    entry_date: date
    revenue: Amount
    labour_cost: Amount
    labour_cost_percent: Amount
    food_cost: Amount
    food_cost_percent: Amount
    orders: int
    avg_ticket: Amount
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entry(cls, entry: KpiEntry, fallback_name: str) -> "KpiEntryOut":
        # relationship is eager-loaded; reading __dict__ avoids an async lazy load
        restaurant = entry.__dict__.get("restaurant")
        return cls(
            id=entry.id,
            restaurant_id=entry.restaurant_id,
            restaurant_name=restaurant.name if restaurant is not None else fallback_name,
            entry_date=entry.entry_date,
            revenue=entry.revenue,
            labour_cost=entry.labour_cost,
            labour_cost_percent=entry.labour_cost_percent,
            food_cost=entry.food_cost,
            food_cost_percent=entry.food_cost_percent,
            orders=entry.orders,
            avg_ticket=entry.avg_ticket,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class AggregatedBucketOut(BaseModel):
    period: date
    restaurant_id: UUID
    restaurant_name: str
    entry_count: int
    total_revenue: Amount
    total_labour_cost: Amount
    total_food_cost: Amount
    total_orders: int
    avg_ticket: Amount
    labour_cost_percent: Amount
    food_cost_percent: Amount
    labour_cost_status: AlertStatus
    food_cost_status: AlertStatus
    labour_cost_target: Amount
    food_cost_target: Amount
    revenue_trend: Amount
    orders_trend: Amount
    labour_cost_trend: Amount
    food_cost_trend: Amount

    @classmethod
    def from_analytics(cls, row: BucketAnalytics) -> "AggregatedBucketOut":
        bucket, totals = row.bucket, row.bucket.totals
        return cls(
            period=bucket.period,
            restaurant_id=bucket.restaurant_id,
            restaurant_name=bucket.restaurant_name,
            entry_count=totals.entry_count,
            total_revenue=totals.total_revenue,
            total_labour_cost=totals.total_labour_cost,
            total_food_cost=totals.total_food_cost,
            total_orders=totals.total_orders,
            avg_ticket=totals.avg_ticket,
            labour_cost_percent=totals.labour_cost_percent,
            food_cost_percent=totals.food_cost_percent,
            labour_cost_status=row.labour_cost_status,
            food_cost_status=row.food_cost_status,
            labour_cost_target=row.labour_cost_target,
            food_cost_target=row.food_cost_target,
            revenue_trend=row.trends.revenue,
            orders_trend=row.trends.orders,
            labour_cost_trend=row.trends.labour_cost,
            food_cost_trend=row.trends.food_cost,
        )


class ThresholdsSchema(BaseModel):
    target: Amount = Field(..., ge=0, le=100)
    warning: Amount = Field(..., ge=0, le=100)
    critical: Amount = Field(..., ge=0, le=100)

    @classmethod
    def from_thresholds(cls, thresholds: Thresholds) -> "ThresholdsSchema":
        return cls(target=thresholds.target, warning=thresholds.warning, critical=thresholds.critical)

    def to_thresholds(self) -> Thresholds:
        return Thresholds(target=self.target, warning=self.warning, critical=self.critical)


class TargetsSchema(BaseModel):
    labour_cost: ThresholdsSchema
    food_cost: ThresholdsSchema

    @classmethod
    def from_target_set(cls, targets: TargetSet) -> "TargetsSchema":
        return cls(
            labour_cost=ThresholdsSchema.from_thresholds(targets.labour_cost),
            food_cost=ThresholdsSchema.from_thresholds(targets.food_cost),
        )

    def to_target_set(self) -> TargetSet:
        return TargetSet(labour_cost=self.labour_cost.to_thresholds(), food_cost=self.food_cost.to_thresholds())


class DashboardRestaurant(BaseModel):
    id: UUID
    name: str


class DashboardPeriod(BaseModel):
    start_date: date
    end_date: date
    previous_start_date: date
    previous_end_date: date


class DashboardCurrent(BaseModel):
    total_revenue: Amount
    total_orders: int
    avg_ticket: Amount
    labour_cost_percent: Amount
    food_cost_percent: Amount


class DashboardTrendsOut(BaseModel):
    revenue: Amount
    orders: Amount
    labour_cost: Amount
    food_cost: Amount


class DashboardAlertsOut(BaseModel):
    labour_cost: AlertStatus
    food_cost: AlertStatus


class DashboardTargetsOut(BaseModel):
    labour_cost: Amount
    food_cost: Amount


class ChartPointOut(BaseModel):
    date: CalendarDate
    revenue: Amount
    labour_cost: Amount
    food_cost: Amount
    orders: int
    labour_cost_percent: Amount
    food_cost_percent: Amount


class DashboardOut(BaseModel):
    restaurant: DashboardRestaurant
    period: DashboardPeriod
    current: DashboardCurrent
    trends: DashboardTrendsOut
    alerts: DashboardAlertsOut
    targets: DashboardTargetsOut
    chart_data: list[ChartPointOut]

    @classmethod
    def from_summary(cls, summary: DashboardSummary) -> "DashboardOut":
        current, trends = summary.current, summary.trends
        return cls(
            restaurant=DashboardRestaurant(id=summary.restaurant_id, name=summary.restaurant_name),
            period=DashboardPeriod(
                start_date=summary.start_date,
                end_date=summary.end_date,
                previous_start_date=summary.previous_start_date,
                previous_end_date=summary.previous_end_date,
            ),
            current=DashboardCurrent(
                total_revenue=current.total_revenue,
                total_orders=current.total_orders,
                avg_ticket=current.avg_ticket,
                labour_cost_percent=current.labour_cost_percent,
                food_cost_percent=current.food_cost_percent,
            ),
            trends=DashboardTrendsOut(
                revenue=trends.revenue,
                orders=trends.orders,
                labour_cost=trends.labour_cost,
                food_cost=trends.food_cost,
            ),
            alerts=DashboardAlertsOut(labour_cost=summary.alerts.labour_cost, food_cost=summary.alerts.food_cost),
            targets=DashboardTargetsOut(
                labour_cost=summary.targets.labour_cost.target,
                food_cost=summary.targets.food_cost.target,
            ),
            chart_data=[
                ChartPointOut(
                    date=point.date,
                    revenue=point.revenue,
                    labour_cost=point.labour_cost,
                    food_cost=point.food_cost,
                    orders=point.orders,
                    labour_cost_percent=point.labour_cost_percent,
                    food_cost_percent=point.food_cost_percent,
                )
                for point in summary.chart_data
            ],
        )


class SummaryTotalsOut(BaseModel):
    total_revenue: Amount
    total_labour_cost: Amount
    total_food_cost: Amount
    total_orders: int
    avg_ticket: Amount
    labour_cost_percent: Amount
    food_cost_percent: Amount


class SummaryReportOut(BaseModel):
    restaurant_id: UUID
    start_date: date
    end_date: date
    summary: SummaryTotalsOut

    @classmethod
    def from_report(cls, report: SummaryReport) -> "SummaryReportOut":
        totals = report.totals
        return cls(
            restaurant_id=report.restaurant_id,
            start_date=report.start_date,
            end_date=report.end_date,
            summary=SummaryTotalsOut(
                total_revenue=totals.total_revenue,
                total_labour_cost=totals.total_labour_cost,
                total_food_cost=totals.total_food_cost,
                total_orders=totals.total_orders,
                avg_ticket=totals.avg_ticket,
                labour_cost_percent=totals.labour_cost_percent,
                food_cost_percent=totals.food_cost_percent,
            ),
        )
