"""Back-office analytics routes. All are admin-only."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from cellar.analytics.campaigns import flash_sale_performance, promotion_performance
from cellar.analytics.dashboard import dashboard_metrics
from cellar.analytics.sales import product_performance, sales_analytics
from cellar.analytics.timeframe import Period, resolve_period
from cellar.api.deps import admin_user_id
from cellar.api.responses import ok

analytics_router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(admin_user_id)])


def reporting_period(
    timeframe: str | None = Query(default=None, pattern="^(today|week|month|quarter|year)$"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> Period:
    return resolve_period(timeframe, start_date, end_date)


@analytics_router.get("/sales")
async def sales(period: Period = Depends(reporting_period)) -> dict:
    return ok(sales_analytics(period))


@analytics_router.get("/promotions")
async def promotions(period: Period = Depends(reporting_period)) -> dict:
    return ok(promotion_performance(period))


@analytics_router.get("/flash-sales")
async def flash_sales(flash_sale_id: str | None = Query(default=None, alias="flashSaleId")) -> dict:
    return ok(flash_sale_performance(flash_sale_id))


@analytics_router.get("/products")
async def products(
    period: Period = Depends(reporting_period),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    return ok(product_performance(period, limit))


@analytics_router.get("/dashboard")
async def dashboard(timeframe: str | None = Query(default=None, pattern="^(today|week|month|quarter|year)$")) -> dict:
    return ok(dashboard_metrics(timeframe))
