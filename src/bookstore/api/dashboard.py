"""Admin dashboard: overview, analytics and reports."""

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query

from bookstore.api.auth import require_admin
from bookstore.api.dependencies import end_of_day, start_of_day
from bookstore.reporting.analytics import (
    customer_analytics,
    inventory_analytics,
    popular_books,
    revenue_report,
    sales_analytics,
)
from bookstore.reporting.dashboard import overview

router = APIRouter(prefix="/admin/dashboard", tags=["admin-dashboard"], dependencies=[Depends(require_admin)])

Period = Literal["week", "month", "year"]


@router.get("/overview")
async def dashboard_overview() -> dict:
    return {"overview": overview()}


@router.get("/analytics/sales")
async def sales(
    period: Period = "month",
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    return sales_analytics(period=period, start=start_of_day(start_date), end=end_of_day(end_date))


@router.get("/analytics/inventory")
async def inventory() -> dict:
    return inventory_analytics()


@router.get("/analytics/customers")
async def customers() -> dict:
    return customer_analytics()


@router.get("/reports/popular-books")
async def popular(period: Period = "month", limit: int = Query(20, ge=1, le=100)) -> dict:
    return {"popular_books": popular_books(period=period, limit=limit)}


@router.get("/reports/revenue")
async def revenue(
    start_date: date | None = None,
    end_date: date | None = None,
    group_by: Literal["day", "month", "year"] = "day",
) -> dict:
    return revenue_report(start=start_of_day(start_date), end=end_of_day(end_date), group_by=group_by)
