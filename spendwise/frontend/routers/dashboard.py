from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from spendwise.core.aggregator import DashboardSummary
from spendwise.core.formatters import format_currency, format_date, format_percentage

from ..context import AppContext, get_context

router = APIRouter(prefix="/api", tags=["dashboard"])


def _parse_month(month: Optional[str]) -> Optional[date]:
    if month is None:
        return None
    year, _, number = month.partition("-")
    try:
        return date(int(year), int(number), 1)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid month '{month}'; expected YYYY-MM.") from exc


def _display(summary: DashboardSummary) -> Dict[str, str]:
    """Pre-formatted labels for the headline figures."""
    return {
        "month": format_date(f"{summary.month}-01", "%B %Y"),
        "total_balance": format_currency(summary.total_balance),
        "total_available": format_currency(summary.total_available),
        "total_debt": format_currency(summary.total_debt),
        "monthly_spend": format_currency(summary.monthly_spend),
        "monthly_income": format_currency(summary.monthly_income),
        "savings_rate": format_percentage(summary.savings_rate / 100),
        "vs_last_period": format_percentage(summary.trend.vs_last_period / 100),
    }


@router.get("/dashboard")
async def get_dashboard(
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    ctx: AppContext = Depends(get_context),
):
    """
    Dashboard figures for one month.

    Alongside the raw numbers, ``display`` carries the formatted labels.

    Query params:
        month: YYYY-MM, defaults to the current month
    """
    summary = await ctx.dashboard.get_dashboard(_parse_month(month))
    payload: Dict[str, Any] = jsonable_encoder(summary)
    payload["display"] = _display(summary)
    return payload
