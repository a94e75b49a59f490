# Overview: Service-layer operations for dashboard reporting; read-only aggregates over sales and items.

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func

from boutique_pos.extensions import db
from boutique_pos.models import Item, Sale, SaleLine
from boutique_pos.time_utils import last_n_days, start_of_day, start_of_month, utcnow
from .cache_service import PREFIX_DASHBOARD, get_or_load

DAILY_SERIES_DAYS = 7
RECENT_SALES_LIMIT = 5


def _sales_summary(start: datetime, end: datetime | None = None) -> tuple[int, int]:
    q = db.session.query(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.total_cents), 0),
    ).filter(Sale.created_at >= start)
    if end is not None:
        q = q.filter(Sale.created_at < end)
    count, total = q.one()
    return int(count or 0), int(total or 0)


def _profit_since(start: datetime) -> int:
    """
    Net sales (subtotal - discount, tax excluded) minus cost of goods, where
    cost uses the purchase price snapshotted on each sale line.
    """
    net_sales = (
        db.session.query(func.coalesce(func.sum(Sale.subtotal_cents - Sale.discount_cents), 0))
        .filter(Sale.created_at >= start)
        .scalar()
    )
    cost = (
        db.session.query(func.coalesce(func.sum(SaleLine.unit_cost_cents * SaleLine.quantity), 0))
        .join(Sale, SaleLine.sale_id == Sale.id)
        .filter(Sale.created_at >= start)
        .scalar()
    )
    return int(net_sales or 0) - int(cost or 0)


def _daily_series(now: datetime) -> list[dict]:
    series = []
    for day in last_n_days(now, DAILY_SERIES_DAYS):
        day_start = datetime(day.year, day.month, day.day)
        count, total = _sales_summary(day_start, day_start + timedelta(days=1))
        series.append({
            "date": day.isoformat(),
            "sales_cents": total,
            "transactions": count,
        })
    return series


def _recent_sales() -> list[dict]:
    sales = (
        db.session.query(Sale)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(RECENT_SALES_LIMIT)
        .all()
    )
    return [s.to_dict(include_lines=False) for s in sales]


def compute_dashboard_stats(now: datetime | None = None) -> dict:
    now = now or utcnow()
    today = start_of_day(now)
    month = start_of_month(now)

    today_count, today_total = _sales_summary(today)
    month_count, month_total = _sales_summary(month)

    total_items = db.session.query(func.count(Item.id)).scalar() or 0
    low_stock_items = (
        db.session.query(func.count(Item.id))
        .filter(Item.stock <= Item.min_stock)
        .scalar()
        or 0
    )

    return {
        "today_sales_cents": today_total,
        "today_transactions": today_count,
        "monthly_sales_cents": month_total,
        "monthly_transactions": month_count,
        "monthly_profit_cents": _profit_since(month),
        "total_items": int(total_items),
        "low_stock_items": int(low_stock_items),
        "daily_sales": _daily_series(now),
        "recent_sales": _recent_sales(),
    }


def dashboard_stats(now: datetime | None = None) -> dict:
    """Cached per calendar day; every sale/item/stock mutation drops the entry."""
    now = now or utcnow()
    return get_or_load(PREFIX_DASHBOARD, ("stats", now.date().isoformat()), lambda: compute_dashboard_stats(now))
