import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from . import orders as order_service
from .errors import NotFound
from .identity import profile
from .logger import get_logger
from .store import JsonStore, ORDERS, PRODUCTS, USERS

_logger = get_logger(__name__)


def list_users(store: JsonStore) -> List[dict]:
    # password material never leaves the store
    return [profile(u) for u in store.collection(USERS).list()]


def delete_user(store: JsonStore, user_id: str):
    # sessions and orders of the user are left in place
    if not store.collection(USERS).delete(user_id):
        raise NotFound("user", user_id)
    _logger.info(f"Deleted user {user_id}")


def _completed(orders: List[dict]) -> List[dict]:
    return [o for o in orders if o.get("status") == order_service.COMPLETED]


def dashboard(store: JsonStore) -> dict:
    orders = store.collection(ORDERS).list()
    return {
        "totalRevenue": sum(o.get("total") or 0 for o in _completed(orders)),
        "orderCount": len(orders),
        "productCount": len(store.collection(PRODUCTS).list()),
        "userCount": len(store.collection(USERS).list()),
    }


def _month_key(year: int, month: int, back: int) -> str:
    index = year * 12 + (month - 1) - back
    return f"{index // 12}-{index % 12 + 1:02d}"


def revenue_stats(store: JsonStore, now: Optional[datetime] = None) -> Dict[str, Dict[str, int]]:
    """Completed-order revenue for the last 7 days, 12 months and 5 years (UTC buckets)."""
    now = now or datetime.now(timezone.utc)
    daily = {(now - timedelta(days=i)).strftime("%Y-%m-%d"): 0 for i in range(7)}
    monthly = {_month_key(now.year, now.month, i): 0 for i in range(12)}
    yearly = {str(now.year - i): 0 for i in range(5)}

    for order in _completed(store.collection(ORDERS).list()):
        created = order.get("createdAt")
        if not isinstance(created, (int, float)):
            continue
        when = datetime.fromtimestamp(created / 1000, tz=timezone.utc)
        total = order.get("total") or 0
        day, month, year = when.strftime("%Y-%m-%d"), when.strftime("%Y-%m"), str(when.year)
        if day in daily:
            daily[day] += total
        if month in monthly:
            monthly[month] += total
        if year in yearly:
            yearly[year] += total

    return {"daily": daily, "monthly": monthly, "yearly": yearly}


def list_qr_images(qr_dir: str) -> List[str]:
    if not os.path.isdir(qr_dir):
        return []
    files = sorted(f for f in os.listdir(qr_dir) if not f.startswith("."))
    return [f"/qr/{f}" for f in files]
