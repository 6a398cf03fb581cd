"""Role -> capability table used by every gated endpoint."""
from typing import Dict, FrozenSet

USER = "user"
STAFF = "staff"
ADMIN = "admin"

ORDERS_LIST = "orders:list"
ORDERS_UPDATE = "orders:update"
ORDERS_DELETE = "orders:delete"
PRODUCTS_WRITE = "products:write"
USERS_LIST = "users:list"
USERS_DELETE = "users:delete"
DASHBOARD_READ = "dashboard:read"
CONFIG_WRITE = "config:write"


class Policy:
    table: Dict[str, FrozenSet[str]] = {
        ORDERS_LIST: frozenset({STAFF, ADMIN}),
        ORDERS_UPDATE: frozenset({STAFF, ADMIN}),
        ORDERS_DELETE: frozenset({ADMIN}),
        PRODUCTS_WRITE: frozenset({ADMIN}),
        USERS_LIST: frozenset({ADMIN}),
        USERS_DELETE: frozenset({ADMIN}),
        DASHBOARD_READ: frozenset({ADMIN}),
        CONFIG_WRITE: frozenset({ADMIN}),
    }

    @classmethod
    def allows(cls, role: str | None, operation: str) -> bool:
        # records written before roles existed count as plain users
        return (role or USER) in cls.table.get(operation, frozenset())
