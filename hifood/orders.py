"""Order lifecycle: creation, status changes and cart pricing.

Status state machine::

    pending -> processing -> completed
    pending | processing -> cancelled

completed and cancelled are terminal. By default status updates are stored
verbatim, matching the staff console's free-form status field. With
``config.is_strict_transitions()`` on, anything outside the machine is
rejected with ``InvalidTransition``.
"""
from typing import Dict, Iterable, List, Optional

from . import config
from .errors import InvalidInput, InvalidTransition, NotFound
from .logger import get_logger
from .store import JsonStore, ORDERS, PRODUCTS
from .utils import new_id, now_ms, sanitize_input, to_int

_logger = get_logger(__name__)

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
CANCELLED = "cancelled"

TRANSITIONS: Dict[str, frozenset] = {
    PENDING: frozenset({PROCESSING, CANCELLED}),
    PROCESSING: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

WALK_IN_CUSTOMER = "Khách vãng lai"

FREE_SHIPPING_OVER = 500000
SHIPPING_FEE = 20000


def is_valid_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, frozenset())


def list_orders(store: JsonStore) -> List[dict]:
    return store.collection(ORDERS).list()


def create_order(store: JsonStore, items, total, customer_name: Optional[str] = None,
                 note: Optional[str] = None, address: Optional[str] = None,
                 user_id: Optional[str] = None) -> dict:
    # the client-supplied total is trusted as-is; /api/calc-total is advisory
    if not items or not isinstance(items, list):
        raise InvalidInput("order items are required")
    amount = to_int(total) if total not in (None, "") else None
    if not amount:
        raise InvalidInput("order total is required")

    order = {
        "id": new_id(),
        "items": items,
        "total": amount,
        "customerName": sanitize_input(customer_name) or WALK_IN_CUSTOMER,
        "note": sanitize_input(note),
        "address": sanitize_input(address),
        "status": PENDING,
        "userId": user_id,
        "createdAt": now_ms(),
    }
    store.collection(ORDERS).append(order)
    _logger.info(f"Created order {order['id']} total={amount}")
    return order


def update_status(store: JsonStore, order_id: str, new_status: Optional[str]) -> dict:
    strict = config.is_strict_transitions()

    def mutate(order):
        current = order.get("status")
        if new_status and new_status != current:
            if strict and not is_valid_transition(current, new_status):
                raise InvalidTransition(current, new_status)
            order["status"] = new_status
        order["updatedAt"] = now_ms()
        return order

    updated = store.collection(ORDERS).update(order_id, mutate)
    if updated is None:
        raise NotFound("order", order_id)
    _logger.info(f"Order {order_id} status -> {updated['status']}")
    return updated


def delete_order(store: JsonStore, order_id: str):
    if not store.collection(ORDERS).delete(order_id):
        raise NotFound("order", order_id)
    _logger.info(f"Deleted order {order_id}")


def compute_total(items: Optional[Iterable[dict]], products: List[dict]) -> dict:
    """Price a cart against the current catalog.

    Unknown products are skipped and a missing quantity counts as 1.
    Shipping is free once the subtotal exceeds FREE_SHIPPING_OVER.
    """
    prices = {p.get("id"): p.get("price") or 0 for p in products}
    subtotal = 0
    for item in items or []:
        product_id = item.get("productId")
        if product_id not in prices:
            continue
        quantity = to_int(item.get("quantity")) or 1
        subtotal += prices[product_id] * quantity
    shipping = 0 if subtotal > FREE_SHIPPING_OVER else SHIPPING_FEE
    return {"subtotal": subtotal, "shipping": shipping, "total": subtotal + shipping}


def quote(store: JsonStore, items: Optional[Iterable[dict]]) -> dict:
    return compute_total(items, store.collection(PRODUCTS).list())
