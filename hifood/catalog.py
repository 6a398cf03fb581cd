from typing import List

from .errors import InvalidInput, NotFound
from .logger import get_logger
from .store import JsonStore, PRODUCTS
from .utils import new_id, now_ms, to_int

_logger = get_logger(__name__)

PLACEHOLDER_IMAGE = "/products/placeholder.svg"
ACTIVE = "active"


def list_products(store: JsonStore) -> List[dict]:
    return store.collection(PRODUCTS).list()


def create_product(store: JsonStore, fields: dict) -> dict:
    name = fields.get("name")
    category = fields.get("category")
    price = to_int(fields.get("price")) if fields.get("price") not in (None, "") else None
    if not name or not category or price is None:
        raise InvalidInput("name, category and price are required")
    if price < 0:
        raise InvalidInput("price must be non-negative")

    product = {
        "id": new_id(),
        "name": name,
        "category": category,
        "price": price,
        "status": fields.get("status") or ACTIVE,
        "description": fields.get("description") or "",
        "image": fields.get("image") or PLACEHOLDER_IMAGE,
        "createdAt": now_ms(),
    }
    store.collection(PRODUCTS).append(product)
    _logger.info(f"Created product {product['id']} ({name})")
    return product


def update_product(store: JsonStore, product_id: str, fields: dict) -> dict:
    price = None
    if fields.get("price") not in (None, ""):
        price = to_int(fields["price"])
        if price is None or price < 0:
            raise InvalidInput("price must be a non-negative integer")

    def mutate(product):
        for key in ("name", "category", "status", "image"):
            if fields.get(key):
                product[key] = fields[key]
        if price is not None:
            product["price"] = price
        # an explicit empty description clears it
        if fields.get("description") is not None:
            product["description"] = fields["description"]
        product["updatedAt"] = now_ms()
        return product

    updated = store.collection(PRODUCTS).update(product_id, mutate)
    if updated is None:
        raise NotFound("product", product_id)
    _logger.info(f"Updated product {product_id}")
    return updated


def delete_product(store: JsonStore, product_id: str):
    if not store.collection(PRODUCTS).delete(product_id):
        raise NotFound("product", product_id)
    _logger.info(f"Deleted product {product_id}")
