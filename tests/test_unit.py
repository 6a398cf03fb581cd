import pytest

from hifood import orders
from hifood.policy import Policy
from hifood.utils import sanitize_input, to_int


PRODUCTS = [{"id": "P", "price": 300000}, {"id": "Q", "price": 50000}]


def test_compute_total_free_shipping_over_threshold():
    result = orders.compute_total([{"productId": "P", "quantity": 2}], PRODUCTS)
    assert result == {"subtotal": 600000, "shipping": 0, "total": 600000}


def test_compute_total_adds_shipping():
    result = orders.compute_total([{"productId": "Q", "quantity": 2}], PRODUCTS)
    assert result == {"subtotal": 100000, "shipping": 20000, "total": 120000}


def test_compute_total_threshold_is_exclusive():
    products = [{"id": "X", "price": 500000}]
    assert orders.compute_total([{"productId": "X", "quantity": 1}], products)["shipping"] == 20000


def test_compute_total_skips_unknown_and_defaults_quantity():
    items = [{"productId": "Q"}, {"productId": "ghost", "quantity": 5}]
    assert orders.compute_total(items, PRODUCTS) == {"subtotal": 50000, "shipping": 20000, "total": 70000}
    assert orders.compute_total(None, PRODUCTS) == {"subtotal": 0, "shipping": 20000, "total": 20000}


@pytest.mark.parametrize("current,new,ok", [
    ("pending", "processing", True),
    ("pending", "cancelled", True),
    ("processing", "completed", True),
    ("processing", "cancelled", True),
    ("pending", "completed", False),
    ("completed", "pending", False),
    ("cancelled", "processing", False),
    ("pending", "shipped", False),
])
def test_transition_table(current, new, ok):
    assert orders.is_valid_transition(current, new) is ok


def test_policy_table():
    assert Policy.allows("admin", "products:write")
    assert not Policy.allows("staff", "products:write")
    assert Policy.allows("staff", "orders:update")
    assert not Policy.allows("user", "orders:update")
    assert not Policy.allows(None, "orders:list")
    assert not Policy.allows("admin", "no-such-operation")


def test_to_int():
    assert to_int("12") == 12
    assert to_int("12.9") == 12
    assert to_int(7.0) == 7
    assert to_int("abc") is None
    assert to_int(None) is None
    assert to_int(True) is None


def test_sanitize_strips_tags():
    out = sanitize_input("  <script>alert(1)</script>Ring the bell\x00 ")
    assert "<script>" not in out
    assert out.endswith("Ring the bell")
    assert sanitize_input(None) == ""


def test_sanitize_keeps_entities_and_unicode_unescaped():
    assert sanitize_input("Fish & chips") == "Fish & chips"
    assert sanitize_input("2 < 3") == "2 < 3"
    assert sanitize_input("Khách vãng lai") == "Khách vãng lai"
    assert sanitize_input("<b>no onions</b>") == "no onions"
