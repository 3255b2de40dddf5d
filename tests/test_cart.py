import math

import pytest

from shoestore.schemas.cart import CartLine
from shoestore.services.cart import CartAuthorizationError, CartEngine


def _line(**overrides):
    data = {"title": "X A", "brand": "X", "size": "42", "price": 100, "quantity": 1}
    data.update(overrides)
    return CartLine(**data)


@pytest.fixture
def stocked(store, make_product):
    """Put a single product with the given EU 42 stock in the catalog."""
    def _stock(qty):
        store.write_inventory([make_product(brand="X", model="A", stock={"Black": {42: qty}})])
    return _stock


def test_add_to_empty_cart(store, stocked):
    stocked(10)
    engine = CartEngine(store)
    outcome = engine.add(_line())
    assert outcome.success
    lines = engine.lines()
    assert len(lines) == 1 and lines[0].quantity == 1
    totals = engine.totals()
    assert (totals.subtotal, totals.packaging, totals.total) == (100, 0, 100)


def test_low_stock_caps_at_one_pair(store, stocked):
    stocked(4)
    engine = CartEngine(store)
    assert engine.max_allowed(_line()) == 1
    assert engine.add(_line()).success
    outcome = engine.add(_line())
    assert not outcome.success
    assert outcome.reason == "max_reached"
    assert outcome.maxAllowed == 1
    assert engine.lines()[0].quantity == 1


@pytest.mark.parametrize("stock, cap", [(0, 0), (1, 1), (5, 1), (6, 6), (7, 7)])
def test_cap_jumps_to_full_stock_at_six(store, stocked, stock, cap):
    stocked(stock)
    assert CartEngine(store).max_allowed(_line()) == cap


def test_existing_line_over_cap_is_clamped(store, stocked):
    stocked(8)
    engine = CartEngine(store)
    engine.add(_line(quantity=5))
    outcome = engine.add(_line(quantity=5))
    assert outcome.reason == "max_reached"
    assert outcome.maxAllowed == 8
    assert engine.lines()[0].quantity == 8


def test_out_of_stock_leaves_cart_untouched(store, stocked):
    stocked(0)
    engine = CartEngine(store)
    outcome = engine.add(_line())
    assert outcome.reason == "out_of_stock"
    assert outcome.maxAllowed == 0
    assert engine.lines() == []


def test_new_line_truncated_to_cap_and_inserted_first(store, stocked):
    stocked(10)
    engine = CartEngine(store)
    engine.add(CartLine(title="Unknown Runner", brand="Nobody", size="40", price=10))
    assert engine.add(_line(quantity=25)).success
    lines = engine.lines()
    assert lines[0].title == "X A"
    assert lines[0].quantity == 10


def test_uninventoried_product_is_not_capped(store, stocked):
    stocked(2)
    engine = CartEngine(store)
    line = CartLine(title="Mystery Boot", brand="Nobody", size="41", price=50, quantity=40)
    assert math.isinf(engine.max_allowed(line))
    assert engine.add(line).success
    assert engine.lines()[0].quantity == 40


def test_empty_inventory_means_no_caps(store):
    engine = CartEngine(store)
    assert math.isinf(engine.max_allowed(_line()))


def test_match_by_id_then_name_then_brand(store, make_product):
    a = make_product(brand="Nike", model="Air Zoom", stock={"Black": {42: 10}}, product_id="p-a")
    b = make_product(brand="Nike", model="Pegasus", stock={"Black": {42: 3}}, product_id="p-b")
    store.write_inventory([a, b])
    engine = CartEngine(store)
    assert engine.find_inventory_product(CartLine(id="p-b", title="Nike Air Zoom", size="42")).id == "p-b"
    assert engine.find_inventory_product(CartLine(title="Nike Pegasus", size="42")).id == "p-b"
    assert engine.find_inventory_product(CartLine(title="pegasus", size="42")).id == "p-b"
    assert engine.find_inventory_product(CartLine(title="Something", brand="NIKE", size="42")).id == "p-a"
    assert engine.find_inventory_product(CartLine(title="Something", brand="Puma", size="42")) is None


def test_size_stock_uses_named_color_or_all_colors(store, make_product):
    store.write_inventory([make_product(brand="X", model="A", stock={"Black": {42: 3}, "White": {42: 5}})])
    engine = CartEngine(store)
    assert engine.max_allowed(_line(color="white")) == 1
    assert engine.max_allowed(_line()) == 8
    assert engine.max_allowed(_line(color="Purple")) == 8
    assert engine.max_allowed(_line(size="EU 42")) == 8
    assert engine.max_allowed(_line(size="large")) == 0


def test_set_quantity_reapplies_cap(store, stocked):
    stocked(7)
    engine = CartEngine(store)
    engine.add(_line())
    assert engine.set_quantity(0, 3).success
    outcome = engine.set_quantity(0, 12)
    assert outcome.reason == "max_reached"
    assert engine.lines()[0].quantity == 7
    assert engine.set_quantity(0, 0).reason == "invalid_quantity"
    assert engine.set_quantity(5, 1).reason == "not_found"


def test_remove_and_clear(store):
    engine = CartEngine(store)
    engine.add(CartLine(title="A", brand="X", size="40"))
    engine.add(CartLine(title="B", brand="X", size="40"))
    assert engine.remove(9) is False
    assert engine.remove(0) is True
    assert [l.title for l in engine.lines()] == ["A"]
    engine.clear()
    assert engine.lines() == []


def test_packaging_fee_per_two_pairs(store):
    engine = CartEngine(store)
    engine.add(CartLine(title="A", brand="X", size="40", price=10))
    engine.add(CartLine(title="B", brand="X", size="40", price=10))
    assert engine.packaging_fee() == 0
    engine.add(CartLine(title="C", brand="X", size="40", price=10))
    assert engine.item_count() == 3
    assert engine.packaging_fee() == 50
    assert engine.totals().total == 80


def test_packaging_fee_is_configurable(store):
    engine = CartEngine(store, fee_per_pair=20)
    engine.add(CartLine(title="A", brand="X", size="40", price=10, quantity=4))
    assert engine.packaging_fee() == 40


def test_malformed_stored_cart_only_degrades_totals(store):
    store.set_json("cart", [{"title": "A", "brand": "X", "size": "40", "price": "n/a", "qty": "?"}, 7])
    engine = CartEngine(store)
    totals = engine.totals()
    assert engine.item_count() == 1
    assert totals.subtotal == 0


def test_unauthorized_mutations_raise(store):
    engine = CartEngine(store, authorize=lambda: False)
    with pytest.raises(CartAuthorizationError):
        engine.add(_line())
    with pytest.raises(CartAuthorizationError):
        engine.clear()
    assert engine.lines() == []
    assert engine.totals().total == 0


def test_owner_scopes_the_cart(store):
    CartEngine(store, owner="a@shop.test").add(CartLine(title="A", brand="X", size="40"))
    assert CartEngine(store, owner="b@shop.test").lines() == []
    assert len(CartEngine(store, owner="a@shop.test").lines()) == 1
