import pytest

from shoestore.services import bulk, catalog
from shoestore.services.catalog import CatalogError


def test_set_price_only_touches_selection(make_product):
    a, b, c = make_product(original=100), make_product(original=80), make_product(original=60)
    assert bulk.bulk_price([a, b, c], [a.id, c.id], "original", "set", 49.999) == 2
    assert a.pricing.original == 50.0
    assert b.pricing.original == 80
    assert c.pricing.original == 50.0


def test_percent_changes_use_each_products_own_price(make_product):
    a, b = make_product(sale=100), make_product(sale=40)
    bulk.bulk_price([a, b], [a.id, b.id], "sale", "inc_pct", 10)
    assert a.pricing.sale == 110.0
    assert b.pricing.sale == 44.0
    bulk.bulk_price([a, b], [a.id, b.id], "sale", "dec_pct", 50)
    assert a.pricing.sale == 55.0
    assert b.pricing.sale == 22.0


def test_price_is_floored_at_zero(make_product):
    a = make_product(cost=30)
    bulk.bulk_price([a], [a.id], "cost", "dec_num", 45)
    assert a.pricing.cost == 0


@pytest.mark.parametrize("method, value, message", [
    ("inc_pct", -5, "Percent"),
    ("dec_num", -1, "Amount"),
    ("set", "abc", "Enter a value"),
    ("set", float("nan"), "Enter a value"),
])
def test_bad_price_inputs_rejected(make_product, method, value, message):
    a = make_product()
    with pytest.raises(CatalogError, match=message):
        bulk.bulk_price([a], [a.id], "sale", method, value)


def test_empty_selection_rejected(make_product):
    with pytest.raises(CatalogError, match="Select products first"):
        bulk.bulk_price([make_product()], [], "sale", "set", 1)
    with pytest.raises(CatalogError, match="Select products first"):
        bulk.bulk_restock([make_product()], [], 1, "all", 3)


def test_restock_all_adds_to_every_size(make_product):
    p = make_product(stock={"Black": {42: 10}})
    bulk.bulk_restock([p], [p.id], 2.7, "all", threshold=3)
    assert p.colors[0].size(42).stock == 12
    assert catalog.total_stock(p) == 12 + 2 * 10


def test_restock_scopes(make_product):
    p = make_product(stock={"Black": {40: 2, 42: 10}})
    bulk.bulk_restock([p], [p.id], 5, "low", threshold=3)
    assert p.colors[0].size(40).stock == 7
    assert p.colors[0].size(42).stock == 10
    assert p.colors[0].size(41).stock == 0

    q = make_product(stock={"Black": {40: 2, 42: 10}})
    bulk.bulk_restock([q], [q.id], 1, "out", threshold=3)
    assert q.colors[0].size(40).stock == 2
    assert q.colors[0].size(41).stock == 1

    r = make_product(stock={"Black": {42: 10}})
    bulk.bulk_restock([r], [r.id], 3, "size", threshold=3, size=42)
    assert catalog.total_stock(r) == 13


def test_restock_clamps_to_max(make_product):
    p = make_product(stock={"Black": {42: 9998}})
    bulk.bulk_restock([p], [p.id], 50000, "size", threshold=3, size=42)
    assert p.colors[0].size(42).stock == 9999


def test_restock_size_scope_validates_size(make_product):
    p = make_product()
    with pytest.raises(CatalogError):
        bulk.bulk_restock([p], [p.id], 1, "size", threshold=3)
    with pytest.raises(CatalogError):
        bulk.bulk_restock([p], [p.id], 1, "size", threshold=3, size=46)
    with pytest.raises(CatalogError):
        bulk.bulk_restock([p], [p.id], -1, "all", threshold=3)


def test_archive_is_idempotent(make_product):
    a, b = make_product(), make_product(status="archived")
    assert bulk.bulk_set_status([a, b], [a.id, b.id], "archived") == 2
    assert bulk.bulk_set_status([a, b], [a.id, b.id], "archived") == 2
    assert {a.status, b.status} == {"archived"}
    bulk.bulk_set_status([a, b], [a.id], "active")
    assert a.status == "active" and b.status == "archived"
