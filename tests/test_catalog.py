import re

import pytest

from shoestore.schemas.inventory import EU_SIZES, Pricing
from shoestore.services import catalog
from shoestore.services.catalog import CatalogError, NotFoundError

SKU_PATTERN = re.compile(r"^SP-[A-Z0-9]{3}-[A-Z0-9]{4}-[A-Z0-9]{4}(-\d+)?$")


def test_generate_sku_shape():
    sku = catalog.generate_sku("New Balance", "574 Core", [])
    assert SKU_PATTERN.match(sku)
    assert sku.startswith("SP-NEW-574C-")


def test_generate_sku_pads_short_codes():
    sku = catalog.generate_sku("On", "Z", [])
    assert sku.startswith("SP-XON-XXXZ-")


def test_generate_sku_suffixes_collisions(monkeypatch):
    monkeypatch.setattr(catalog.random, "choices", lambda alphabet, k: ["A"] * k)
    taken = ["SP-NIK-AIRZ-AAAA", "SP-NIK-AIRZ-AAAA-1"]
    assert catalog.generate_sku("Nike", "Air Zoom", taken) == "SP-NIK-AIRZ-AAAA-2"


def test_generate_sku_requires_existing_skus():
    with pytest.raises(TypeError):
        catalog.generate_sku("Nike", "Air", None)


def test_create_product_validates_required_fields():
    images = ["a.jpg", "b.jpg"]
    with pytest.raises(CatalogError, match="Brand and Model"):
        catalog.create_product(" ", "Air", "", "active", images, Pricing(original=10), [])
    with pytest.raises(CatalogError, match="Original price"):
        catalog.create_product("Nike", "Air", "", "active", images, Pricing(original=0), [])
    with pytest.raises(CatalogError, match="two images"):
        catalog.create_product("Nike", "Air", "", "active", ["a.jpg", ""], Pricing(original=10), [])


def test_create_product_assigns_unique_sku(make_product):
    existing = [make_product()]
    product = catalog.create_product(
        " Nike ", "Air Max", "Running", "active", ["a.jpg", "b.jpg"], Pricing(original=150), existing,
        colors=[catalog.new_color("White", stock={42: 3})],
    )
    assert product.brand == "Nike"
    assert SKU_PATTERN.match(product.sku)
    assert product.sku not in {p.sku for p in existing}
    assert catalog.total_stock(product) == 3


def test_new_color_has_full_grid():
    color = catalog.new_color("Black")
    assert [s.eu for s in color.sizes] == EU_SIZES
    assert color.code == "#ffffff"
    assert catalog.total_stock(color) == 0


def test_stock_status_boundaries():
    assert catalog.stock_status(0, 3) == "out"
    assert catalog.stock_status(3, 3) == "low"
    assert catalog.stock_status(4, 3) == "in"


def test_available_sizes(make_product):
    color = make_product(stock={"Black": {44: 1, 38: 2, 40: 0}}).colors[0]
    assert catalog.available_sizes(color) == [38, 44]


def test_filter_products_text_matches_color_names(make_product):
    products = [make_product(stock={"Forest Green": {42: 5}}), make_product(brand="Adidas", model="Samba")]
    assert [p.brand for p in catalog.filter_products(products, 3, text="green")] == ["Nike"]
    assert [p.brand for p in catalog.filter_products(products, 3, text="SAMBA")] == ["Adidas"]


def test_filter_products_by_size_and_stock(make_product):
    plenty = make_product(stock={"Black": {42: 10}})
    sold_out_42 = make_product(stock={"Black": {42: 0, 43: 10}})
    products = [plenty, sold_out_42]
    assert catalog.filter_products(products, 3, size=42) == [plenty]
    assert catalog.filter_products(products, 3, size=42, stock="out") == [sold_out_42]
    assert catalog.filter_products(products, 3, stock="in") == [plenty, sold_out_42]


def test_filter_products_by_status_and_category(make_product):
    products = [make_product(), make_product(status="archived", category="Lifestyle")]
    assert len(catalog.filter_products(products, 3, status="archived")) == 1
    assert len(catalog.filter_products(products, 3, category="Running")) == 1


def test_filter_options_sorted_and_distinct(make_product):
    products = [make_product(brand="Puma"), make_product(brand="Asics"), make_product(brand="Puma", category="")]
    assert catalog.filter_options(products) == {"brands": ["Asics", "Puma"], "categories": ["Running"]}


def test_update_product_keeps_sku(make_product):
    product = make_product()
    sku = product.sku
    catalog.update_product([product], product.id, "Nike", "Air Zoom 2", "Running", "archived",
                           Pricing(original=130), ["a.jpg", "b.jpg"])
    assert product.sku == sku
    assert product.model == "Air Zoom 2"
    assert product.status == "archived"


def test_update_product_mints_missing_sku(make_product):
    product = make_product()
    product.sku = ""
    catalog.update_product([product], product.id, "Nike", "Air", "", "active", Pricing(original=1), ["a", "b"])
    assert SKU_PATTERN.match(product.sku)


def test_unknown_ids_raise_not_found(make_product):
    products = [make_product()]
    with pytest.raises(NotFoundError):
        catalog.delete_product(products, "missing")
    with pytest.raises(NotFoundError):
        catalog.set_size_stock(products, products[0].id, "missing", 42, 1)


def test_color_lifecycle(make_product):
    products = [make_product()]
    pid = products[0].id
    color = catalog.add_color(products, pid, "  Navy ", "#000080")
    assert color.name == "Navy"
    catalog.update_color(products, pid, color.id, name="", code="#111111")
    assert color.name == "Navy" and color.code == "#111111"
    catalog.delete_color(products, pid, color.id)
    assert products[0].color(color.id) is None
    with pytest.raises(CatalogError):
        catalog.add_color(products, pid, "  ")


def test_size_stock_mutations_clamp(make_product):
    products = [make_product()]
    pid, cid = products[0].id, products[0].colors[0].id
    assert catalog.set_size_stock(products, pid, cid, 40, 12000).stock == 9999
    assert catalog.set_size_stock(products, pid, cid, 40, -1).stock == 0
    with pytest.raises(CatalogError):
        catalog.set_size_stock(products, pid, cid, 47, 1)
    catalog.fill_color_stock(products, pid, cid, 2)
    assert catalog.total_stock(products[0]) == 2 * len(EU_SIZES)
    catalog.clear_color_stock(products, pid, cid)
    assert catalog.total_stock(products[0]) == 0
