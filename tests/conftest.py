import os
import tempfile

# Settings are read once at import time, so point them at scratch locations first
_TMP_DIR = tempfile.mkdtemp(prefix="shoestore-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["MEDIA_ROOT"] = os.path.join(_TMP_DIR, "media")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_EMAIL"] = "admin@shop.test"
os.environ["ADMIN_EMAILS"] = ""
os.environ["REQUIRE_LOGIN_FOR_CART"] = "0"

import pytest
from fastapi.testclient import TestClient

from shoestore.models.database import Base, SessionLocal, engine
import shoestore.models.user  # noqa: F401  register User/RevokedToken models
import shoestore.models.document  # noqa: F401  register Document model
from shoestore.schemas.inventory import Color, Pricing, Product
from shoestore.services.store import DocumentStore
from shoestore.utils.security import create_access_token

ADMIN_EMAIL = "admin@shop.test"
SHOPPER_EMAIL = "shopper@shop.test"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return DocumentStore(db)


@pytest.fixture
def client(db):
    from shoestore.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token(ADMIN_EMAIL)}"}


@pytest.fixture
def shopper_headers():
    return {"Authorization": f"Bearer {create_access_token(SHOPPER_EMAIL)}"}


@pytest.fixture
def make_product():
    """Build a catalog product; ``stock`` maps color name to {eu: stock}."""
    counter = {"n": 0}

    def _make(brand="Nike", model="Air Zoom", stock=None, category="Running",
              status="active", original=120.0, sale=99.0, cost=60.0, product_id=None):
        counter["n"] += 1
        stock = stock if stock is not None else {"Black": {42: 10}}
        colors = [
            Color(id=f"color-{counter['n']}-{i}", name=name, sizes=[{"eu": eu, "stock": qty} for eu, qty in sizes.items()])
            for i, (name, sizes) in enumerate(stock.items())
        ]
        return Product(
            id=product_id or f"prod-{counter['n']}",
            brand=brand,
            model=model,
            category=category,
            status=status,
            sku=f"SP-TST-{counter['n']:04d}-AAAA",
            pricing=Pricing(original=original, sale=sale, cost=cost),
            images=["/media/products/a.jpg", "/media/products/b.jpg"],
            colors=colors,
        )

    return _make
