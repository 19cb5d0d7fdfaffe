# conftest.py
import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("APP_SECRET", "test-secret-key-with-at-least-32-bytes!")
os.environ.setdefault("DB_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from shopbill.db import Base, make_engine, make_session_factory
from shopbill.main import create_app
from shopbill.models.core import Product, Role, Supplier, Unit, User
from shopbill.util.security import hash_pw


def jprint(step, r):
    # helpful failure text if something breaks
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json()


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    s = make_session_factory(engine)()
    yield s
    s.close()


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine)) as c:
        yield c


@pytest.fixture
def make_product(db):
    def _make(name="Milk 500ml", stocks=20, price="27.00", cost_price="0", gst_percent="0",
              unit=Unit.PCS, category="Dairy", barcode=None):
        p = Product(name=name, category=category, price=Decimal(price), cost_price=Decimal(cost_price),
                    stocks=stocks, quantity=Decimal("1"), unit=unit,
                    gst_percent=Decimal(gst_percent), barcode=barcode)
        db.add(p)
        db.commit()
        return p
    return _make


@pytest.fixture
def make_supplier(db):
    def _make(name="Fresh Farms"):
        s = Supplier(name=name, contact_person="Ravi", phone="9876543210")
        db.add(s)
        db.commit()
        return s
    return _make


@pytest.fixture
def make_user(db):
    def _make(username, role="CASHIER", password="secret"):
        r = db.query(Role).filter(Role.name == role).first()
        if not r:
            r = Role(name=role)
            db.add(r)
            db.flush()
        u = User(username=username, pass_hash=hash_pw(password), full_name=username.title(), role_id=r.id)
        db.add(u)
        db.commit()
        return u
    return _make


@pytest.fixture
def cashier(make_user):
    return make_user("cashier1")


@pytest.fixture
def admin_headers(client):
    jprint("POST /admin/dev-bootstrap", client.post("/admin/dev-bootstrap"))
    r = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    tok = jprint("POST /auth/login", r)["access_token"]
    return {"Authorization": f"Bearer {tok}"}


@pytest.fixture
def cashier_headers(client, make_user):
    make_user("till2", role="CASHIER", password="till-pass")
    r = client.post("/auth/login", json={"username": "till2", "password": "till-pass"})
    tok = jprint("POST /auth/login (cashier)", r)["access_token"]
    return {"Authorization": f"Bearer {tok}"}
