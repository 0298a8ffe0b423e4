# tests/conftest.py
import os

# przed importem storefront: settings czytaja env przy imporcie
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from decimal import Decimal

import pytest
from sqlalchemy import event

from storefront.data.database import Base, make_engine, make_session_factory
from storefront.data.models import CategoryModel, ProductModel
from storefront.utils.text import slugify


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, order_id, order_number, customer_email):
        self.sent.append((order_id, order_number, customer_email))


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}")

    @event.listens_for(eng, "connect")
    def _fast_sqlite(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA synchronous=OFF")
        cur.close()

    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_category(session_factory):
    def _make(name, parent=None, type="General", is_active=True):
        with session_factory() as s:
            cat = CategoryModel(
                name=name,
                slug=slugify(name),
                type=type,
                parent_id=parent,
                is_active=is_active,
            )
            s.add(cat)
            s.commit()
            return cat.id

    return _make


@pytest.fixture
def make_product(session_factory):
    def _make(name, category_id, price="100.00", stock=10, subcategory_id=None, **flags):
        with session_factory() as s:
            product = ProductModel(
                name=name,
                slug=slugify(name),
                price=Decimal(price),
                stock=stock,
                category_id=category_id,
                subcategory_id=subcategory_id,
                primary_image=f"/uploads/{slugify(name)}.jpg",
                **flags,
            )
            s.add(product)
            s.commit()
            return product.id

    return _make


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as s:
            return s.get(ProductModel, product_id).stock

    return _stock


@pytest.fixture
def checkout():
    """Poprawny payload checkoutu, testy nadpisuja items."""

    def _payload(items):
        return {
            "customer_info": {
                "name": "Asha Verma",
                "email": "Asha.Verma@mail.com",
                "phone": "+91 98765-43210",
            },
            "items": items,
            "shipping_address": {
                "street": "12 MG Road, Indiranagar",
                "city": "Bengaluru",
                "state": "Karnataka",
                "pincode": "560038",
            },
        }

    return _payload
