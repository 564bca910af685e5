"""
Shared fixtures: an in-memory SQLite store, a session on it, the demo
catalog and a TestClient bound to the same store.
"""
from dataclasses import dataclass, field
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import open_store
from main import create_app
from models.category import Category
from models.product import Product
from models.tag import Tag
from populate_db import seed


@dataclass
class Catalog:
    categories: Dict[str, int] = field(default_factory=dict)
    tags: Dict[str, int] = field(default_factory=dict)
    products: Dict[str, int] = field(default_factory=dict)


@pytest.fixture
def store():
    store = open_store("sqlite://")
    store.create_all()
    yield store
    store.close()


@pytest.fixture
def db(store):
    session = store.session()
    yield session
    session.close()


@pytest.fixture
def catalog(db) -> Catalog:
    """Seed the demo catalog and return name -> id maps."""
    seed(db)
    result = Catalog(
        categories={c.name: c.id for c in db.query(Category).all()},
        tags={t.name: t.id for t in db.query(Tag).all()},
        products={p.name: p.id for p in db.query(Product).all()},
    )
    db.commit()
    return result


@pytest.fixture
def make_client(store):
    def _make(**overrides) -> TestClient:
        settings = Settings(**overrides)
        return TestClient(create_app(settings, store=store))
    return _make


@pytest.fixture
def client(make_client):
    with make_client() as c:
        yield c
