"""
pytest configuration and fixtures.

The API runs against an in-memory mongomock client, reseeded before each
test with the known blog baseline.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import Store
from main import create_app, hash_password

import helper


@pytest.fixture
def store():
    store = Store(mongomock.MongoClient(), "bloglist_test")
    yield store
    store.close()


@pytest.fixture(autouse=True)
def seed_blogs(store):
    store.delete_documents("blog")
    for blog in helper.initial_blogs:
        store.create_document("blog", blog)


@pytest.fixture
def root_user(store):
    store.delete_documents("user")
    return store.create_document("user", {"username": "root", "password_hash": hash_password("sekret")})


@pytest.fixture
def app(store):
    return create_app(store)


@pytest.fixture
def api(app):
    with TestClient(app) as client:
        yield client
