"""
Pytest configuration and fixtures for the hash map visualizer tests.

Provides reusable fixtures for:
- A fresh engine per test
- A Flask test client backed by the app's own engine, reset between tests
- Checking the table invariants after any operation
"""

import pytest

from hashviz.hashing import HashTable


def check_invariants(table):
    """Size matches the chains and every entry sits in bucket hash % capacity."""
    assert len(table.buckets) == table.capacity
    assert sum(len(b.nodes) for b in table.buckets) == table.size
    for i, bucket in enumerate(table.buckets):
        assert bucket.index == i
        for node in bucket.nodes:
            assert node.hash % table.capacity == i


@pytest.fixture
def table():
    return HashTable()


@pytest.fixture
def invariants():
    return check_invariants


@pytest.fixture
def flask_app():
    import app as app_module

    app_module.app.config["TESTING"] = True
    app_module.hash_table.pacing = lambda: None
    app_module.hash_table.clear()
    yield app_module
    app_module.hash_table.clear()


@pytest.fixture
def client(flask_app):
    return flask_app.app.test_client()
