"""Pytest fixtures for event_db.

Tests run against mongomock, an in-memory stand-in for a MongoDB server, so
no database needs to be running.
"""

import mongomock
import pytest


@pytest.fixture
def client():
    """Fresh in-memory MongoDB client per test."""
    c = mongomock.MongoClient()
    yield c
    c.close()


@pytest.fixture
def db(client):
    """Empty database for one test."""
    return client["event_api_test"]
