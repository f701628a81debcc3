"""
Test configuration - puts the repo root on sys.path and provides a tracker
pinned to a fixed day, backed by an in-memory store.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from donortrack.storage import MemoryStore  # noqa: E402
from donortrack.tracker import DonorTracker  # noqa: E402

FIXED_TODAY = date(2025, 3, 25)


@pytest.fixture
def today():
    return FIXED_TODAY


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def tracker(store):
    return DonorTracker(store, clock=lambda: FIXED_TODAY)


@pytest.fixture
def app(store):
    from app import create_app

    return create_app({'TESTING': True, 'STORE': store, 'CLOCK': lambda: FIXED_TODAY})


@pytest.fixture
def client(app):
    return app.test_client()
