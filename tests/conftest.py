"""
Pytest configuration and shared fixtures.
"""
from decimal import Decimal

import pytest

from payments.session import SessionState
from fakes import EXCHANGES, FakeClock, RecordingNotifier


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def user_data():
    return {}


@pytest.fixture
def session(user_data):
    return SessionState(user_data, EXCHANGES, Decimal("25700"))
