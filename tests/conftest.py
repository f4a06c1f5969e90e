from __future__ import annotations

import random

import pytest

from fakes import NOW, FakeService


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def service():
    return FakeService()
