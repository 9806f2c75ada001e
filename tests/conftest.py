"""Shared fixtures for unit tests built on the in-memory fakes."""

import pytest
from tests.fakes import (
    FakeClock,
    FakeCustomHolidayStore,
    FakeHolidaySource,
    build_resolver,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def holiday_source():
    return FakeHolidaySource()


@pytest.fixture
def custom_holidays():
    return FakeCustomHolidayStore()


@pytest.fixture
def resolver(holiday_source, custom_holidays, clock):
    return build_resolver(holiday_source, custom_holidays, clock)
