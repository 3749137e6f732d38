"""Shared fixtures for the mockproxy test suite."""

import pytest

from mockproxy import Substitute, bind_as_proxy
from mockproxy.config import get_settings

from fakes import Calculator, GenericMethods, Grid, ICalculator, IGenericMethods, IGrid


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep every test independent of the developer's env and config file."""
    for var in ("MOCKPROXY_CONFIG", "MOCKPROXY_SURROGATE", "MOCKPROXY_STRICT", "MOCKPROXY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def calculator():
    return Calculator()


@pytest.fixture
def calc_proxy(calculator):
    sub = Substitute(ICalculator)
    bind_as_proxy(sub, calculator)
    return sub


@pytest.fixture
def grid():
    return Grid()


@pytest.fixture
def grid_proxy(grid):
    sub = Substitute(IGrid)
    bind_as_proxy(sub, grid)
    return sub


@pytest.fixture
def generics():
    return GenericMethods()


@pytest.fixture
def generics_proxy(generics):
    sub = Substitute(IGenericMethods)
    bind_as_proxy(sub, generics)
    return sub
