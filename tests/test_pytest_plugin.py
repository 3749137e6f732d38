"""Fixtures registered by the mockproxy pytest plugin."""

import pytest

from mockproxy import ProxySettings, UnmatchedInvocationError

from fakes import Calculator, GenericMethods, ICalculator, IGenericMethods


def test_settings_fixture(mockproxy_settings):
    assert isinstance(mockproxy_settings, ProxySettings)
    assert mockproxy_settings.strict is False


def test_proxy_factory_binds(proxy_factory):
    calculator = Calculator()
    sub = proxy_factory(ICalculator, calculator)

    assert sub.object.add(4, 5) == 9
    assert calculator.call_log == [("add", 4, 5)]


def test_proxy_factory_strict(proxy_factory):
    sub = proxy_factory(IGenericMethods, GenericMethods(), strict=True)

    assert sub.strict is True
    assert sub.object.identity(1) == 1
    # Members left to the fallback have no rule, so a strict substitute rejects them
    with pytest.raises(UnmatchedInvocationError):
        sub.object.total([1, 2])
