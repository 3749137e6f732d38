"""Generic methods: statically bound when erasable, otherwise reached through the fallback."""

import numbers

import pytest

from mockproxy import NO_RESULT, It, ProxySettings, Substitute, bind_as_proxy, proxy_of
from mockproxy.config import get_settings

from fakes import GenericMethods, IGenericMethods, IService, Service


def _bound_names(sub):
    return {rule.pattern.member_name for rule in sub.rules}


class TestScenarioC:
    def test_identity_forwards_any_type(self, generics_proxy, generics):
        assert generics_proxy.object.identity(42) == 42
        assert generics_proxy.object.identity("hi") == "hi"
        assert generics.call_log == ["identity(42)", "identity('hi')"]

    def test_identity_forwards_none(self, generics_proxy):
        assert generics_proxy.object.identity(None) is None


class TestErasedSignatures:
    def test_container_shapes(self, generics_proxy):
        assert generics_proxy.object.create_list(3) == [3]
        assert generics_proxy.object.process_array([1, 2, 3]) == "1,2,3"

    def test_callable_parameter(self, generics_proxy):
        assert generics_proxy.object.convert(5, str) == "5"
        assert generics_proxy.object.convert("abc", len) == 3

    def test_unconstrained_methods_are_bound(self, generics_proxy):
        names = _bound_names(generics_proxy)
        assert {"identity", "create_list", "process_array", "convert"} <= names

    def test_generic_method_on_mixed_contract(self):
        impl = Service()
        sub = proxy_of(IService, impl)

        assert sub.object.generic_method([1]) == [1]
        assert impl.call_log == ["generic_method([1])"]


class TestConstrainedMethods:
    def test_constrained_methods_are_not_bound(self, generics_proxy):
        names = _bound_names(generics_proxy)
        assert "total" not in names
        assert "first_or_none" not in names

    def test_constrained_method_reaches_impl_through_fallback(self, generics_proxy, generics):
        assert generics_proxy.object.total([1, 2, 3]) == 6
        assert generics.call_log == ["total([1, 2, 3])"]

    def test_none_from_fallback_is_not_the_sentinel(self, generics_proxy):
        result = generics_proxy.object.first_or_none([])

        assert result is None
        assert result is not NO_RESULT

    def test_override_of_constrained_method(self, generics_proxy, generics):
        generics_proxy.setup("total", It.is_any(list)).returns(99)

        assert generics_proxy.object.total([1]) == 99
        assert generics.call_log == []

    def test_failure_in_fallback_propagates(self, generics_proxy):
        with pytest.raises(TypeError):
            generics_proxy.object.total(["a", "b"])

    def test_void_constrained_method_is_forwarded(self, generics_proxy, generics):
        assert generics_proxy.object.put(3) is None
        assert generics_proxy.object.put(4.5) is None

        assert generics.items == [3, 4.5]

    def test_void_constrained_method_override(self, generics_proxy, generics):
        generics_proxy.setup("put", 0).callback(lambda item: None)

        generics_proxy.object.put(0)
        generics_proxy.object.put(1)

        assert generics.items == [1]


class TestSurrogateType:
    def test_satisfying_surrogate_binds_constrained_methods(self, generics):
        sub = Substitute(IGenericMethods)
        bind_as_proxy(sub, generics, settings=ProxySettings(surrogate_type="numbers.Number"))

        assert "total" in _bound_names(sub)
        assert sub.object.total([2, 3]) == 5

    def test_values_outside_surrogate_still_forward(self):
        impl = GenericMethods()
        sub = Substitute(IGenericMethods)
        bind_as_proxy(sub, impl, settings=ProxySettings(surrogate_type="numbers.Number"))

        assert sub.object.identity("text") == "text"
        assert sub.object.identity(1.5) == 1.5

    def test_surrogate_from_environment(self, monkeypatch, generics):
        monkeypatch.setenv("MOCKPROXY_SURROGATE", "numbers.Number")
        get_settings.cache_clear()
        sub = proxy_of(IGenericMethods, generics)

        assert get_settings().resolve_surrogate() is numbers.Number
        assert "total" in _bound_names(sub)
