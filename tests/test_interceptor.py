"""Fallback interceptor: failure handling and members without a static rule."""

import pytest

from mockproxy import InterceptionError, MockProxyError, Substitute, bind_as_proxy, proxy_of
from mockproxy.interceptor import (
    FallbackForwardingInterceptor,
    find_fallback_interceptor,
    install_fallback_interceptor,
)
from mockproxy.sentinel import SENTINEL_PROVIDER

from fakes import Calculator, ICalculator, ILogger, Logger


class TestFailures:
    def test_impl_failure_propagates_unchanged(self, calc_proxy, calculator):
        with pytest.raises(ZeroDivisionError):
            calc_proxy.object.divide(1, 0)

        # Forwarded once, not retried by the fallback
        assert calculator.call_log == [("divide", 1, 0)]

    def test_override_failure_is_raised_after_fallback_succeeds(self, calc_proxy, calculator):
        calc_proxy.setup("add", 1, 1).raises(ValueError("boom"))

        with pytest.raises(ValueError, match="boom"):
            calc_proxy.object.add(1, 1)

        assert calculator.call_log == [("add", 1, 1)]

    def test_both_failures_are_reported_together(self, calc_proxy, calculator):
        calc_proxy.setup("divide", 1, 0).raises(ValueError("override"))

        with pytest.raises(InterceptionError, match="Multiple exceptions") as info:
            calc_proxy.object.divide(1, 0)

        err = info.value
        assert isinstance(err, ExceptionGroup)
        assert isinstance(err, MockProxyError)
        assert isinstance(err.primary, ValueError)
        assert isinstance(err.fallback, ZeroDivisionError)
        assert list(err.exceptions) == [err.primary, err.fallback]

    def test_void_override_failure_does_not_forward(self, calc_proxy, calculator):
        calc_proxy.setup("clear").raises(RuntimeError("nope"))

        with pytest.raises(RuntimeError):
            calc_proxy.object.clear()

        assert calculator.call_log == []


class TestVariadicMethods:
    def test_variadic_method_is_forwarded_by_the_fallback(self):
        impl = Logger()
        sub = proxy_of(ILogger, impl)

        assert sub.object.log("a", "b") == 2
        assert impl.lines == ["a", "b"]
        assert "log" not in {r.pattern.member_name for r in sub.rules}

    def test_void_variadic_method_is_forwarded(self):
        impl = Logger()
        sub = proxy_of(ILogger, impl)

        assert sub.object.emit("started", user="ada") is None
        assert impl.lines == ["started", "user=ada"]

    def test_void_variadic_override_replaces_forwarding(self):
        impl = Logger()
        sub = proxy_of(ILogger, impl)
        seen = []
        sub.setup("emit", "quiet").callback(seen.append)

        sub.object.emit("quiet")
        sub.object.emit("loud")

        assert seen == ["quiet"]
        assert impl.lines == ["loud"]

    def test_other_members_still_forward(self):
        sub = proxy_of(ILogger, Logger())

        assert sub.object.level() == "INFO"

    def test_variadic_method_can_be_overridden(self):
        impl = Logger()
        sub = proxy_of(ILogger, impl)
        sub.setup("log", "a", "b").returns(99)

        assert sub.object.log("a", "b") == 99
        assert impl.lines == []
        assert sub.object.log("c") == 1


class TestInstallation:
    def test_install_is_idempotent_per_impl(self, calculator):
        sub = Substitute(ICalculator)

        assert install_fallback_interceptor(sub, calculator) is True
        assert install_fallback_interceptor(sub, calculator) is False
        assert find_fallback_interceptor(sub).impl is calculator

    def test_install_replaces_other_impl(self, calculator):
        sub = Substitute(ICalculator)
        install_fallback_interceptor(sub, Calculator())

        assert install_fallback_interceptor(sub, calculator) is True
        assert find_fallback_interceptor(sub).impl is calculator
        assert sum(isinstance(i, FallbackForwardingInterceptor) for i in sub.interceptors) == 1

    def test_fallback_is_installed_first(self, calculator):
        sub = Substitute(ICalculator)
        sub.interceptors.append(_Recorder())
        bind_as_proxy(sub, calculator)

        assert isinstance(sub.interceptors[0], FallbackForwardingInterceptor)

    def test_fallback_without_rules_forwards_typed_calls(self, calculator):
        sub = Substitute(ICalculator)
        sub.configure_default_value_provider(SENTINEL_PROVIDER)
        install_fallback_interceptor(sub, calculator)

        assert sub.rules == ()
        assert sub.object.add(2, 2) == 4
        sub.object.clear()
        assert calculator.call_log == [("add", 2, 2)]

    def test_custom_interceptor_sees_forwarded_result(self, calculator):
        recorder = _Recorder()
        sub = Substitute(ICalculator)
        bind_as_proxy(sub, calculator)
        sub.interceptors.insert(1, recorder)

        assert sub.object.add(1, 2) == 3
        assert recorder.seen == ["add(1, 2)"]


class _Recorder:
    def __init__(self):
        self.seen = []

    def intercept(self, invocation):
        self.seen.append(invocation.describe())
        invocation.proceed()
