"""Exception hierarchy for mockproxy."""

from __future__ import annotations


class MockProxyError(Exception):
    """Base class for every error raised by mockproxy."""


class ProxySetupError(MockProxyError):
    """Raised when a substitute cannot be configured as a proxy.

    Signals a configuration or version mismatch: the substitute (or the
    dispatch layer) does not expose an entry point the engine relies on.
    """


class UnmatchedInvocationError(MockProxyError):
    """Raised by a strict substitute when no rule handles an invocation."""


class VerificationError(MockProxyError, AssertionError):
    """Raised when recorded calls do not satisfy a ``verify()`` expectation."""


class ServiceNotRegisteredError(MockProxyError, KeyError):
    """Raised when resolving or decorating an unknown service key."""


class InterceptionError(MockProxyError, ExceptionGroup):
    """Both the intercepted call and the forwarded call raised.

    ``exceptions[0]`` is the failure from the rule chain, ``exceptions[1]``
    the failure from forwarding to the implementation.
    """

    @property
    def primary(self) -> BaseException:
        return self.exceptions[0]

    @property
    def fallback(self) -> BaseException:
        return self.exceptions[1]
