"""Minimal service registry with proxy decoration.

Lets an application wiring layer hand out a forwarding substitute in place
of a real service, so tests can observe and override calls while the real
implementation keeps doing the work::

    registry = ServiceRegistry()
    registry.register("payments", lambda reg: PaymentService(reg.resolve("db")))

    sub = Substitute(PaymentGateway)
    decorate_with_proxy(registry, "payments", sub)

    gateway = registry.resolve("payments")   # sub.object, forwarding to PaymentService
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from mockproxy.errors import ServiceNotRegisteredError
from mockproxy.proxy import bind_as_proxy

logger = logging.getLogger(__name__)

Provider = Callable[["ServiceRegistry"], Any]


class ServiceRegistry:
    """Maps service keys to providers; providers receive the registry."""

    def __init__(self) -> None:
        self._providers: dict[Hashable, Provider] = {}

    def register(self, key: Hashable, provider: Provider) -> None:
        """Bind *key* to *provider*, replacing any previous binding."""
        self._providers[key] = provider

    def register_instance(self, key: Hashable, instance: Any) -> None:
        self._providers[key] = lambda _registry: instance

    def is_registered(self, key: Hashable) -> bool:
        return key in self._providers

    def resolve(self, key: Hashable) -> Any:
        """Call the provider bound to *key* and return its result."""
        try:
            provider = self._providers[key]
        except KeyError:
            raise ServiceNotRegisteredError(key) from None
        return provider(self)

    def decorate(self, key: Hashable, decorator: Callable[["ServiceRegistry", Any], Any]) -> None:
        """Wrap the provider of *key*: ``decorator(registry, original_instance)``."""
        try:
            inner = self._providers[key]
        except KeyError:
            raise ServiceNotRegisteredError(key) from None

        def provider(registry: "ServiceRegistry") -> Any:
            return decorator(registry, inner(registry))

        self._providers[key] = provider


def decorate_with_proxy(registry: ServiceRegistry, key: Hashable, substitute) -> None:
    """Resolve *key* to ``substitute.object``, forwarding to the original service."""

    def _decorate(_registry: ServiceRegistry, implementation: Any) -> Any:
        bind_as_proxy(substitute, implementation)
        return substitute.object

    registry.decorate(key, _decorate)
    logger.debug("Service %r now resolves through %r", key, substitute)
