"""
pytest fixtures for mockproxy.

Installed automatically through the ``pytest11`` entry point.

Usage:
    def test_checkout(proxy_factory):
        sub = proxy_factory(PaymentGateway, RealGateway())
        sub.setup("charge", It.is_any(int)).raises(CardDeclined())
        ...
"""

from typing import Any, Callable, Generator, Optional

import pytest

from .config import ProxySettings, load_settings
from .proxy import bind_as_proxy
from .substitute import Substitute


@pytest.fixture
def mockproxy_settings() -> ProxySettings:
    """Settings loaded from ``mockproxy.yaml`` / ``MOCKPROXY_*`` for this test."""
    return load_settings()


@pytest.fixture
def proxy_factory(
    mockproxy_settings: ProxySettings,
) -> Generator[Callable[..., Substitute], None, None]:
    """
    Factory building substitutes bound to implementations.

    Every substitute created through the factory is reset at teardown.
    """
    created: list[Substitute] = []

    def make(contract: type, impl: Any, *, strict: Optional[bool] = None) -> Substitute:
        if strict is None:
            strict = mockproxy_settings.strict
        substitute = Substitute(contract, strict=strict)
        bind_as_proxy(substitute, impl, settings=mockproxy_settings)
        created.append(substitute)
        return substitute

    yield make

    for substitute in created:
        substitute.reset()
