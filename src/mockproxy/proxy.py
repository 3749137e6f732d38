"""Setup entry point: turn a substitute into a forwarding proxy.

Usage::

    from mockproxy import Substitute, bind_as_proxy

    calc = Calculator()
    sub = Substitute(ICalculator)
    bind_as_proxy(sub, calc)

    sub.object.add(2, 3)                 # 5, computed by calc
    sub.setup("add", 2, 3).returns(100)  # override wins for (2, 3)
    sub.object.add(3, 4)                 # 7, still forwarded

    sub.reset()                          # drops overrides *and* forwarding rules
    bind_as_proxy(sub, calc)             # forwarding restored

Calling ``bind_as_proxy`` repeatedly is safe: the fallback interceptor is
installed once, and member rules are registered again only when newer rules
(or a ``reset``) have displaced them.  Otherwise the existing forwarding
rules are pointed at the given implementation.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

from mockproxy import dispatch as _dispatch_module
from mockproxy.binding import bind_members
from mockproxy.config import ProxySettings, get_settings
from mockproxy.errors import ProxySetupError
from mockproxy.interceptor import install_fallback_interceptor
from mockproxy.introspection import forwardable_members
from mockproxy.sentinel import SENTINEL_PROVIDER
from mockproxy.substitute import Substitute

logger = logging.getLogger(__name__)

T = TypeVar("T")

_REQUIRED_ENTRY_POINTS = (
    "register_rule",
    "configure_default_value_provider",
    "interceptors",
    "contract",
)


def _require(obj: Any, name: str, owner: str) -> Any:
    value = getattr(obj, name, None)
    if value is None:
        raise ProxySetupError(
            f"Failed to find '{name}' on {owner}. "
            "This may indicate an incompatible substitute implementation."
        )
    return value


# Resolved once at import; a missing primitive is a version mismatch.
_require(_dispatch_module, "dispatch", "mockproxy.dispatch")


def _check_substitute(substitute: Any) -> None:
    owner = type(substitute).__name__
    for name in _REQUIRED_ENTRY_POINTS:
        _require(substitute, name, owner)
    if not callable(substitute.register_rule):
        raise ProxySetupError(f"{owner}.register_rule is not callable")
    if not isinstance(substitute.interceptors, list):
        raise ProxySetupError(f"{owner}.interceptors must be a mutable list")


def bind_as_proxy(substitute: Any, impl: Any, *, settings: Optional[ProxySettings] = None) -> None:
    """Forward every supported member of *substitute* to *impl*.

    Rules registered on the substitute after this call take precedence
    over forwarding.

    Raises:
        ProxySetupError: The substitute lacks an entry point the engine
            needs, or the configured surrogate type cannot be imported.
    """
    _check_substitute(substitute)
    settings = settings or get_settings()
    surrogate = settings.resolve_surrogate()

    substitute.configure_default_value_provider(SENTINEL_PROVIDER)

    if install_fallback_interceptor(substitute, impl):
        logger.debug("Installed fallback interceptor on %r", substitute)

    report = bind_members(
        substitute,
        impl,
        forwardable_members(substitute.contract),
        surrogate=surrogate,
    )
    logger.info(
        "Bound %s to %s: %d member(s), %d rule(s)%s, %d left to fallback",
        substitute.contract.__name__,
        type(impl).__name__,
        len(report.bound),
        report.rules,
        " (reused)" if report.reused else "",
        len(report.skipped),
    )


setup_as_proxy = bind_as_proxy


def proxy_of(contract: type[T], impl: T, *, strict: Optional[bool] = None):
    """Create a :class:`~mockproxy.substitute.Substitute` of *contract* bound to *impl*."""
    substitute = Substitute(contract, strict=strict)
    bind_as_proxy(substitute, impl)
    return substitute
