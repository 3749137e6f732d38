"""Fallback forwarding interceptor.

Sits at the front of a substitute's interceptor chain.  It lets the rest
of the chain (including any rule the test author registered after setup)
run to completion, and only forwards to the implementation when nothing
produced a result, i.e. the result is still :data:`NO_RESULT`.
"""

from __future__ import annotations

import logging
from typing import Any

from mockproxy.dispatch import dispatch
from mockproxy.errors import InterceptionError
from mockproxy.sentinel import NO_RESULT, is_unhandled

logger = logging.getLogger(__name__)


class FallbackForwardingInterceptor:
    """Forwards unhandled non-void invocations to *impl*."""

    def __init__(self, impl: Any) -> None:
        self.impl = impl

    def __repr__(self) -> str:
        return f"FallbackForwardingInterceptor({type(self.impl).__name__})"

    def intercept(self, invocation) -> None:
        typed = not invocation.is_void
        if typed:
            invocation.return_value = NO_RESULT

        primary: Exception | None = None
        fallback: Exception | None = None

        try:
            invocation.proceed()
        except Exception as exc:
            primary = exc

        try:
            if typed and is_unhandled(invocation.return_value) and not invocation.forwarded:
                if invocation.member.supported:
                    invocation.return_value = dispatch(
                        self.impl,
                        invocation.member,
                        invocation.access,
                        invocation.args,
                        invocation.kwargs,
                    )
                else:
                    # Unsupported shapes are never forwarded
                    invocation.return_value = None
        except Exception as exc:
            fallback = exc

        if primary is not None and fallback is not None:
            raise InterceptionError(
                "Multiple exceptions occurred during method interception.",
                [primary, fallback],
            )
        if primary is not None:
            raise primary
        if fallback is not None:
            raise fallback


def find_fallback_interceptor(substitute) -> FallbackForwardingInterceptor | None:
    for interceptor in substitute.interceptors:
        if isinstance(interceptor, FallbackForwardingInterceptor):
            return interceptor
    return None


def install_fallback_interceptor(substitute, impl: Any) -> bool:
    """Put a fallback interceptor for *impl* at the front of the chain.

    Returns False if one bound to *impl* is already installed.  A fallback
    interceptor bound to a different implementation is replaced.
    """
    existing = find_fallback_interceptor(substitute)
    if existing is not None:
        if existing.impl is impl:
            return False
        logger.info(
            "Rebinding %s from %s to %s",
            substitute, type(existing.impl).__name__, type(impl).__name__,
        )
        substitute.interceptors.remove(existing)

    substitute.interceptors.insert(0, FallbackForwardingInterceptor(impl))
    return True
