"""Sentinel used to detect "no rule handled this invocation".

A substitute configured with :class:`SentinelValueProvider` answers every
unmatched non-void invocation with :data:`NO_RESULT`.  The fallback
interceptor checks for it *by identity* after the rule chain has run, so a
rule that legitimately returned ``None`` is never mistaken for "unhandled".
"""

from __future__ import annotations

from typing import Any


class _NoResult:
    """Process-wide marker; equal to ``None`` and to itself, never identical to ``None``."""

    _instance: "_NoResult | None" = None

    def __new__(cls) -> "_NoResult":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return other is None or isinstance(other, _NoResult)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return 0

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<mockproxy.NO_RESULT>"

    def __copy__(self) -> "_NoResult":
        return self

    def __deepcopy__(self, memo: dict) -> "_NoResult":
        return self

    def __reduce__(self) -> str:
        return "NO_RESULT"


NO_RESULT = _NoResult()


def is_unhandled(value: Any) -> bool:
    """Return True if *value* is the sentinel itself (identity, not equality)."""
    return value is NO_RESULT


class SentinelValueProvider:
    """Default-value provider yielding :data:`NO_RESULT` for typed invocations."""

    def __call__(self, invocation) -> Any:
        if invocation.is_void:
            return None
        return NO_RESULT

    def __repr__(self) -> str:
        return "SentinelValueProvider()"


#: Shared by every substitute bound through :func:`mockproxy.bind_as_proxy`.
SENTINEL_PROVIDER = SentinelValueProvider()
