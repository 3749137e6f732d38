"""Argument matchers for call patterns.

Usage::

    from mockproxy import It

    sub.setup("add", 2, It.is_any(int)).returns(100)
    sub.setup("greet", It.is_(lambda name: name.startswith("a"))).returns("hi")

Plain values are wrapped in :class:`Eq` automatically.
"""

from __future__ import annotations

import collections.abc
import types
import typing
from typing import Any, Callable

_UNION_ORIGINS = (typing.Union, types.UnionType)


def is_instance_of(value: Any, tp: Any) -> bool:
    """``isinstance`` that understands the typing constructs used in contracts.

    Anything that cannot be checked at runtime (forward references,
    non-runtime protocols, type variables) matches.
    """
    if tp is Any or tp is object or tp is Ellipsis or isinstance(tp, typing.TypeVar):
        return True
    if tp is None or tp is type(None):
        return value is None
    if tp is float:
        return isinstance(value, (int, float))
    if tp is complex:
        return isinstance(value, (int, float, complex))

    origin = typing.get_origin(tp)
    if origin is not None:
        args = typing.get_args(tp)
        if origin in _UNION_ORIGINS:
            return any(is_instance_of(value, arm) for arm in args)
        if origin is typing.Literal:
            return value in args
        if origin is typing.Annotated:
            return is_instance_of(value, args[0])
        if origin is collections.abc.Callable:
            return callable(value)
        if origin is type:
            return isinstance(value, type)
        tp = origin

    if isinstance(tp, type):
        try:
            return isinstance(value, tp)
        except TypeError:
            return True
    return True


class Matcher:
    """Base class: decides whether one argument value matches."""

    def matches(self, value: Any) -> bool:
        raise NotImplementedError


class IsAny(Matcher):
    """Any value of the given type."""

    def __init__(self, type_: Any = object, *, allow_none: bool = False) -> None:
        self.type = type_
        self.allow_none = allow_none

    def matches(self, value: Any) -> bool:
        if value is None and self.allow_none:
            return True
        return is_instance_of(value, self.type)

    def __repr__(self) -> str:
        name = getattr(self.type, "__name__", None) or repr(self.type)
        return f"It.is_any({name})"


class Declared(Matcher):
    """Any value at all; *type_* is the declared annotation, kept for descriptions.

    Annotations are not enforced by Python, so forwarding rules accept
    whatever a direct call on the implementation would.
    """

    def __init__(self, type_: Any = object) -> None:
        self.type = type_

    def matches(self, value: Any) -> bool:
        return True

    def __repr__(self) -> str:
        name = getattr(self.type, "__name__", None) or repr(self.type)
        return f"<{name}>"


class Eq(Matcher):
    """A concrete value, compared with ``==``."""

    def __init__(self, expected: Any) -> None:
        self.expected = expected

    def matches(self, value: Any) -> bool:
        if value is self.expected:
            return True
        try:
            return bool(value == self.expected)
        except Exception:
            return False

    def __repr__(self) -> str:
        return repr(self.expected)


class Predicate(Matcher):
    """A value accepted by a caller-supplied predicate."""

    def __init__(self, predicate: Callable[[Any], bool]) -> None:
        self.predicate = predicate

    def matches(self, value: Any) -> bool:
        return bool(self.predicate(value))

    def __repr__(self) -> str:
        name = getattr(self.predicate, "__name__", "predicate")
        return f"It.is_({name})"


class It:
    """Factory namespace for matchers."""

    @staticmethod
    def is_any(type_: Any = object, *, allow_none: bool = False) -> IsAny:
        return IsAny(type_, allow_none=allow_none)

    @staticmethod
    def is_(predicate: Callable[[Any], bool]) -> Predicate:
        return Predicate(predicate)

    @staticmethod
    def eq(value: Any) -> Eq:
        return Eq(value)


def as_matcher(value: Any) -> Matcher:
    """Return *value* itself if it is a matcher, otherwise an :class:`Eq` for it."""
    if isinstance(value, Matcher):
        return value
    return Eq(value)
