"""Generic signature erasure.

Replaces every unresolved ``TypeVar`` in an annotation with a concrete
surrogate type (``object`` by default) so a generic method can be bound with
a static argument pattern::

    T                    -> object
    list[T]              -> list[object]
    dict[str, list[T]]   -> dict[str, list[object]]
    type[T]              -> type[object]
    Callable[[T], R]     -> Callable[[object], object]
    Optional[T]          -> object
    Box[T]               -> Box[object]   (or object if Box's bound rejects it)

Erasure never raises.  A method whose own type parameters reject the
surrogate is reported as not statically constructible (``None``).
"""

from __future__ import annotations

import collections.abc
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

_UNION_ORIGINS = (typing.Union, types.UnionType)
_VARIADIC_PARAMS = (typing.ParamSpec, typing.TypeVarTuple)


@dataclass(frozen=True)
class ErasedSignature:
    """Closed instantiation of a generic method."""

    param_types: tuple[Any, ...]
    return_type: Any
    surrogate: type = object


def collect_type_params(tp: Any) -> tuple[Any, ...]:
    """Return the distinct type variables referenced by *tp*, in order of appearance."""
    found: list[Any] = []
    _collect(tp, found)
    return tuple(found)


def _collect(tp: Any, found: list[Any]) -> None:
    if isinstance(tp, (typing.TypeVar, *_VARIADIC_PARAMS)):
        if tp not in found:
            found.append(tp)
        return
    if isinstance(tp, (list, tuple)):
        for item in tp:
            _collect(item, found)
        return
    for arg in typing.get_args(tp):
        _collect(arg, found)


def contains_type_params(tp: Any) -> bool:
    return bool(collect_type_params(tp))


def satisfies(type_param: Any, candidate: type) -> bool:
    """Check *candidate* against a TypeVar's bound and value constraints."""
    if isinstance(type_param, _VARIADIC_PARAMS):
        return False
    constraints = getattr(type_param, "__constraints__", ())
    if constraints:
        return any(_is_subclass(candidate, c) for c in constraints)
    bound = getattr(type_param, "__bound__", None)
    if bound is None:
        return True
    return _is_subclass(candidate, bound)


def _is_subclass(candidate: type, target: Any) -> bool:
    if target is Any or target is object:
        return True
    origin = typing.get_origin(target)
    if origin in _UNION_ORIGINS:
        return any(_is_subclass(candidate, arm) for arm in typing.get_args(target))
    target = origin or target
    if not isinstance(target, type):
        # String/forward-ref bounds cannot be checked here.
        logger.debug("Cannot check bound %r; assuming satisfied", target)
        return True
    try:
        return issubclass(candidate, target)
    except TypeError:
        # Non-runtime protocols refuse issubclass()
        return False


def erase_type(tp: Any, surrogate: type = object) -> Any:
    """Return *tp* with every type variable replaced by *surrogate*."""
    if isinstance(tp, typing.TypeVar):
        return surrogate
    if isinstance(tp, _VARIADIC_PARAMS):
        return ...
    if isinstance(tp, list):
        # Callable argument list
        return [erase_type(item, surrogate) for item in tp]
    if tp is Ellipsis or not contains_type_params(tp):
        return tp

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin in _UNION_ORIGINS:
        arms = [arm for arm in args if arm is not type(None)]
        if len(arms) == 1 and len(arms) != len(args) and isinstance(arms[0], typing.TypeVar):
            return surrogate
        erased = tuple(erase_type(arm, surrogate) for arm in args)
        return typing.Union[erased]

    if origin is typing.Annotated:
        base, *metadata = args
        return typing.Annotated[(erase_type(base, surrogate), *metadata)]

    if origin is collections.abc.Callable:
        params, result = args[0], args[-1]
        erased_params = ... if params is Ellipsis else erase_type(list(params), surrogate)
        return collections.abc.Callable[erased_params, erase_type(result, surrogate)]

    erased_args = tuple(erase_type(arg, surrogate) for arg in args)

    declared = getattr(origin, "__parameters__", ())
    for param, arg in zip(declared, erased_args):
        if isinstance(arg, type) and not satisfies(param, arg):
            logger.debug("%r rejects %r; collapsing %r to surrogate", origin, arg, tp)
            return surrogate

    try:
        return origin[erased_args if len(erased_args) != 1 else erased_args[0]]
    except TypeError as exc:
        logger.debug("Cannot rebuild %r with %r: %s", origin, erased_args, exc)
        return surrogate


def try_erase_signature(member, surrogate: type = object) -> Optional[ErasedSignature]:
    """Produce a closed instantiation of a generic *member*, or ``None``.

    ``None`` means a type parameter of the method itself rejects the
    surrogate; such members are left to the fallback interceptor.
    """
    for type_param in member.type_params:
        if not satisfies(type_param, surrogate):
            logger.debug(
                "%s: %r rejects surrogate %s; not statically constructible",
                member.name, type_param, surrogate.__name__,
            )
            return None
    return ErasedSignature(
        param_types=tuple(erase_type(p.annotation, surrogate) for p in member.params),
        return_type=erase_type(member.return_type, surrogate),
        surrogate=surrogate,
    )
