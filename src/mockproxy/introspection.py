"""Contract introspection.

Turns a contract class (``typing.Protocol``, ABC, or plain class) into an
ordered tuple of :class:`ContractMember` descriptors.  Descriptors are
derived once per contract type and cached.

What counts as a member:

- ``property`` objects (getter and setter merged into one descriptor)
- annotated attributes on the class body (``count: int``), treated as
  read/write properties
- ``__getitem__`` / ``__setitem__``, merged into one indexer named ``"[]"``
- public instance methods; a method whose annotations mention a
  ``TypeVar`` is a generic method
- methods taking ``*args`` or ``**kwargs`` are flagged ``variadic``: no
  fixed argument pattern describes them, but they can still be dispatched

Names defined on ``object``, private names, static methods and class
methods are excluded.
"""

from __future__ import annotations

import abc
import enum
import inspect
import logging
import typing
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional

from mockproxy.erasure import collect_type_params

logger = logging.getLogger(__name__)

INDEXER_NAME = "[]"
MAX_INDEX_ARITY = 2

_INDEXER_DUNDERS = ("__getitem__", "__setitem__")
_ROOT_NAMES = frozenset(dir(object))
_SKIPPED_BASES = (object, typing.Generic, typing.Protocol, abc.ABC)
_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class MemberKind(enum.Enum):
    PROPERTY = "property"
    INDEXER = "indexer"
    METHOD = "method"
    GENERIC_METHOD = "generic_method"


@dataclass(frozen=True)
class Parameter:
    """One declared parameter (or index parameter) of a member."""

    name: str
    annotation: Any = Any
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = inspect.Parameter.empty

    @property
    def keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


@dataclass(frozen=True)
class ContractMember:
    """Read-only descriptor of one forwardable contract member."""

    name: str
    kind: MemberKind
    params: tuple[Parameter, ...] = ()
    return_type: Any = Any
    readable: bool = False
    writable: bool = False
    is_void: bool = False
    is_async: bool = False
    variadic: bool = False
    type_params: tuple[Any, ...] = ()
    unsupported_reason: Optional[str] = None
    signature: Optional[inspect.Signature] = field(default=None, compare=False, repr=False)

    @property
    def supported(self) -> bool:
        return self.unsupported_reason is None

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def generic_arity(self) -> int:
        return len(self.type_params)

    @property
    def constraints(self) -> dict[Any, Any]:
        """Map each type parameter to its bound or value constraints (or None)."""
        return {
            tp: getattr(tp, "__constraints__", ()) or getattr(tp, "__bound__", None)
            for tp in self.type_params
        }


def describe_contract(contract: type) -> tuple[ContractMember, ...]:
    """Return every interceptable member of *contract*, supported or not."""
    if not isinstance(contract, type):
        raise TypeError(f"contract must be a class, got {contract!r}")
    return _describe(contract)


def forwardable_members(contract: type) -> tuple[ContractMember, ...]:
    """Return the members of *contract* the engine can bind statically or forward."""
    return tuple(m for m in describe_contract(contract) if m.supported)


@lru_cache(maxsize=None)
def _describe(contract: type) -> tuple[ContractMember, ...]:
    members: list[ContractMember] = []
    seen: set[str] = set()
    indexer_parts: dict[str, Any] = {}
    indexer_slot: Optional[int] = None
    class_hints = _safe_hints(contract)

    for klass in contract.__mro__:
        if klass in _SKIPPED_BASES:
            continue

        for name, attr in vars(klass).items():
            if name in _INDEXER_DUNDERS:
                indexer_parts.setdefault(name, attr)
                if indexer_slot is None:
                    indexer_slot = len(members)
                continue
            if name in seen or _is_excluded(name):
                continue

            if isinstance(attr, (staticmethod, classmethod)):
                seen.add(name)
            elif isinstance(attr, property):
                seen.add(name)
                members.append(_describe_property(name, attr))
            elif inspect.isfunction(attr):
                seen.add(name)
                members.append(_describe_method(name, attr))

        for name in inspect.get_annotations(klass):
            if name in seen or _is_excluded(name):
                continue
            hint = class_hints.get(name, Any)
            if typing.get_origin(hint) is typing.ClassVar:
                continue
            seen.add(name)
            members.append(
                ContractMember(
                    name=name,
                    kind=MemberKind.PROPERTY,
                    return_type=hint,
                    readable=True,
                    writable=True,
                )
            )

    if indexer_parts:
        indexer = _describe_indexer(indexer_parts)
        members.insert(indexer_slot if indexer_slot is not None else len(members), indexer)

    for member in members:
        if member.supported:
            logger.debug("%s.%s: %s", contract.__name__, member.name, member.kind.value)
        else:
            logger.debug(
                "%s.%s: unsupported (%s)", contract.__name__, member.name, member.unsupported_reason
            )
    return tuple(members)


def _is_excluded(name: str) -> bool:
    return name in _ROOT_NAMES or name.startswith("_")


def _safe_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj)
    except Exception as exc:  # unresolvable forward references
        logger.debug("Cannot resolve annotations of %r: %s", obj, exc)
        return dict(getattr(obj, "__annotations__", {}) or {})


def _describe_property(name: str, prop: property) -> ContractMember:
    value_type: Any = Any
    if prop.fget is not None:
        value_type = _safe_hints(prop.fget).get("return", Any)
    elif prop.fset is not None:
        params = [p for p in inspect.signature(prop.fset).parameters][1:]
        if params:
            value_type = _safe_hints(prop.fset).get(params[0], Any)
    return ContractMember(
        name=name,
        kind=MemberKind.PROPERTY,
        return_type=value_type,
        readable=prop.fget is not None,
        writable=prop.fset is not None,
    )


def _describe_method(name: str, func: Any) -> ContractMember:
    hints = _safe_hints(func)
    signature = inspect.signature(func)
    declared = list(signature.parameters.values())[1:]  # drop self

    params = tuple(
        Parameter(
            name=p.name,
            annotation=hints.get(p.name, Any),
            kind=p.kind,
            default=p.default,
        )
        for p in declared
    )
    return_type = hints.get("return", Any)
    is_async = inspect.iscoroutinefunction(func)

    type_params: tuple[Any, ...] = tuple(getattr(func, "__type_params__", ()))
    if not type_params:
        type_params = collect_type_params([*(p.annotation for p in params), return_type])

    variadic = any(p.kind in _VARIADIC_KINDS for p in params)

    return ContractMember(
        name=name,
        kind=MemberKind.GENERIC_METHOD if type_params else MemberKind.METHOD,
        params=params,
        return_type=return_type,
        is_void=not is_async and (return_type is None or return_type is type(None)),
        is_async=is_async,
        variadic=variadic,
        type_params=type_params,
        signature=signature.replace(parameters=declared),
    )


def _describe_indexer(parts: dict[str, Any]) -> ContractMember:
    getter = parts.get("__getitem__")
    setter = parts.get("__setitem__")
    readable = inspect.isfunction(getter)
    writable = inspect.isfunction(setter)

    key_type: Any = Any
    value_type: Any = Any
    if readable:
        hints = _safe_hints(getter)
        key_name = _nth_param(getter, 1)
        key_type = hints.get(key_name, Any) if key_name else Any
        value_type = hints.get("return", Any)
    if writable:
        hints = _safe_hints(setter)
        if not readable:
            key_name = _nth_param(setter, 1)
            key_type = hints.get(key_name, Any) if key_name else Any
        value_name = _nth_param(setter, 2)
        if value_type is Any and value_name:
            value_type = hints.get(value_name, Any)

    index_types, reason = _index_types(key_type)
    params = tuple(Parameter(name=f"index{i}", annotation=t) for i, t in enumerate(index_types))
    return ContractMember(
        name=INDEXER_NAME,
        kind=MemberKind.INDEXER,
        params=params,
        return_type=value_type,
        readable=readable,
        writable=writable,
        unsupported_reason=reason,
    )


def _index_types(key_type: Any) -> tuple[tuple[Any, ...], Optional[str]]:
    """Split an indexer key annotation into per-index types."""
    if typing.get_origin(key_type) is not tuple:
        return (key_type,), None
    args = typing.get_args(key_type)
    if not args or args == ((),):
        return (), None
    if len(args) == 2 and args[1] is Ellipsis:
        return (), "variable-length index tuples are not supported"
    if len(args) > MAX_INDEX_ARITY:
        return args, f"indexers with {len(args)} index parameters are not supported"
    return args, None


def _nth_param(func: Any, position: int) -> Optional[str]:
    names = list(inspect.signature(func).parameters)
    return names[position] if len(names) > position else None
