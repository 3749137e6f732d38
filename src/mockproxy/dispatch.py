"""Raw dynamic dispatch of a described member against a target object."""

from __future__ import annotations

import inspect
from typing import Any, Optional

from mockproxy.introspection import ContractMember, MemberKind
from mockproxy.rules import Access

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def index_key(member: ContractMember, values: tuple[Any, ...]) -> Any:
    """Rebuild the subscript key from matched index values."""
    if member.arity == 0:
        return ()
    if member.arity == 1:
        return values[0]
    return tuple(values)


def split_arguments(
    member: ContractMember,
    values: tuple[Any, ...],
    extra_kwargs: Optional[dict[str, Any]] = None,
) -> tuple[list[Any], dict[str, Any]]:
    """Turn ordered parameter values back into ``(args, kwargs)`` for a call."""
    if member.variadic:
        return list(values), dict(extra_kwargs or {})

    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for param, value in zip(member.params, values):
        if param.kind in _POSITIONAL:
            args.append(value)
        else:
            kwargs[param.name] = value
    if extra_kwargs:
        kwargs.update(extra_kwargs)
    return args, kwargs


def dispatch(
    target: Any,
    member: ContractMember,
    access: Access,
    values: tuple[Any, ...] = (),
    extra_kwargs: Optional[dict[str, Any]] = None,
) -> Any:
    """Perform *access* of *member* on *target* with *values*.

    ``values`` holds the ordered argument values of a call, the index values
    of an indexer read, or the index values followed by the assigned value
    of a write.  Setters return ``None``.
    """
    if member.kind is MemberKind.INDEXER:
        if access is Access.SET:
            target[index_key(member, values[:-1])] = values[-1]
            return None
        return target[index_key(member, values)]

    if member.kind is MemberKind.PROPERTY:
        if access is Access.SET:
            setattr(target, member.name, values[0])
            return None
        return getattr(target, member.name)

    args, kwargs = split_arguments(member, values, extra_kwargs)
    return getattr(target, member.name)(*args, **kwargs)
