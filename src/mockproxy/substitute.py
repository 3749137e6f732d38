"""Rule-matching substitutes with an interceptor chain.

A :class:`Substitute` wraps a contract class and exposes ``.object``, an
instance of a generated subclass of the contract.  Every property access,
indexer access and method call on ``.object`` becomes an
:class:`Invocation` that travels through ``substitute.interceptors``; the
last interceptor is always the substitute's rule table.

Usage::

    sub = Substitute(Calculator)
    sub.setup("add", 2, 3).returns(5)
    sub.setup("add", It.is_any(int), It.is_any(int)).answers(lambda a, b: a * b)
    sub.setup_get("name").returns("calc")

    sub.object.add(2, 3)        # 5
    sub.verify("add", 2, 3, times=1)
    sub.reset()                 # forget rules and recorded calls

Rules are consulted most-recently-registered first.  An invocation no
rule matches gets its result from ``default_value_provider`` (``None``
unless configured), or raises :class:`UnmatchedInvocationError` when the
substitute is strict.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from mockproxy.config import get_settings
from mockproxy.errors import UnmatchedInvocationError, VerificationError
from mockproxy.introspection import (
    INDEXER_NAME,
    ContractMember,
    MemberKind,
    describe_contract,
)
from mockproxy.matchers import IsAny, as_matcher
from mockproxy.rules import Access, Action, Callback, CallPattern, CallRule, Raises, Returns

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SUBSTITUTE_ATTR = "_mockproxy_substitute"

DefaultValueProvider = Callable[["Invocation"], Any]


def _none_provider(invocation: "Invocation") -> Any:
    return None


# ---------------------------------------------------------------------------
# Invocations and the interceptor chain
# ---------------------------------------------------------------------------

class Invocation:
    """One intercepted access to a substitute's public object."""

    def __init__(
        self,
        member: ContractMember,
        access: Access,
        args: tuple[Any, ...] = (),
        kwargs: Optional[dict[str, Any]] = None,
        chain: Sequence[Any] = (),
    ) -> None:
        self.member = member
        self.access = access
        self.args = args
        self.kwargs = kwargs or {}
        self.return_value: Any = None
        self.forwarded = False
        self._chain = tuple(chain)
        self._index = 0

    @property
    def is_void(self) -> bool:
        if self.access is Access.SET:
            return True
        if self.access is Access.GET:
            return False
        return self.member.is_void

    @property
    def match_values(self) -> tuple[Any, ...]:
        return self.args

    def proceed(self) -> None:
        """Hand the invocation to the next interceptor in the chain."""
        index = self._index
        if index >= len(self._chain):
            return
        self._index = index + 1
        try:
            self._chain[index].intercept(self)
        finally:
            self._index = index

    def describe(self) -> str:
        args = ", ".join(repr(a) for a in self.args)
        if self.access is Access.CALL:
            return f"{self.member.name}({args})"
        if self.member.kind is MemberKind.INDEXER:
            return f"{self.access.value} [{args}]"
        return f"{self.access.value} {self.member.name}" + (f" = {args}" if args else "")

    def __repr__(self) -> str:
        return f"<Invocation {self.describe()}>"


class RuleTableInterceptor:
    """Terminal interceptor: runs the first matching rule, else the default."""

    def __init__(self, substitute: "Substitute") -> None:
        self.substitute = substitute

    def intercept(self, invocation: Invocation) -> None:
        rule = self.substitute.find_rule(invocation)
        if rule is not None:
            rule.hits += 1
            result = rule.action.execute(invocation)
            if not invocation.is_void:
                invocation.return_value = result
            return

        if self.substitute.strict:
            raise UnmatchedInvocationError(
                f"{self.substitute.contract.__name__}: no rule matches {invocation.describe()}"
            )
        if not invocation.is_void:
            invocation.return_value = self.substitute.default_value_provider(invocation)


# ---------------------------------------------------------------------------
# Fluent rule registration
# ---------------------------------------------------------------------------

class RuleBuilder:
    """Completes a pattern with an action and registers the resulting rule."""

    def __init__(self, substitute: "Substitute", pattern: CallPattern) -> None:
        self._substitute = substitute
        self.pattern = pattern

    def returns(self, value: Any) -> CallRule:
        """Answer matching invocations with a constant."""
        return self._register(Returns(value=value))

    def answers(self, factory: Callable[..., Any]) -> CallRule:
        """Answer matching invocations with ``factory(*matched_args)``."""
        return self._register(Returns(factory=factory))

    def callback(self, fn: Callable[..., Any]) -> CallRule:
        """Run ``fn(*matched_args)`` for matching invocations."""
        return self._register(Callback(fn))

    def raises(self, exception: BaseException) -> CallRule:
        return self._register(Raises(exception))

    def _register(self, action: Action) -> CallRule:
        return self._substitute.register_rule(self.pattern, action)


# ---------------------------------------------------------------------------
# Substitute
# ---------------------------------------------------------------------------

class Substitute(Generic[T]):
    """A configurable stand-in for *contract*."""

    def __init__(self, contract: type[T], *, strict: Optional[bool] = None) -> None:
        if strict is None:
            strict = get_settings().strict
        self.contract = contract
        self.strict = strict
        self.members = describe_contract(contract)
        self._members = {m.name: m for m in self.members}
        self._rules: list[CallRule] = []
        self.calls: list[Invocation] = []
        self.default_value_provider: DefaultValueProvider = _none_provider
        self.interceptors: list[Any] = [RuleTableInterceptor(self)]
        self.object: T = _new_object(contract, self)

    def __repr__(self) -> str:
        return f"<Substitute of {self.contract.__name__}: {len(self._rules)} rules>"

    # ------------------------------------------------------------------
    # Rule table
    # ------------------------------------------------------------------

    @property
    def rules(self) -> tuple[CallRule, ...]:
        return tuple(self._rules)

    def register_rule(self, pattern: CallPattern, action: Action) -> CallRule:
        """Append a rule; later rules take precedence over earlier ones."""
        rule = CallRule(pattern, action)
        self._rules.append(rule)
        return rule

    def find_rule(self, invocation: Invocation) -> Optional[CallRule]:
        for rule in reversed(self._rules):
            if rule.pattern.matches(invocation):
                return rule
        return None

    def configure_default_value_provider(self, provider: DefaultValueProvider) -> None:
        self.default_value_provider = provider

    def reset(self) -> None:
        """Forget every rule and recorded call.  Interceptors are kept."""
        logger.debug("Resetting %r", self)
        self._rules.clear()
        self.calls.clear()

    # ------------------------------------------------------------------
    # Test-author API
    # ------------------------------------------------------------------

    def member(self, name: str) -> ContractMember:
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"{self.contract.__name__} has no member {name!r}") from None

    def setup(self, name: str, *args: Any, **kwargs: Any) -> RuleBuilder:
        """Start a rule for a method call; plain values match by equality."""
        member = self.member(name)
        return RuleBuilder(self, CallPattern(name, Access.CALL, self._call_matchers(member, args, kwargs)))

    def setup_get(self, name: str) -> RuleBuilder:
        self.member(name)
        return RuleBuilder(self, CallPattern(name, Access.GET))

    def setup_set(self, name: str, value: Any = IsAny()) -> RuleBuilder:
        self.member(name)
        return RuleBuilder(self, CallPattern(name, Access.SET, (as_matcher(value),)))

    def setup_item(self, *index: Any) -> RuleBuilder:
        self.member(INDEXER_NAME)
        return RuleBuilder(self, CallPattern(INDEXER_NAME, Access.GET, tuple(map(as_matcher, index))))

    def setup_item_set(self, *index: Any, value: Any = IsAny()) -> RuleBuilder:
        self.member(INDEXER_NAME)
        matchers = (*map(as_matcher, index), as_matcher(value))
        return RuleBuilder(self, CallPattern(INDEXER_NAME, Access.SET, matchers))

    def verify(self, name: str, *args: Any, times: Optional[int] = None, **kwargs: Any) -> None:
        """Assert that ``name(*args)`` was called (exactly *times* times if given)."""
        member = self.member(name)
        self._verify(CallPattern(name, Access.CALL, self._call_matchers(member, args, kwargs)), times)

    def verify_get(self, name: str, *, times: Optional[int] = None) -> None:
        self.member(name)
        self._verify(CallPattern(name, Access.GET), times)

    def verify_set(self, name: str, value: Any = IsAny(), *, times: Optional[int] = None) -> None:
        self.member(name)
        self._verify(CallPattern(name, Access.SET, (as_matcher(value),)), times)

    def _verify(self, pattern: CallPattern, times: Optional[int]) -> None:
        count = sum(1 for call in self.calls if pattern.matches(call))
        if (times is None and count > 0) or count == times:
            return
        expected = "at least once" if times is None else f"{times} time(s)"
        performed = "\n".join(f"  {c.describe()}" for c in self.calls) or "  (none)"
        raise VerificationError(
            f"Expected {pattern.describe()} {expected}, found {count}.\nPerformed invocations:\n{performed}"
        )

    def _call_matchers(self, member: ContractMember, args: tuple, kwargs: dict) -> tuple:
        if member.signature is None or member.variadic:
            return tuple(map(as_matcher, args))
        bound = member.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple(as_matcher(bound.arguments[p.name]) for p in member.params)

    # ------------------------------------------------------------------
    # Invocation entry point (called by the generated object)
    # ------------------------------------------------------------------

    def invoke(
        self,
        member: ContractMember,
        access: Access,
        args: tuple[Any, ...] = (),
        kwargs: Optional[dict[str, Any]] = None,
    ) -> Any:
        extra: dict[str, Any] = {}
        if access is Access.CALL and member.signature is not None and not member.variadic:
            bound = member.signature.bind(*args, **(kwargs or {}))
            bound.apply_defaults()
            args = tuple(bound.arguments[p.name] for p in member.params)
        elif kwargs:
            extra = dict(kwargs)

        invocation = Invocation(member, access, args, extra, chain=self.interceptors)
        self.calls.append(invocation)
        invocation.proceed()
        return invocation.return_value


# ---------------------------------------------------------------------------
# Generated public objects
# ---------------------------------------------------------------------------

def _substitute_of(obj: Any) -> Substitute:
    return object.__getattribute__(obj, _SUBSTITUTE_ATTR)


def _new_object(contract: type, substitute: Substitute) -> Any:
    cls = _object_class(contract)
    obj = object.__new__(cls)
    object.__setattr__(obj, _SUBSTITUTE_ATTR, substitute)
    return obj


@lru_cache(maxsize=None)
def _object_class(contract: type) -> type:
    namespace: dict[str, Any] = {
        "__module__": contract.__module__,
        "__doc__": contract.__doc__,
        "__repr__": lambda self: f"<{contract.__name__} substitute>",
    }
    for member in describe_contract(contract):
        if member.kind is MemberKind.PROPERTY:
            namespace[member.name] = _property_for(member)
        elif member.kind is MemberKind.INDEXER:
            namespace.update(_indexer_for(member))
        else:
            namespace[member.name] = _method_for(contract, member)

    for name in getattr(contract, "__abstractmethods__", ()):
        namespace.setdefault(name, _abstract_stub(name))

    return type(f"{contract.__name__}Substitute", (contract,), namespace)


def _property_for(member: ContractMember) -> property:
    def fget(self):
        return _substitute_of(self).invoke(member, Access.GET)

    def fset(self, value):
        _substitute_of(self).invoke(member, Access.SET, (value,))

    return property(
        fget if member.readable else None,
        fset if member.writable else None,
    )


def _index_values(member: ContractMember, key: Any) -> tuple[Any, ...]:
    if member.arity == 1:
        return (key,)
    if not member.supported:
        return key if isinstance(key, tuple) else (key,)
    if not isinstance(key, tuple) or len(key) != member.arity:
        raise TypeError(
            f"{INDEXER_NAME} takes {member.arity} index value(s), got {key!r}"
        )
    return key


def _indexer_for(member: ContractMember) -> dict[str, Any]:
    def __getitem__(self, key):
        return _substitute_of(self).invoke(member, Access.GET, _index_values(member, key))

    def __setitem__(self, key, value):
        _substitute_of(self).invoke(member, Access.SET, (*_index_values(member, key), value))

    methods: dict[str, Any] = {}
    if member.readable:
        methods["__getitem__"] = __getitem__
    if member.writable:
        methods["__setitem__"] = __setitem__
    return methods


def _method_for(contract: type, member: ContractMember) -> Callable[..., Any]:
    def method(self, *args, **kwargs):
        return _substitute_of(self).invoke(member, Access.CALL, args, kwargs)

    method.__name__ = member.name
    method.__qualname__ = f"{contract.__name__}Substitute.{member.name}"
    return method


def _abstract_stub(name: str) -> Callable[..., Any]:
    def stub(self, *args, **kwargs):
        return None

    stub.__name__ = name
    return stub
