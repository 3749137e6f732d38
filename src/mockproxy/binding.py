"""Member binding: one forwarding rule (or getter/setter pair) per member.

Every rule dispatches straight to the implementation, so reads always
observe its live state.  Argument and value matchers accept any value:
annotations describe the rule but are not enforced, since a direct call on
the implementation would not enforce them either.

Members that cannot be described by a fixed, typed argument pattern
(variadic methods, generic methods whose bounds reject the surrogate) get
no static rule.  When such a member returns a value, the fallback
interceptor forwards it; when it is void, an any-arguments rule does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from mockproxy.dispatch import dispatch
from mockproxy.erasure import try_erase_signature
from mockproxy.introspection import MAX_INDEX_ARITY, ContractMember, MemberKind
from mockproxy.matchers import Declared
from mockproxy.rules import Access, Action, CallPattern, CallRule

logger = logging.getLogger(__name__)


@dataclass
class BindingReport:
    """What a binding pass registered and what it left to the interceptor."""

    bound: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    rules: int = 0
    reused: bool = False

    def skip(self, member: ContractMember, reason: str) -> None:
        logger.debug("Not binding %s: %s", member.name, reason)
        self.skipped[member.name] = reason


class Forward(Action):
    """Dispatch the matched invocation to the implementation.

    Marks the invocation as forwarded first, so a failure raised by the
    implementation is not retried by the fallback interceptor.
    """

    def __init__(self, impl: Any, member: ContractMember) -> None:
        self.impl = impl
        self.member = member

    def execute(self, invocation) -> Any:
        invocation.forwarded = True
        return dispatch(
            self.impl, self.member, invocation.access, invocation.match_values, invocation.kwargs
        )

    def __repr__(self) -> str:
        return f"Forward({type(self.impl).__name__}.{self.member.name})"


def bind_members(
    substitute,
    impl: Any,
    members: Iterable[ContractMember],
    *,
    surrogate: type = object,
) -> BindingReport:
    """Register forwarding rules for *members*.

    If the most recent rules of *substitute* already forward exactly this
    set of patterns, they are pointed at *impl* instead of registered again,
    so repeated binding does not grow the rule table.
    """
    report = BindingReport()
    planned: list[tuple[CallPattern, ContractMember]] = []
    for member in members:
        patterns = _patterns_for(member, surrogate, report)
        if patterns:
            report.bound.append(member.name)
            planned.extend((pattern, member) for pattern in patterns)
    report.rules = len(planned)

    current = _forwarding_tail(substitute, planned)
    if current is not None:
        for rule in current:
            rule.action.impl = impl
        report.reused = True
        logger.debug("Reusing %d forwarding rule(s) on %r", len(current), substitute)
        return report

    for pattern, member in planned:
        substitute.register_rule(pattern, Forward(impl, member))
    return report


def _forwarding_tail(
    substitute, planned: list[tuple[CallPattern, ContractMember]]
) -> Optional[list[CallRule]]:
    """Return the newest rules if they are forwarding rules for *planned*, else None."""
    rules = getattr(substitute, "rules", None)
    if not planned or rules is None or len(rules) < len(planned):
        return None
    tail = list(rules[-len(planned):])
    for rule, (pattern, member) in zip(tail, planned):
        if not isinstance(rule.action, Forward) or rule.action.member is not member:
            return None
        if rule.pattern.member_name != pattern.member_name or rule.pattern.access is not pattern.access:
            return None
    return tail


def _patterns_for(member: ContractMember, surrogate: type, report: BindingReport) -> list[CallPattern]:
    if not member.supported:
        report.skip(member, member.unsupported_reason)
        return []
    if member.kind is MemberKind.PROPERTY:
        return _property_patterns(member)
    if member.kind is MemberKind.INDEXER:
        return _indexer_patterns(member, report)
    if member.variadic:
        return _untyped_patterns(member, report, "variadic parameters")
    if member.kind is MemberKind.METHOD:
        return [_call_pattern(member, [p.annotation for p in member.params])]

    erased = try_erase_signature(member, surrogate)
    if erased is None:
        return _untyped_patterns(member, report, "generic constraints reject the surrogate type")
    return [_call_pattern(member, erased.param_types)]


def _property_patterns(member: ContractMember) -> list[CallPattern]:
    patterns = []
    if member.readable:
        patterns.append(CallPattern(member.name, Access.GET))
    if member.writable:
        patterns.append(CallPattern(member.name, Access.SET, (Declared(member.return_type),)))
    return patterns


def _indexer_patterns(member: ContractMember, report: BindingReport) -> list[CallPattern]:
    if member.arity > MAX_INDEX_ARITY:
        report.skip(member, f"{member.arity} index parameters")
        return []

    index_matchers = tuple(Declared(p.annotation) for p in member.params)
    patterns = []
    if member.readable:
        patterns.append(CallPattern(member.name, Access.GET, index_matchers))
    if member.writable and member.readable:
        patterns.append(
            CallPattern(member.name, Access.SET, (*index_matchers, Declared(member.return_type)))
        )
    elif member.writable:
        # The setter pattern is shaped like a read; write-only indexers stay unforwarded.
        report.skip(member, "write-only indexer")
    return patterns


def _call_pattern(member: ContractMember, param_types) -> CallPattern:
    return CallPattern(member.name, Access.CALL, tuple(Declared(t) for t in param_types))


def _untyped_patterns(member: ContractMember, report: BindingReport, reason: str) -> list[CallPattern]:
    if member.is_void:
        # The fallback only forwards invocations that produce a value
        return [CallPattern(member.name, Access.CALL, any_args=True)]
    report.skip(member, reason)
    return []
