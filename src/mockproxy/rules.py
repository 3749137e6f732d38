"""Call patterns, actions and rules held by a substitute's rule table."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from mockproxy.matchers import Matcher


class Access(enum.Enum):
    CALL = "call"
    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class CallPattern:
    """Member name, access kind and an ordered tuple of argument matchers.

    For ``SET`` patterns the assigned value is matched by the last matcher,
    after any index matchers.  With ``any_args`` every argument list matches
    and ``matchers`` is ignored.
    """

    member_name: str
    access: Access
    matchers: tuple[Matcher, ...] = ()
    any_args: bool = False

    def matches(self, invocation) -> bool:
        if invocation.member.name != self.member_name or invocation.access is not self.access:
            return False
        if self.any_args:
            return True
        values = invocation.match_values
        if len(values) != len(self.matchers):
            return False
        return all(m.matches(v) for m, v in zip(self.matchers, values))

    def describe(self) -> str:
        args = "..." if self.any_args else ", ".join(repr(m) for m in self.matchers)
        if self.access is Access.CALL:
            return f"{self.member_name}({args})"
        return f"{self.access.value} {self.member_name}[{args}]" if args else f"{self.access.value} {self.member_name}"


class Action:
    def execute(self, invocation) -> Any:
        raise NotImplementedError


@dataclass
class Returns(Action):
    """Produce the invocation result, either a constant or ``factory(*args)``."""

    value: Any = None
    factory: Optional[Callable[..., Any]] = None

    def execute(self, invocation) -> Any:
        if self.factory is not None:
            return self.factory(*invocation.match_values)
        return self.value


@dataclass
class Callback(Action):
    """Run ``fn(*args)`` for its side effect; the result is ``None``."""

    fn: Callable[..., Any]

    def execute(self, invocation) -> Any:
        self.fn(*invocation.match_values)
        return None


@dataclass
class Raises(Action):
    exception: BaseException

    def execute(self, invocation) -> Any:
        raise self.exception


@dataclass
class CallRule:
    pattern: CallPattern
    action: Action
    hits: int = field(default=0, compare=False)

    def __repr__(self) -> str:
        return f"CallRule({self.pattern.describe()} -> {type(self.action).__name__})"
