"""mockproxy: substitutes that forward to real implementations until overridden."""

from mockproxy.config import ProxySettings, configure_logging, get_settings, load_settings
from mockproxy.errors import (
    InterceptionError,
    MockProxyError,
    ProxySetupError,
    ServiceNotRegisteredError,
    UnmatchedInvocationError,
    VerificationError,
)
from mockproxy.introspection import (
    INDEXER_NAME,
    ContractMember,
    MemberKind,
    describe_contract,
    forwardable_members,
)
from mockproxy.matchers import It
from mockproxy.proxy import bind_as_proxy, proxy_of, setup_as_proxy
from mockproxy.registry import ServiceRegistry, decorate_with_proxy
from mockproxy.rules import Access, CallPattern, CallRule
from mockproxy.sentinel import NO_RESULT
from mockproxy.substitute import Invocation, Substitute

__all__ = [
    "ProxySettings",
    "configure_logging",
    "get_settings",
    "load_settings",
    "InterceptionError",
    "MockProxyError",
    "ProxySetupError",
    "ServiceNotRegisteredError",
    "UnmatchedInvocationError",
    "VerificationError",
    "INDEXER_NAME",
    "ContractMember",
    "MemberKind",
    "describe_contract",
    "forwardable_members",
    "It",
    "bind_as_proxy",
    "proxy_of",
    "setup_as_proxy",
    "ServiceRegistry",
    "decorate_with_proxy",
    "Access",
    "CallPattern",
    "CallRule",
    "NO_RESULT",
    "Invocation",
    "Substitute",
]
__version__ = "0.1.0"
