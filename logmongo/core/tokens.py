"""
Token registry and built-in tokens.

A token is a named resolver ``(request, response, arg) -> value`` that
pulls one field out of an exchange. Registries are explicit objects;
a process-wide default is available for startup-time customization.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from logmongo.core.exchange import RequestView, ResponseView
from logmongo.core.lifecycle import response_time_ms, utc_now
from logmongo.core.values import TokenValue, to_token_value
from logmongo.utils.basic_auth import parse_basic_auth

logger = logging.getLogger(__name__)


TokenResolver = Callable[[RequestView, ResponseView, Optional[str]], object]


class TokenRegistry:
    """
    Mapping from token name to resolver.

    Registration is expected at startup, before traffic; there is no
    locking. Overwriting an existing name (built-ins included) is allowed.
    """

    def __init__(self, tokens: Optional[Dict[str, TokenResolver]] = None):
        self._tokens: Dict[str, TokenResolver] = dict(tokens or {})

    def register(self, name: str, resolver: TokenResolver) -> "TokenRegistry":
        """
        Add or overwrite a token.

        Args:
            name: Token name as used after ``:`` in format templates
            resolver: Callable taking (request, response, arg)

        Returns:
            self, for chaining
        """
        if not isinstance(name, str) or not name:
            raise ValueError("token name must be a non-empty string")
        if not callable(resolver):
            raise TypeError(f"resolver for token '{name}' must be callable")

        if name in self._tokens:
            logger.debug(f"Overwriting token '{name}'")
        self._tokens[name] = resolver
        return self

    def get(self, name: str) -> Optional[TokenResolver]:
        return self._tokens.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tokens

    def names(self) -> List[str]:
        """Registered token names, in registration order."""
        return list(self._tokens)

    def copy(self) -> "TokenRegistry":
        """Independent registry with the same resolvers."""
        return TokenRegistry(self._tokens)

    def resolve(
        self,
        name: str,
        request: RequestView,
        response: ResponseView,
        arg: Optional[str] = None,
    ) -> TokenValue:
        """
        Evaluate one token.

        Unknown tokens and failing resolvers give None.
        """
        resolver = self._tokens.get(name)
        if resolver is None:
            return None

        try:
            value = resolver(request, response, arg)
        except Exception as e:
            logger.warning(f"Token '{name}' failed to resolve: {e}")
            return None

        return to_token_value(value)


# =============================================================================
# Header helpers
# =============================================================================

def _joined_header(headers, field: Optional[str]) -> Optional[str]:
    if not field:
        return None
    values = headers.getlist(field)
    if not values:
        return None
    return ", ".join(values)


# =============================================================================
# Built-in tokens
# =============================================================================

def get_url_token(request: RequestView, response: ResponseView, arg=None):
    return request.original_url or request.url


def get_method_token(request: RequestView, response: ResponseView, arg=None):
    return request.method


def get_response_time_token(request: RequestView, response: ResponseView, digits=None):
    """Response time in milliseconds, ``digits`` decimals (default 3)."""
    return response_time_ms(
        request,
        response,
        digits=3 if digits is None else int(digits),
    )


def get_date_token(request: RequestView, response: ResponseView, fmt=None) -> datetime:
    # The format argument is accepted but not applied.
    return utc_now()


def get_status_token(request: RequestView, response: ResponseView, arg=None):
    return response.status_code if response.headers_sent else None


def get_referrer_token(request: RequestView, response: ResponseView, arg=None):
    return request.headers.get("referer") or request.headers.get("referrer")


def get_remote_addr_token(request: RequestView, response: ResponseView, arg=None):
    return request.client_address()


def get_remote_user_token(request: RequestView, response: ResponseView, arg=None):
    credentials = parse_basic_auth(request.headers.get("authorization"))
    return credentials.name if credentials else None


def get_http_version_token(request: RequestView, response: ResponseView, arg=None) -> float:
    major, _, minor = request.http_version.partition(".")
    return float(f"{major}.{minor or 0}")


def get_user_agent_token(request: RequestView, response: ResponseView, arg=None):
    return request.headers.get("user-agent")


def get_request_header_token(request: RequestView, response: ResponseView, field=None):
    return _joined_header(request.headers, field)


def get_response_header_token(request: RequestView, response: ResponseView, field=None):
    if not response.headers_sent:
        return None
    return _joined_header(response.headers, field)


BUILTIN_TOKENS: Dict[str, TokenResolver] = {
    "url": get_url_token,
    "method": get_method_token,
    "response-time": get_response_time_token,
    "date": get_date_token,
    "status": get_status_token,
    "referrer": get_referrer_token,
    "remote-addr": get_remote_addr_token,
    "remote-user": get_remote_user_token,
    "http-version": get_http_version_token,
    "user-agent": get_user_agent_token,
    "req": get_request_header_token,
    "res": get_response_header_token,
}


def register_builtin_tokens(registry: TokenRegistry) -> TokenRegistry:
    """Register every built-in token on ``registry``."""
    for name, resolver in BUILTIN_TOKENS.items():
        registry.register(name, resolver)
    return registry


def create_default_registry() -> TokenRegistry:
    """Fresh registry holding the built-in tokens."""
    return register_builtin_tokens(TokenRegistry())


# Global registry instance
_registry: Optional[TokenRegistry] = None


def get_token_registry() -> TokenRegistry:
    """Get or create the process-wide token registry."""
    global _registry
    if _registry is None:
        _registry = create_default_registry()
    return _registry


def register_token(name: str, resolver: TokenResolver) -> TokenRegistry:
    """Register a token on the process-wide registry."""
    return get_token_registry().register(name, resolver)
