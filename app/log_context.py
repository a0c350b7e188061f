"""Request-scoped logging context (request id, method, path, client ip)."""

import secrets
from contextvars import ContextVar, Token
from typing import Mapping, Optional

REQUEST_ID_HEADER = "x-request-id"

# Checked in order of preference
CLIENT_IP_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
    "x-client-ip",
    "x-cluster-client-ip",
)

_request_context: ContextVar[dict] = ContextVar("request_context", default={})


def generate_request_id() -> str:
    """Return a 16-character url-safe request id."""
    return secrets.token_urlsafe(12)


def get_client_ip(headers: Mapping[str, str], fallback: Optional[str] = None) -> Optional[str]:
    """Pick the client address from proxy headers, falling back to the peer address.

    ``x-forwarded-for`` may hold ``client, proxy1, proxy2``; only the first
    element is the client.
    """
    for header in CLIENT_IP_HEADERS:
        value = headers.get(header)
        if value:
            return value.split(",")[0].strip()
    return fallback


def get_request_context() -> dict:
    return _request_context.get()


def bind_request_context(**fields) -> Token:
    context = {key: value for key, value in fields.items() if value is not None}
    return _request_context.set(context)


def reset_request_context(token: Token) -> None:
    _request_context.reset(token)
