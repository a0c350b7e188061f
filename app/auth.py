"""Admin authorization for the log endpoints."""

import logging
import secrets

from fastapi import Request

logger = logging.getLogger(__name__)


class AuthError(Exception):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(AuthError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(AuthError):
    status_code = 403
    code = "FORBIDDEN"


def require_admin(request: Request) -> None:
    """FastAPI dependency: require ``Authorization: Bearer <ADMIN_API_TOKEN>``.

    Raises:
        UnauthorizedError: If no bearer token was sent.
        ForbiddenError: If the token is not the admin token, or none is configured.
    """
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Authentication required")

    expected = request.app.state.settings.admin_api_token
    if not expected or not secrets.compare_digest(token.strip().encode(), expected.encode()):
        logger.warning("[ADMIN] Rejected admin request to %s", request.url.path)
        raise ForbiddenError("Admin access required")
