from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .dependencies import get_token_service, get_user_repository
from .errors import AuthenticationError, AuthorizationError, InvalidToken
from .models import UserEntity
from .repositories import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def authenticate_request(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    tokens: TokenService = Depends(get_token_service),
    users: UserRepository = Depends(get_user_repository),
) -> UserEntity:
    """
    Resolve the caller from an ``Authorization: Bearer <token>`` header.

    Steps: extract token, verify signature and expiry, load the user it names,
    attach the user to ``request.state.user``. Any failing step raises
    AuthenticationError, which always renders as 401 "Authentication failed";
    the concrete reason goes to the debug log only.

    Usage:
        @router.get("/", ...)
        def handler(user: UserEntity = Depends(authenticate_request)): ...
    """
    # HTTPBearer yields None for a missing header, another scheme or an empty token
    if creds is None or not creds.credentials:
        logger.debug("Rejected %s %s: missing bearer token", request.method, request.url.path)
        raise AuthenticationError("missing or malformed Authorization header")

    try:
        owner_id = tokens.verify(creds.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
        raise AuthenticationError(str(exc)) from exc

    user = users.find_by_id(owner_id)
    if user is None:
        logger.debug("Rejected %s %s: unknown subject %s", request.method, request.url.path, owner_id)
        raise AuthenticationError("token subject does not exist")

    request.state.user = user
    return user


# PUBLIC_INTERFACE
def check_owner(user: UserEntity, owner_id: Optional[str]) -> bool:
    """Return True when ``owner_id`` names the authenticated user."""
    if owner_id is None:
        return False
    return str(user["id"]) == str(owner_id)


# PUBLIC_INTERFACE
def require_owner(user: UserEntity, owner_id: Optional[str]) -> None:
    """
    Raise AuthorizationError (403) unless ``owner_id`` names the authenticated user.

    Raising stops the calling handler, so no work happens after a failed check.
    """
    if not check_owner(user, owner_id):
        logger.info("Authorization failed: user %s requested resources of %s", user["id"], owner_id)
        raise AuthorizationError()
