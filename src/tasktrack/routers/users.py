from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import authenticate_request, require_owner
from ..dependencies import (
    get_password_hasher,
    get_todo_repository,
    get_token_service,
    get_user_repository,
)
from ..errors import InvalidCredentials
from ..models import UserEntity
from ..passwords import PasswordHasher
from ..repositories import TodoRepository, UserRepository
from ..schemas import ErrorOut, LoginRequest, MessageOut, RegisterRequest, TodoListOut, TokenOut
from ..tokens import TokenService
from .todos import list_todos_for

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account. Emails are unique and compared case-insensitively.",
    responses={
        201: {"description": "User created"},
        400: {"model": ErrorOut, "description": "Missing fields or email already registered"},
    },
)
def register(
    payload: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> MessageOut:
    """Register a new user."""
    user = users.create(
        name=payload.name,
        email=payload.email,
        password_hash=hasher.hash(payload.password),
    )
    logger.info("Registered user %s (%s)", user["email"], user["id"])
    return MessageOut(message="User created")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenOut,
    summary="Login",
    description="Exchange email and password for a bearer token valid for one hour.",
    responses={
        200: {"description": "Token issued"},
        400: {"model": ErrorOut, "description": "Invalid email or password"},
    },
)
def login(
    payload: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> TokenOut:
    """Login with email + password."""
    user = users.find_by_email(payload.email) if payload.email else None
    if user is None or not hasher.verify(payload.password, user["password_hash"]):
        logger.info("Login failed for %s", payload.email or "<no email>")
        raise InvalidCredentials()

    logger.info("Login: %s (%s)", user["email"], user["id"])
    return TokenOut(token=tokens.issue(user["id"]))


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}/todos",
    response_model=TodoListOut,
    tags=["todos"],
    summary="List a User's Todos",
    description=(
        "List the todos of the user named in the path. Only that user may call it; "
        "query parameters are the same as GET /api/todos."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"model": ErrorOut, "description": "Invalid query parameters"},
        401: {"model": ErrorOut, "description": "Authentication failed"},
        403: {"model": ErrorOut, "description": "Authorization failed"},
    },
)
def list_user_todos(
    user_id: str,
    skip: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: UserEntity = Depends(authenticate_request),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoListOut:
    require_owner(user, user_id)
    return list_todos_for(user["id"], repo, skip=skip, limit=limit, sort=sort, search=search)
