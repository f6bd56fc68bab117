from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import authenticate_request
from ..dependencies import get_todo_repository
from ..errors import NotFoundError
from ..models import UserEntity
from ..repositories import TodoRepository
from ..schemas import ErrorOut, TodoCreate, TodoCreatedOut, TodoEnvelope, TodoListOut, TodoOut
from ..utils import DEFAULT_SORT, build_list_query, list_envelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
    responses={401: {"model": ErrorOut, "description": "Authentication failed"}},
)


# PUBLIC_INTERFACE
def list_todos_for(
    owner_id: str,
    repo: TodoRepository,
    skip: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
) -> TodoListOut:
    """
    Run an owner-scoped list query and build the {count, todos} response.
    """
    query = build_list_query(owner_id, skip=skip, limit=limit, sort=sort, search=search)
    items, total = repo.list(query)
    envelope = list_envelope(items=[TodoOut(**it) for it in items], total=total)
    return TodoListOut(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListOut,
    summary="List Todos",
    description=(
        "List the caller's todos with optional search, sorting and pagination.\n\n"
        "Query parameters:\n"
        "- skip: number of items to skip (default 0; invalid values use the default, negatives become 0)\n"
        "- limit: max number of items to return (default 10, at most 100; 0 returns an empty page "
        "while count still reports the total)\n"
        "- sort: fields among created_at, title, completed; prefix '-' for descending "
        f"(default {DEFAULT_SORT})\n"
        "- search: case-insensitive substring match on title\n\n"
        "count is the total number of matches ignoring skip/limit; todos is the page."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"model": ErrorOut, "description": "Invalid query parameters"},
    },
)
def list_todos(
    skip: Optional[str] = Query(None, description="Number of items to skip"),
    limit: Optional[str] = Query(None, description="Maximum number of items to return"),
    sort: Optional[str] = Query(None, description="Sort specification, e.g. -created_at"),
    search: Optional[str] = Query(None, description="Search text for title"),
    user: UserEntity = Depends(authenticate_request),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoListOut:
    """
    List todos owned by the authenticated user.
    """
    return list_todos_for(user["id"], repo, skip=skip, limit=limit, sort=sort, search=search)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item owned by the authenticated user.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": ErrorOut, "description": "Validation error"},
    },
)
def create_todo(
    payload: TodoCreate,
    user: UserEntity = Depends(authenticate_request),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoCreatedOut:
    """
    Create a new Todo. The owner is always the caller; the body cannot set it.
    """
    created = repo.create(
        user_id=user["id"],
        title=payload.title,
        description=payload.description,
        completed=payload.completed,
    )
    logger.info("Todo %s created for user %s", created["id"], user["id"])
    return TodoCreatedOut(message="Todo created", id=created["id"])


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Get Todo",
    description="Get a single Todo item owned by the caller.",
    responses={
        200: {"description": "Todo found"},
        404: {"model": ErrorOut, "description": "Todo not found"},
    },
)
def get_todo(
    todo_id: str,
    user: UserEntity = Depends(authenticate_request),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoEnvelope:
    """
    Retrieve a single Todo item by its ID. Other users' todos are reported as
    not found.
    """
    item = repo.get(todo_id, user["id"])
    if not item:
        raise NotFoundError("Todo not found")
    return TodoEnvelope(todo=TodoOut(**item))
