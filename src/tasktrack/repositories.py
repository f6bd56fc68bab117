from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import DuplicateEmailError
from .models import TodoEntity, UserEntity
from .settings import Settings

# (field, descending)
SortKey = Tuple[str, bool]

SORTABLE_FIELDS = ("created_at", "title", "completed")


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing one user's todos.

    Results are sorted by ``sort`` first, then ``skip`` and ``limit`` are
    applied to the sorted sequence. Equal sort keys are not tie-broken.
    """
    user_id: str
    skip: int = 0
    limit: int = 10
    search: Optional[str] = None
    sort: Tuple[SortKey, ...] = (("created_at", True),)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Credential store contract."""

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        """Persist a new user. Raise DuplicateEmailError if the email is taken."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[UserEntity]:
        """Return the user registered with ``email``, or None."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Return the user with ``user_id``, or None."""


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """Task store contract. Every read is scoped to an owning user."""

    @abstractmethod
    def create(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        completed: bool = False,
    ) -> TodoEntity:
        """Create and return a new TodoEntity owned by ``user_id``."""

    @abstractmethod
    def get(self, todo_id: str, user_id: str) -> Optional[TodoEntity]:
        """Return the todo if it exists and belongs to ``user_id``, else None."""

    @abstractmethod
    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        """
        Return a page of TodoEntities and the total count matching filters.
        - Always restricted to query.user_id
        - Case-insensitive substring search on title
        - Multi-key sort, then skip, then limit
        """


class InMemoryUserRepository(UserRepository):
    """
    Thread-safe in-memory credential store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, UserEntity] = {}
        self._by_email: Dict[str, str] = {}

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        entity: UserEntity = {
            "id": new_id(),
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "created_at": utcnow(),
        }
        with self._lock:
            if email in self._by_email:
                raise DuplicateEmailError()
            self._items[entity["id"]] = entity
            self._by_email[email] = entity["id"]
        return entity.copy()

    def find_by_email(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._by_email.get(email)
            return None if user_id is None else self._items[user_id].copy()

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            item = self._items.get(user_id)
            return None if item is None else item.copy()


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory task store suitable for testing and default runtime.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}
        self._clock = clock or utcnow

    def create(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        completed: bool = False,
    ) -> TodoEntity:
        entity: TodoEntity = {
            "id": new_id(),
            "title": title,
            "description": description,
            "completed": completed,
            "user_id": user_id,
            "created_at": self._clock(),
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, todo_id: str, user_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            if item is None or item["user_id"] != user_id:
                return None
            return item.copy()

    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        q = query
        with self._lock:
            items: Iterable[TodoEntity] = [
                t for t in self._items.values() if t["user_id"] == q.user_id
            ]

            if q.search:
                s = q.search.lower()
                items = [t for t in items if s in t["title"].lower()]

            items = list(items)
            total = len(items)

            # Stable sorts applied from the least to the most significant key
            for field, descending in reversed(q.sort):
                if field not in SORTABLE_FIELDS:
                    continue
                items.sort(key=lambda t, f=field: t[f], reverse=descending)

            start = max(q.skip, 0)
            end = start + max(q.limit, 0)
            page = items[start:end]

            return [t.copy() for t in page], total


# PUBLIC_INTERFACE
def get_repositories(settings: Settings) -> Tuple[UserRepository, TodoRepository]:
    """
    Factory returning the configured credential and task stores.
    - memory: InMemoryUserRepository / InMemoryTodoRepository
    - sqlite: SQLiteUserRepository / SQLiteTodoRepository sharing one db file
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteTodoRepository, SQLiteUserRepository

        return (
            SQLiteUserRepository(settings.sqlite_db_path),
            SQLiteTodoRepository(settings.sqlite_db_path),
        )
    return InMemoryUserRepository(), InMemoryTodoRepository()
