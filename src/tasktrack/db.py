from __future__ import annotations

import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Generator, List, Optional, Tuple

from .errors import DuplicateEmailError
from .models import TodoEntity, UserEntity
from .repositories import (
    SORTABLE_FIELDS,
    ListQuery,
    TodoRepository,
    UserRepository,
    new_id,
    utcnow,
)


@dataclass(frozen=True)
class _UserCols:
    table: str = "users"
    id: str = "id"
    name: str = "name"
    email: str = "email"
    password_hash: str = "password_hash"
    created_at: str = "created_at"


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    user_id: str = "user_id"
    created_at: str = "created_at"


_USERS = _UserCols()
_TODOS = _TodoCols()


def _ts(value: datetime) -> str:
    # Fixed-width ISO text so lexical order matches chronological order
    return value.isoformat(timespec="microseconds")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _SQLiteBase(ABC):
    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    @abstractmethod
    def _init_db(self) -> None:
        """Create tables and indexes if they do not exist."""


class SQLiteUserRepository(_SQLiteBase, UserRepository):
    """
    SQLite credential store. Email uniqueness is enforced by a UNIQUE constraint.
    """

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_USERS.table} (
                    {_USERS.id} TEXT PRIMARY KEY,
                    {_USERS.name} TEXT NOT NULL,
                    {_USERS.email} TEXT NOT NULL UNIQUE,
                    {_USERS.password_hash} TEXT NOT NULL,
                    {_USERS.created_at} TEXT NOT NULL
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> UserEntity:
        return {
            "id": str(row[_USERS.id]),
            "name": str(row[_USERS.name]),
            "email": str(row[_USERS.email]),
            "password_hash": str(row[_USERS.password_hash]),
            "created_at": datetime.fromisoformat(row[_USERS.created_at]),
        }

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        entity: UserEntity = {
            "id": new_id(),
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "created_at": utcnow(),
        }
        try:
            with self._conn() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {_USERS.table} ({_USERS.id}, {_USERS.name}, {_USERS.email},
                        {_USERS.password_hash}, {_USERS.created_at})
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (entity["id"], name, email, password_hash, _ts(entity["created_at"])),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError() from exc
        return entity

    def find_by_email(self, email: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_USERS.table} WHERE {_USERS.email} = ?", (email,)
            ).fetchone()
            return self._row_to_entity(row) if row else None

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_USERS.table} WHERE {_USERS.id} = ?", (user_id,)
            ).fetchone()
            return self._row_to_entity(row) if row else None


class SQLiteTodoRepository(_SQLiteBase, TodoRepository):
    """
    SQLite task store. user_id is not a foreign key; dangling owners are kept.
    """

    def __init__(self, db_path: str, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or utcnow
        super().__init__(db_path)

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TODOS.table} (
                    {_TODOS.id} TEXT PRIMARY KEY,
                    {_TODOS.title} TEXT NOT NULL,
                    {_TODOS.description} TEXT NULL,
                    {_TODOS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_TODOS.user_id} TEXT NOT NULL,
                    {_TODOS.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_TODOS.table}_owner_created "
                f"ON {_TODOS.table}({_TODOS.user_id}, {_TODOS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": str(row[_TODOS.id]),
            "title": str(row[_TODOS.title]),
            "description": row[_TODOS.description],
            "completed": bool(row[_TODOS.completed]),
            "user_id": str(row[_TODOS.user_id]),
            "created_at": datetime.fromisoformat(row[_TODOS.created_at]),
        }

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
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_TODOS.table} ({_TODOS.id}, {_TODOS.title}, {_TODOS.description},
                    {_TODOS.completed}, {_TODOS.user_id}, {_TODOS.created_at})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entity["id"],
                    title,
                    description,
                    1 if completed else 0,
                    user_id,
                    _ts(entity["created_at"]),
                ),
            )
        return entity

    def get(self, todo_id: str, user_id: str) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_TODOS.table} WHERE {_TODOS.id} = ? AND {_TODOS.user_id} = ?",
                (todo_id, user_id),
            ).fetchone()
            return self._row_to_entity(row) if row else None

    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        q = query
        clauses = [f"{_TODOS.user_id} = ?"]
        params: list = [q.user_id]

        if q.search:
            # LIKE is case-insensitive for ASCII in SQLite
            clauses.append(f"{_TODOS.title} LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(q.search)}%")

        where_sql = f"WHERE {' AND '.join(clauses)}"

        # Field names come from a whitelist, never from the request verbatim
        order_parts = [
            f"{field} {'DESC' if descending else 'ASC'}"
            for field, descending in q.sort
            if field in SORTABLE_FIELDS
        ]
        order_sql = f"ORDER BY {', '.join(order_parts)}" if order_parts else ""

        limit = max(q.limit, 0)
        offset = max(q.skip, 0)

        with self._conn() as conn:
            count_row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {_TODOS.table} {where_sql}", params
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0

            rows = conn.execute(
                f"""
                SELECT * FROM {_TODOS.table}
                {where_sql}
                {order_sql}
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            ).fetchall()
            return [self._row_to_entity(r) for r in rows], total
