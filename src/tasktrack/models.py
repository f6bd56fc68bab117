from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A registered user as held by the credential store.

    Fields:
    - id: Opaque string identifier (uuid4 hex)
    - name: Display name
    - email: Unique, stored lower-cased
    - password_hash: bcrypt digest; never leaves the server
    - created_at: UTC registration timestamp
    """

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item for non-ORM storage
    backends.

    Fields:
    - id: Opaque string identifier (uuid4 hex)
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - user_id: Identifier of the owning user; set once at creation
    - created_at: UTC creation timestamp
    """

    id: str
    title: str
    description: Optional[str]
    completed: bool
    user_id: str
    created_at: datetime
