from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(value: Optional[str], name: str) -> str:
    if value is None:
        raise ValueError(f"{name} is required")
    s = value.strip()
    if not s:
        raise ValueError(f"{name} is required")
    return s


# PUBLIC_INTERFACE
class RegisterRequest(BaseModel):
    """
    Schema for registering a new user.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Ada", "email": "ada@example.com", "password": "s3cret"}
        }
    )

    name: str = Field(..., description="Display name", max_length=100)
    email: str = Field(..., description="Login email; must be unique", max_length=255)
    password: str = Field(..., description="Plaintext password, hashed before storage")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """
        Trim and lower-case so uniqueness is case-insensitive.
        """
        return _require_text(v, "email").lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        # Not stripped: leading/trailing spaces are part of the secret.
        if not v:
            raise ValueError("password is required")
        # bcrypt only digests the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return v


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """
    Schema for logging in. Missing fields fall through to the credential check
    so they fail with the same message as a wrong password.
    """

    email: str = Field(default="", description="Registered email")
    password: str = Field(default="", description="Plaintext password")

    @field_validator("email", "password", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        # Non-string input is treated as a wrong credential, not a schema error
        return v if isinstance(v, str) else ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


# PUBLIC_INTERFACE
class TokenOut(BaseModel):
    token: str = Field(..., description="Signed bearer token, valid for one hour")


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    message: str


# PUBLIC_INTERFACE
class TodoCreatedOut(BaseModel):
    message: str
    id: str = Field(..., description="Identifier of the created todo")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    error: str


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Unknown fields (including any userId/user_id) are ignored; ownership is
    always taken from the authenticated caller.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
            }
        }
    )

    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        if v is not None and not isinstance(v, str):
            raise ValueError("title must be a string")
        s = _require_text(v, "title")
        if len(s) > 200:
            raise ValueError("title length must be between 1 and 200 characters")
        return s


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "6f1c0d8a4b2e4e1f9a7c3b5d2e8f0a1b",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "user_id": "0b9e2c4d6f8a4c1e8d3b5a7f9e1c2d4b",
                "created_at": "2025-01-25T10:15:30.123456+00:00",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    user_id: str = Field(..., description="Identifier of the owning user")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TodoListOut(BaseModel):
    """
    List response: count is the total ignoring skip/limit, todos is the page.
    """

    count: int = Field(..., description="Total number of todos matching the filter")
    todos: List[TodoOut] = Field(..., description="The requested page of todos")


# PUBLIC_INTERFACE
class TodoEnvelope(BaseModel):
    todo: TodoOut
