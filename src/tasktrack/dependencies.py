"""
FastAPI dependencies exposing the components wired by create_app().

Everything lives on ``app.state``; nothing here reads the environment.
"""

from __future__ import annotations

from fastapi import Request

from .passwords import PasswordHasher
from .repositories import TodoRepository, UserRepository
from .tokens import TokenService


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


def get_todo_repository(request: Request) -> TodoRepository:
    return request.app.state.todos


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher
