import pytest

from conftest import make_clock
from tasktrack.db import SQLiteTodoRepository, SQLiteUserRepository, _SQLiteBase
from tasktrack.errors import DuplicateEmailError
from tasktrack.repositories import (
    InMemoryTodoRepository,
    InMemoryUserRepository,
    ListQuery,
    get_repositories,
)
from tasktrack.settings import Settings


@pytest.fixture(params=["memory", "sqlite"])
def stores(request, tmp_path):
    clock = make_clock()
    if request.param == "sqlite":
        path = str(tmp_path / "db" / "tasktrack.db")
        return SQLiteUserRepository(path), SQLiteTodoRepository(path, clock=clock)
    return InMemoryUserRepository(), InMemoryTodoRepository(clock=clock)


class TestUserStore:
    def test_create_and_find(self, stores):
        users, _ = stores
        created = users.create("A", "a@x.com", "digest")
        assert users.find_by_id(created["id"])["email"] == "a@x.com"
        assert users.find_by_email("a@x.com")["id"] == created["id"]
        assert users.find_by_email("b@x.com") is None
        assert users.find_by_id("missing") is None

    def test_duplicate_email_is_rejected(self, stores):
        users, _ = stores
        users.create("A", "a@x.com", "digest")
        with pytest.raises(DuplicateEmailError):
            users.create("Other", "a@x.com", "digest2")


class TestTodoStore:
    def seed(self, todos, user_id, titles):
        return [todos.create(user_id=user_id, title=t) for t in titles]

    def test_create_defaults(self, stores):
        _, todos = stores
        todo = todos.create(user_id="u1", title="T")
        assert todo["completed"] is False
        assert todo["description"] is None
        assert todo["user_id"] == "u1"
        assert todos.get(todo["id"], "u1")["title"] == "T"

    def test_get_is_owner_scoped(self, stores):
        _, todos = stores
        todo = todos.create(user_id="u1", title="private")
        assert todos.get(todo["id"], "u2") is None
        assert todos.get("does-not-exist", "u1") is None

    def test_list_sorts_before_paginating(self, stores):
        _, todos = stores
        self.seed(todos, "u1", [f"Task {i}" for i in range(15)])
        self.seed(todos, "u2", ["someone else"])

        page, total = todos.list(ListQuery(user_id="u1", skip=10, limit=10))
        assert total == 15
        assert [t["title"] for t in page] == ["Task 4", "Task 3", "Task 2", "Task 1", "Task 0"]

        page, _ = todos.list(ListQuery(user_id="u1", skip=0, limit=3, sort=(("created_at", False),)))
        assert [t["title"] for t in page] == ["Task 0", "Task 1", "Task 2"]

    def test_list_search_is_case_insensitive_substring(self, stores):
        _, todos = stores
        self.seed(todos, "u1", ["Foo", "bar", "FOOD"])
        page, total = todos.list(ListQuery(user_id="u1", search="foo"))
        assert total == 2
        assert sorted(t["title"] for t in page) == ["FOOD", "Foo"]

    def test_list_search_treats_wildcards_literally(self, stores):
        _, todos = stores
        self.seed(todos, "u1", ["100% done", "1000 things", "a_b", "axb"])
        _, total = todos.list(ListQuery(user_id="u1", search="0%"))
        assert total == 1
        page, _ = todos.list(ListQuery(user_id="u1", search="a_b"))
        assert [t["title"] for t in page] == ["a_b"]

    def test_list_multi_key_sort(self, stores):
        _, todos = stores
        todos.create(user_id="u1", title="b", completed=True)
        todos.create(user_id="u1", title="a", completed=False)
        todos.create(user_id="u1", title="c", completed=False)
        page, _ = todos.list(ListQuery(user_id="u1", sort=(("completed", False), ("title", True))))
        assert [t["title"] for t in page] == ["c", "a", "b"]

    def test_zero_limit_returns_empty_page_with_total(self, stores):
        _, todos = stores
        self.seed(todos, "u1", ["x", "y"])
        page, total = todos.list(ListQuery(user_id="u1", limit=0))
        assert page == []
        assert total == 2


def test_factory_selects_backend(tmp_path):
    users, todos = get_repositories(Settings())
    assert isinstance(users, InMemoryUserRepository)
    assert isinstance(todos, InMemoryTodoRepository)

    users, todos = get_repositories(
        Settings(persistence_backend="sqlite", sqlite_db_path=str(tmp_path / "t.db"))
    )
    assert isinstance(users, SQLiteUserRepository)
    assert isinstance(todos, SQLiteTodoRepository)


def test_sqlite_store_must_define_its_schema(tmp_path):
    class NoSchema(_SQLiteBase):
        pass

    with pytest.raises(TypeError):
        NoSchema(str(tmp_path / "x.db"))
