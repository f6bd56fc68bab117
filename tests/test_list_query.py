import pytest

from tasktrack.errors import ValidationError
from tasktrack.utils import MAX_PAGE_SIZE, MAX_SKIP, build_list_query, list_envelope, parse_int_or_default, parse_sort


class TestParseIntOrDefault:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, 7),
            ("", 7),
            ("   ", 7),
            ("abc", 7),
            ("1.5", 7),
            ("12abc", 7),
            ("3", 3),
            (" 42 ", 42),
            ("-5", -5),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_int_or_default(raw, 7) == expected


class TestParseSort:
    def test_default_is_newest_first(self):
        assert parse_sort(None) == (("created_at", True),)
        assert parse_sort("  ") == (("created_at", True),)

    def test_direction_prefixes(self):
        assert parse_sort("title") == (("title", False),)
        assert parse_sort("+title") == (("title", False),)
        assert parse_sort("-title") == (("title", True),)

    def test_multiple_fields_keep_order(self):
        assert parse_sort("completed -created_at") == (("completed", False), ("created_at", True))
        assert parse_sort("completed,-title") == (("completed", False), ("title", True))

    def test_camel_case_alias(self):
        assert parse_sort("-createdAt") == (("created_at", True),)

    def test_repeated_field_keeps_first(self):
        assert parse_sort("title -title") == (("title", False),)

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_sort("-password_hash")
        assert exc_info.value.message == "Invalid sort field: password_hash"
        assert exc_info.value.status_code == 400


class TestBuildListQuery:
    def test_defaults(self):
        q = build_list_query("u1")
        assert q.user_id == "u1"
        assert q.skip == 0
        assert q.limit == 10
        assert q.search is None
        assert q.sort == (("created_at", True),)

    def test_garbage_pagination_falls_back_to_defaults(self):
        q = build_list_query("u1", skip="many", limit="lots")
        assert (q.skip, q.limit) == (0, 10)

    def test_negative_values_are_clamped_to_zero(self):
        q = build_list_query("u1", skip="-3", limit="-1")
        assert (q.skip, q.limit) == (0, 0)

    def test_skip_is_capped(self):
        q = build_list_query("u1", skip="99999999999999999999")
        assert q.skip == MAX_SKIP

    def test_limit_is_capped(self):
        q = build_list_query("u1", limit=str(MAX_PAGE_SIZE + 500))
        assert q.limit == MAX_PAGE_SIZE

    def test_blank_search_is_ignored(self):
        assert build_list_query("u1", search="   ").search is None
        assert build_list_query("u1", search=" foo ").search == "foo"


def test_list_envelope_materializes_iterables():
    assert list_envelope(iter([1, 2]), 5) == {"count": 5, "todos": [1, 2]}
