from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import ValidationError
from .repositories import ListQuery, SortKey

DEFAULT_SKIP = 0
DEFAULT_LIMIT = 10
MAX_PAGE_SIZE = 100
# Largest OFFSET a SQLite INTEGER can hold
MAX_SKIP = 2**63 - 1
DEFAULT_SORT = "-created_at"

# Accepted spellings (lower-cased) -> stored field name
_SORT_ALIASES = {
    "created_at": "created_at",
    "createdat": "created_at",
    "title": "title",
    "completed": "completed",
}


# PUBLIC_INTERFACE
def parse_int_or_default(raw: Optional[str], default: int) -> int:
    """
    Parse ``raw`` as a base-10 integer, returning ``default`` when it is
    absent, blank or not an integer. Never raises.
    """
    if raw is None:
        return default
    s = raw.strip()
    if not s:
        return default
    try:
        return int(s)
    except ValueError:
        return default


# PUBLIC_INTERFACE
def parse_sort(spec: Optional[str]) -> Tuple[SortKey, ...]:
    """
    Parse a sort specification such as ``"-created_at"`` or ``"completed, -title"``.

    Fields are separated by whitespace or commas; a leading '-' sorts
    descending and an optional '+' ascending. Repeated fields keep their first
    direction. Raises ValidationError for unknown fields.
    """
    text = (spec or "").strip() or DEFAULT_SORT
    keys: List[SortKey] = []
    seen = set()
    for token in re.split(r"[\s,]+", text):
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("+-").lower()
        field = _SORT_ALIASES.get(name)
        if field is None:
            raise ValidationError(f"Invalid sort field: {token.lstrip('+-')}")
        if field in seen:
            continue
        seen.add(field)
        keys.append((field, descending))
    if not keys:
        return parse_sort(DEFAULT_SORT)
    return tuple(keys)


# PUBLIC_INTERFACE
def build_list_query(
    user_id: str,
    skip: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
) -> ListQuery:
    """
    Turn raw query-string values into a ListQuery.

    Unparseable skip/limit fall back to their defaults; negative values are
    clamped to 0, skip is capped at MAX_SKIP and limit at MAX_PAGE_SIZE.
    """
    skip_n = min(max(parse_int_or_default(skip, DEFAULT_SKIP), 0), MAX_SKIP)
    limit_n = min(max(parse_int_or_default(limit, DEFAULT_LIMIT), 0), MAX_PAGE_SIZE)
    term = search.strip() if search else ""
    return ListQuery(
        user_id=user_id,
        skip=skip_n,
        limit=limit_n,
        search=term or None,
        sort=parse_sort(sort),
    )


# PUBLIC_INTERFACE
def list_envelope(
    items: Union[Sequence[Any], Iterable[Any]],
    total: int,
) -> Dict[str, Any]:
    """
    Build the list response body.

    Args:
        items: The list/iterable of items for the current page.
        total: Total number of items that match the query (ignoring pagination).

    Returns:
        Dict with keys: count, todos.
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {"count": int(total), "todos": materialized}
