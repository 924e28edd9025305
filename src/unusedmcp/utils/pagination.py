"""
Cursor-based pagination for MCP tool responses that carry result lists.

Pages are sized by an estimate of their serialized token count so responses
stay under the client's budget, and cursors are the key of the last item
returned, so identical inputs always page identically.
"""

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, is_dataclass, replace
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class TokenEstimator:
    """Estimates token count for JSON responses."""

    # 1 token is roughly 3.5 characters of JSON, plus a 10% safety margin
    CHARS_PER_TOKEN = 3.5
    SAFETY_MARGIN = 1.1

    @classmethod
    def estimate_tokens(cls, data: Any) -> int:
        """Estimate token count for arbitrary data structures."""
        try:
            json_str = json.dumps(_to_jsonable(data), ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError):
            json_str = str(data)
        return max(1, int(len(json_str) / cls.CHARS_PER_TOKEN * cls.SAFETY_MARGIN))


def _to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _to_jsonable(v) for k, v in obj.items()}
    return obj


@dataclass
class Page(Generic[T]):
    """One page of items plus the standard pagination fields."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page_size: int = 0
    next_cursor: str | None = None
    has_more: bool = False


class CursorPaginator(Generic[T]):
    """
    Cursor-based paginator for lists with token-based sizing.

    Items are ordered by `cursor_key`; a cursor is the key of the last item of
    the previous page. The page end is found by binary search over the
    estimated size of the page.
    """

    def __init__(
        self,
        cursor_key: Callable[[T], str],
        max_tokens: int = 20000,
        min_items_per_page: int = 1,
    ):
        self.cursor_key = cursor_key
        self.max_tokens = max_tokens
        self.min_items_per_page = min_items_per_page
        self.estimator = TokenEstimator()

    def paginate(self, items: list[T], cursor: str | None = None, overhead: Any = None) -> Page[T]:
        """Return the page of `items` that starts after `cursor`.

        Args:
            items: All items
            cursor: Key of the last item already returned (None for first page)
            overhead: Rest of the response, counted against the token budget

        Returns:
            Page of items with pagination fields
        """
        ordered = sorted(items, key=self.cursor_key)
        start = self._find_cursor_position(ordered, cursor)
        if start >= len(ordered):
            return Page(items=[], total=len(ordered))

        end = self._find_optimal_end(ordered, start, overhead)
        page_items = ordered[start:end]
        has_more = end < len(ordered)
        return Page(
            items=page_items,
            total=len(ordered),
            page_size=len(page_items),
            next_cursor=self.cursor_key(ordered[end - 1]) if has_more else None,
            has_more=has_more,
        )

    def _find_cursor_position(self, ordered: list[T], cursor: str | None) -> int:
        if cursor is None:
            return 0
        for i, item in enumerate(ordered):
            if self.cursor_key(item) == cursor:
                return i + 1
        # Unknown cursor: start from the beginning
        return 0

    def _find_optimal_end(self, ordered: list[T], start: int, overhead: Any) -> int:
        low = min(start + self.min_items_per_page, len(ordered))
        high = len(ordered)
        while low < high:
            mid = (low + high + 1) // 2
            estimated = self.estimator.estimate_tokens({"items": ordered[start:mid], "rest": overhead})
            if estimated <= self.max_tokens:
                low = mid
            else:
                high = mid - 1
        return max(low, start + 1)


def paginate_response(
    response: Any,
    items_field: str,
    cursor_key: Callable[[Any], str],
    cursor: str | None = None,
    max_tokens: int = 20000,
) -> Any:
    """Apply cursor pagination to a dataclass response holding a list field.

    The response keeps its type; the list field is replaced by the page and
    the standard fields `total`, `page_size`, `next_cursor` and `has_more`
    are filled in.
    """
    items = getattr(response, items_field)
    overhead = replace(response, **{items_field: []})
    page = CursorPaginator(cursor_key=cursor_key, max_tokens=max_tokens).paginate(items, cursor, overhead)
    return replace(
        response,
        **{items_field: page.items},
        total=page.total,
        page_size=page.page_size,
        next_cursor=page.next_cursor,
        has_more=page.has_more,
    )
