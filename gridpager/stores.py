"""
Per-page bookkeeping for continuation-token pagination.

TokenStore remembers which token reaches a virtual page, CountStore remembers
how many records a page actually returned. Both are keyed by zero-based page
index and owned by a single ContinuationTokenPaging instance.
"""

from collections.abc import Iterator

from .exceptions import InvalidArgumentError


def _check_page(page: int) -> None:
    if page < 0:
        raise InvalidArgumentError("page", page, "non-negative")


class TokenStore:
    """
    Maps page index -> continuation token.

    A page stored with ``None`` (or an empty string) is a *visited* page with
    no token, which is different from a page that was never stored. ``get``
    returns ``None`` for both, use ``in`` to tell them apart.
    """

    def __init__(self) -> None:
        self._tokens: dict[int, str | None] = {}

    def get(self, page: int) -> str | None:
        _check_page(page)
        return self._tokens.get(page) or None

    def set(self, page: int, token: str | None) -> None:
        _check_page(page)
        self._tokens[page] = token or None

    def pages(self) -> list[int]:
        """Returns the stored page indices in ascending order."""
        return sorted(self._tokens)

    def clear(self) -> None:
        self._tokens.clear()

    def __contains__(self, page: object) -> bool:
        return page in self._tokens

    def __iter__(self) -> Iterator[int]:
        return iter(self.pages())

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"TokenStore(pages={self.pages()})"


class CountStore:
    """Maps page index -> number of records observed for that page."""

    def __init__(self) -> None:
        self._counts: dict[int, int] = {}

    def get(self, page: int) -> int:
        _check_page(page)
        return self._counts.get(page, 0)

    def set(self, page: int, count: int) -> None:
        _check_page(page)
        if count < 0:
            raise InvalidArgumentError("record_count", count, "non-negative")
        self._counts[page] = count

    def total(self) -> int:
        """Sum of all recorded counts."""
        return sum(self._counts.values())

    def max_page(self) -> int | None:
        """Highest page index with a recorded count, or None if nothing was fetched."""
        return max(self._counts) if self._counts else None

    def clear(self) -> None:
        self._counts.clear()

    def __contains__(self, page: object) -> bool:
        return page in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"CountStore({dict(sorted(self._counts.items()))})"
