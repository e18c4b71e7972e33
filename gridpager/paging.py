"""
Continuation-token pagination tracking.

Backends such as DynamoDB only hand out opaque "continue from here" tokens, while a
data grid wants page numbers and a page size. ContinuationTokenPaging reconciles the
two: before a request it resolves which token reaches the requested page, and after
the response it records the page's record count and the token for the next page.
"""

from ._logging import logger, redact_token
from .estimator import estimate_from_counts
from .exceptions import InvalidArgumentError
from .stores import CountStore, TokenStore


class ContinuationTokenPaging:
    """
    Tracks continuation tokens and record counts per virtual page.

    One instance belongs to one table. It is not thread-safe on its own: the
    host must pair every resolve_request_token() with its apply_response()
    before resolving again (ServerTable does this under a lock).

    The stored tokens are only meaningful for the query they were issued for,
    so the host must call reset() whenever the search term, ordering or page
    size changes.

    Usage:
        paging = ContinuationTokenPaging()
        token = paging.resolve_request_token(start, page_size, last_token)
        response = fetch(start, page_size, token)
        paging.apply_response(page_size, len(response.data), response.token, token)
        total = paging.estimate_total(page_size)
    """

    def __init__(self) -> None:
        self.tokens = TokenStore()
        self.counts = CountStore()
        self._current_virtual_page = 0
        self._estimated_total_records = 0
        self._explicit_total = 0
        self._has_more_pages = True
        self._last_known_page: int | None = None

    @property
    def current_virtual_page(self) -> int:
        """Zero-based page index of the most recently resolved request."""
        return self._current_virtual_page

    @property
    def has_more_pages(self) -> bool:
        """False once a response arrived without a token for the next page."""
        return self._has_more_pages

    @property
    def last_known_page(self) -> int | None:
        """
        Index of the page that ended the data set, once one has been seen.

        Unlike has_more_pages this survives going back to earlier pages, so the
        total stays exact. It only moves if that page later reports a token.
        """
        return self._last_known_page

    @property
    def estimated_total_records(self) -> int:
        """Running estimate maintained by apply_response()."""
        return self._estimated_total_records

    @property
    def explicit_total(self) -> int:
        """Externally supplied total. When positive it overrides every estimate."""
        return self._explicit_total

    @explicit_total.setter
    def explicit_total(self, value: int) -> None:
        if value < 0:
            raise InvalidArgumentError("explicit_total", value, "non-negative")
        self._explicit_total = value

    def virtual_start(self, page_size: int) -> int:
        """Record offset of the current virtual page."""
        _check_page_size(page_size)
        return self._current_virtual_page * page_size

    # --- NAVIGATION ---

    def resolve_request_token(
        self,
        requested_offset: int,
        page_size: int,
        token_from_previous_response: str | None = None,
    ) -> str | None:
        """
        Resolves the continuation token to send for the page containing requested_offset.

        Args:
            requested_offset: Absolute record offset the host wants to display
            page_size: Number of records per page
            token_from_previous_response: Token returned by the last response, if any

        Returns:
            The token to send, or None to start from the beginning.

        Resolution order:
            1. Page 0 always starts from the beginning.
            2. A token stored for exactly this page.
            3. The token from the previous response (sequential forward paging).
            4. The token of the closest known page (best effort).
        """
        if requested_offset < 0:
            raise InvalidArgumentError("requested_offset", requested_offset, "non-negative")
        _check_page_size(page_size)

        page = requested_offset // page_size
        self._current_virtual_page = page

        if page == 0:
            logger.debug("Resolved first page", extra={"page": 0, "page_size": page_size})
            return None

        direct_token = self.tokens.get(page)
        if direct_token:
            logger.debug(
                "Resolved stored token",
                extra={"page": page, "page_size": page_size, "token_hash": redact_token(direct_token)},
            )
            return direct_token

        if token_from_previous_response:
            logger.debug(
                "Resolved previous response token",
                extra={
                    "page": page,
                    "page_size": page_size,
                    "token_hash": redact_token(token_from_previous_response),
                },
            )
            return token_from_previous_response

        return self.best_token_for_page(page, page_size)

    def best_token_for_page(self, requested_page: int, page_size: int) -> str | None:
        """
        Returns the best known token for reaching requested_page.

        A page that was visited and has no token resolves to None. A page that
        was never visited falls back to the token of the closest stored page,
        which may not land exactly on the requested page.
        """
        if requested_page < 0:
            raise InvalidArgumentError("requested_page", requested_page, "non-negative")
        _check_page_size(page_size)

        direct_token = self.tokens.get(requested_page)
        if direct_token:
            return direct_token

        if requested_page in self.tokens:
            return None

        closest_page = self._find_closest_page(requested_page)
        if closest_page is None:
            logger.debug("No stored tokens, starting from the beginning", extra={"page": requested_page})
            return None

        token = self.tokens.get(closest_page)
        logger.debug(
            "Falling back to closest known page",
            extra={
                "page": requested_page,
                "closest_page": closest_page,
                "token_hash": redact_token(token),
            },
        )
        return token

    def _find_closest_page(self, requested_page: int) -> int | None:
        """Closest stored page by absolute distance. Equal distances prefer the smaller index."""
        pages = self.tokens.pages()
        if not pages:
            return None
        return min(pages, key=lambda page: (abs(page - requested_page), page))

    # --- RESPONSES ---

    def apply_response(
        self,
        page_size: int,
        record_count: int,
        next_token: str | None,
        token_used_for_this_page: str | None = None,
    ) -> None:
        """
        Folds a response for the current virtual page into the tracker.

        Args:
            page_size: Number of records per page
            record_count: Records actually returned for the page
            next_token: Token returned by the backend for the following page
            token_used_for_this_page: Token that was sent to reach this page
        """
        _check_page_size(page_size)

        page = self._current_virtual_page
        # Validates record_count before anything is mutated
        self.counts.set(page, record_count)

        if token_used_for_this_page:
            self.tokens.set(page, token_used_for_this_page)

        if next_token:
            self.tokens.set(page + 1, next_token)
            self._has_more_pages = True
            if self._last_known_page is not None and page >= self._last_known_page:
                # The former last page grew a successor
                self._last_known_page = None
        else:
            self._has_more_pages = False
            self._last_known_page = page

        if self._last_known_page is not None:
            self._estimated_total_records = self.counts.total()
        else:
            self._estimated_total_records = max(
                self._estimated_total_records,
                estimate_from_counts(self.counts, True, page_size),
            )

        logger.debug(
            "Applied response",
            extra={
                "page": page,
                "page_size": page_size,
                "record_count": record_count,
                "has_more": self._has_more_pages,
                "estimated_total": self._estimated_total_records,
                "token_hash": redact_token(next_token),
            },
        )

    def estimate_total(self, page_size: int) -> int:
        """
        Returns the total number of records to present to the user.

        An explicit total wins. Otherwise the estimate never shrinks while
        more pages exist, and becomes the exact sum of the page counts once
        the last page has been seen, even after navigating back from it.
        """
        if self._explicit_total > 0:
            return self._explicit_total

        _check_page_size(page_size)
        if self._last_known_page is not None:
            return self.counts.total()

        estimate = estimate_from_counts(self.counts, self._has_more_pages, page_size)
        return max(estimate, self._estimated_total_records)

    # --- LIFECYCLE ---

    def reset(self) -> None:
        """Forgets all tokens and counts. Required whenever the query changes."""
        self.tokens.clear()
        self.counts.clear()
        self._current_virtual_page = 0
        self._estimated_total_records = 0
        self._explicit_total = 0
        self._has_more_pages = True
        self._last_known_page = None
        logger.debug("Pagination state reset")

    def __repr__(self) -> str:
        return (
            f"ContinuationTokenPaging(page={self._current_virtual_page}, "
            f"has_more={self._has_more_pages}, last_page={self._last_known_page}, "
            f"tokens={self.tokens.pages()}, "
            f"estimated_total={self._estimated_total_records})"
        )


def _check_page_size(page_size: int) -> None:
    if page_size <= 0:
        raise InvalidArgumentError("page_size", page_size, "positive")
