"""
Host-side driver for a server-driven table backed by continuation tokens.

ServerTable turns page numbers, page size, search and ordering into
TableRequests, hands them to a fetch callable, and folds the responses
back into a ContinuationTokenPaging tracker.
"""

import threading
from collections.abc import Callable

from ._logging import logger, redact_token
from .dtos import TableOrder, TableRequest, TableResponse, TableSearch
from .events import FilterEventArgs, OrderEventArgs
from .exceptions import InvalidArgumentError, TableResponseError
from .options import TableOptions
from .paging import ContinuationTokenPaging

Fetch = Callable[[TableRequest], TableResponse]
FilterListener = Callable[[FilterEventArgs], None]
OrderListener = Callable[[OrderEventArgs], None]


class ServerTable:
    """
    Drives one table: builds requests, calls the backend, tracks pagination.

    Every change to the query identity (search term, ordering, page size)
    resets the tracker, because tokens issued for one query cannot be
    replayed against another.

    Search and ordering are forwarded in the request; applying them is up to
    the fetch callable.

    Usage:
        table = ServerTable(InMemoryTableSource(rows), TableOptions(default_page_size=25))
        table.load_page(0)
        table.next_page()
        print(table.current_page, table.total_records, table.has_next)
    """

    def __init__(
        self,
        fetch: Fetch,
        options: TableOptions | None = None,
        paging: ContinuationTokenPaging | None = None,
    ) -> None:
        self.fetch = fetch
        self.options = options or TableOptions()
        self.paging = paging or ContinuationTokenPaging()

        self._page_size = self.options.default_page_size
        self._search_term: str | None = None
        self._orders: list[TableOrder] = []
        self._current_page = 0
        self._draw = 0
        self._last_response: TableResponse | None = None
        self._filter_listeners: list[FilterListener] = []
        self._order_listeners: list[OrderListener] = []

        # Serializes each resolve/apply pair on the tracker
        self._lock = threading.RLock()

    # --- STATE ---

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        """Zero-based page of the last successfully loaded response."""
        return self._current_page

    @property
    def search_term(self) -> str | None:
        return self._search_term

    @property
    def orders(self) -> list[TableOrder]:
        return list(self._orders)

    @property
    def draw(self) -> int:
        """Counter of the last request sent."""
        return self._draw

    @property
    def last_response(self) -> TableResponse | None:
        return self._last_response

    @property
    def total_records(self) -> int:
        """Exact total when known, otherwise the tracker's estimate."""
        return self.paging.estimate_total(self._page_size)

    @property
    def page_count(self) -> int:
        """Number of pages implied by total_records (at least 1)."""
        return max(1, -(-self.total_records // self._page_size))

    @property
    def has_next(self) -> bool:
        return self._last_response is not None and self.paging.has_more_pages

    @property
    def has_previous(self) -> bool:
        return self._current_page > 0

    # --- LISTENERS ---

    def on_filter(self, listener: FilterListener) -> FilterListener:
        """Registers a listener for search term / page size changes. Usable as a decorator."""
        self._filter_listeners.append(listener)
        return listener

    def on_order(self, listener: OrderListener) -> OrderListener:
        """Registers a listener for ordering changes. Usable as a decorator."""
        self._order_listeners.append(listener)
        return listener

    # --- NAVIGATION ---

    def load_page(self, page: int) -> TableResponse | None:
        """
        Fetches the given zero-based page.

        Returns:
            The response, or None if the backend answered a different draw.

        Raises:
            InvalidArgumentError: If page is negative
            TableResponseError: If the backend returned an error message
        """
        if page < 0:
            raise InvalidArgumentError("page", page, "non-negative")

        with self._lock:
            # The previous response's token only reaches the page right after it
            previous_token = None
            if self._last_response is not None and page == self._current_page + 1:
                previous_token = self._last_response.continuation_token

            start = page * self._page_size
            token = self.paging.resolve_request_token(start, self._page_size, previous_token)

            self._draw += 1
            request = TableRequest(
                draw=self._draw,
                start=start,
                length=self._page_size,
                search=TableSearch(value=self._search_term) if self._search_term else None,
                order=list(self._orders) or None,
                continuation_token=token,
            )

            if self.options.debug:
                logger.debug(
                    "Requesting page",
                    extra={
                        "draw": request.draw,
                        "page": page,
                        "page_size": self._page_size,
                        "has_search": self._search_term is not None,
                        "order_count": len(self._orders),
                        "token_hash": redact_token(token),
                    },
                )

            try:
                response = self.fetch(request)
            except Exception:
                self._rewind_tracker()
                raise

            if response.draw != request.draw:
                logger.warning(
                    "Dropping stale table response",
                    extra={"draw": request.draw, "response_draw": response.draw, "page": page},
                )
                self._rewind_tracker()
                return None

            if response.error:
                logger.error(
                    "Table request failed",
                    extra={"draw": request.draw, "page": page, "error": response.error},
                )
                self._rewind_tracker()
                raise TableResponseError(request.draw, response.error)

            self.paging.apply_response(
                self._page_size, response.record_count, response.continuation_token, token
            )
            if response.total_filtered_records > 0:
                self.paging.explicit_total = response.total_filtered_records

            self._current_page = page
            self._last_response = response

            if self.options.debug:
                logger.debug(
                    "Loaded page",
                    extra={
                        "draw": request.draw,
                        "page": page,
                        "count": response.record_count,
                        "has_more": self.paging.has_more_pages,
                        "total": self.total_records,
                    },
                )
            return response

    def first_page(self) -> TableResponse | None:
        return self.load_page(0)

    def next_page(self) -> TableResponse | None:
        """Loads the following page, or returns None when the last page is showing."""
        with self._lock:
            if not self.has_next:
                return None
            return self.load_page(self._current_page + 1)

    def previous_page(self) -> TableResponse | None:
        """Loads the preceding page, or returns None on the first page."""
        with self._lock:
            if not self.has_previous:
                return None
            return self.load_page(self._current_page - 1)

    def reload(self) -> TableResponse | None:
        """Fetches the current page again with the same query."""
        return self.load_page(self._current_page)

    # --- QUERY CHANGES ---

    def search(self, term: str | None) -> TableResponse | None:
        """Applies a new search term and reloads from the first page."""
        with self._lock:
            self._search_term = (term or "").strip() or None
            self._restart()
            self._emit_filter()
            return self.load_page(0)

    def set_page_size(self, page_size: int) -> TableResponse | None:
        """Changes the page size and reloads from the first page."""
        if page_size <= 0:
            raise InvalidArgumentError("page_size", page_size, "positive")

        with self._lock:
            self._page_size = page_size
            self._restart()
            self._emit_filter()
            return self.load_page(0)

    def order_by(self, column: str, direction: str | None) -> TableResponse | None:
        """
        Orders by a single column, replacing any previous ordering.

        Passing direction=None removes ordering on that column.
        """
        with self._lock:
            if direction is None:
                return self._apply_orders(
                    [o for o in self._orders if o.column != column], column, None
                )
            clause = TableOrder(column=column, direction=direction)
            return self._apply_orders([clause], column, clause.direction)

    def set_orders(self, orders: list[TableOrder]) -> TableResponse | None:
        """Replaces the ordering clauses (multi-column ordering) and reloads."""
        with self._lock:
            first = orders[0] if orders else None
            return self._apply_orders(
                list(orders),
                first.column if first else None,
                first.direction if first else None,
            )

    def _apply_orders(
        self, orders: list[TableOrder], column: str | None, direction: str | None
    ) -> TableResponse | None:
        self._orders = orders
        self._restart()
        args = OrderEventArgs(column=column, direction=direction, orders=list(self._orders))
        for listener in self._order_listeners:
            listener(args)
        return self.load_page(0)

    def _rewind_tracker(self) -> None:
        """Points the tracker back at the page still on display after a load did not land."""
        self.paging.resolve_request_token(self._current_page * self._page_size, self._page_size)

    def _restart(self) -> None:
        self.paging.reset()
        self._current_page = 0
        self._last_response = None
        logger.info(
            "Query changed, pagination reset",
            extra={
                "page_size": self._page_size,
                "has_search": self._search_term is not None,
                "order_count": len(self._orders),
            },
        )

    def _emit_filter(self) -> None:
        args = FilterEventArgs(
            search_term=self._search_term,
            current_page=self._current_page,
            page_size=self._page_size,
            orders=list(self._orders),
        )
        for listener in self._filter_listeners:
            listener(args)
