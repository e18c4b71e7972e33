"""Payloads passed to ServerTable listeners when the query identity changes."""

from dataclasses import dataclass, field

from .dtos import TableOrder


@dataclass
class FilterEventArgs:
    """
    Emitted after the search term or page size changed.

    Attributes:
        search_term: Current search term (None when cleared)
        current_page: Page the table was reset to
        page_size: Current page size
        orders: Current ordering clauses
    """

    search_term: str | None
    current_page: int
    page_size: int
    orders: list[TableOrder] = field(default_factory=list)


@dataclass
class OrderEventArgs:
    """
    Emitted after the ordering changed.

    Attributes:
        column: Column that was ordered (None when all ordering was cleared)
        direction: "asc", "desc", or None when the column's ordering was removed
        orders: Current ordering clauses
    """

    column: str | None
    direction: str | None
    orders: list[TableOrder] = field(default_factory=list)
