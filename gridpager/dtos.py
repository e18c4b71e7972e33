"""
Request/response shapes exchanged between a server-driven table and its backend.

Field names serialize to the camelCase JSON the table's transport speaks
(``draw``, ``start``, ``length``, ``search``, ``order``, ``continuationToken``...).
Use ``model_dump(by_alias=True)`` to produce the wire form and
``model_validate`` to parse it.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TableSearch(_WireModel):
    """Search parameters of a table request."""

    value: str | None = None
    regex: bool = False
    case_insensitive: bool = True


class TableOrder(_WireModel):
    """A single ordering clause: column name plus direction."""

    column: str | None = None
    direction: Literal["asc", "desc"] | None = None

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class TableRequest(_WireModel):
    """A request for one page of server-side table data."""

    draw: int = 0
    start: int = Field(default=0, ge=0)
    length: int = Field(default=10, gt=0)
    search: TableSearch | None = None
    order: list[TableOrder] | None = None
    continuation_token: str | None = None

    @property
    def search_value(self) -> str | None:
        return self.search.value if self.search else None


class TableResponse(_WireModel):
    """
    A page of server-side table data.

    Attributes:
        draw: Echo of the request's draw counter
        total_records: Total records before filtering (0 when unknown)
        total_filtered_records: Total records after filtering (0 when unknown)
        data: Rows for this page
        error: Optional error message to display instead of data
        continuation_token: Token to send for the next page (None on the last page)
    """

    draw: int = 0
    total_records: int = Field(default=0, ge=0)
    total_filtered_records: int = Field(default=0, ge=0)
    data: list[Any] | None = None
    error: str | None = None
    continuation_token: str | None = None

    @property
    def record_count(self) -> int:
        """Number of rows returned in this page."""
        return len(self.data) if self.data else 0

    @property
    def has_more(self) -> bool:
        """Returns True if the backend issued a token for another page."""
        return bool(self.continuation_token)

    @classmethod
    def success(
        cls,
        draw: int,
        total_records: int,
        total_filtered_records: int,
        data: list[Any],
        continuation_token: str | None = None,
    ) -> "TableResponse":
        """Creates a response carrying a page of data."""
        return cls(
            draw=draw,
            total_records=total_records,
            total_filtered_records=total_filtered_records,
            data=data,
            continuation_token=continuation_token,
        )

    @classmethod
    def fail(cls, draw: int, error_message: str) -> "TableResponse":
        """Creates a response carrying only an error message."""
        return cls(draw=draw, error=error_message)
