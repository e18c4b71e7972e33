from .dtos import TableOrder, TableRequest, TableResponse, TableSearch
from .estimator import estimate_from_counts
from .events import FilterEventArgs, OrderEventArgs
from .exceptions import (
    DataSourceError,
    GridPagerError,
    InvalidArgumentError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    SerializationError,
    TableNotFoundError,
    TableResponseError,
    TokenDecodeError,
    ValidationError,
)
from .options import TableOptions
from .paging import ContinuationTokenPaging
from .serializer import decode_token, encode_token
from .sources import DynamoTableSource, InMemoryTableSource
from .stores import CountStore, TokenStore
from .table import ServerTable

__all__ = [
    "ContinuationTokenPaging",
    "TokenStore",
    "CountStore",
    "estimate_from_counts",
    "ServerTable",
    "TableOptions",
    # Wire DTOs
    "TableRequest",
    "TableResponse",
    "TableSearch",
    "TableOrder",
    # Events
    "FilterEventArgs",
    "OrderEventArgs",
    # Sources
    "DynamoTableSource",
    "InMemoryTableSource",
    "encode_token",
    "decode_token",
    # Exceptions
    "GridPagerError",
    "InvalidArgumentError",
    "TokenDecodeError",
    "SerializationError",
    "TableResponseError",
    "DataSourceError",
    "TableNotFoundError",
    "ProvisionedThroughputExceededError",
    "RequestTimeoutError",
    "ValidationError",
]
