"""
Data sources that answer table requests with continuation tokens.

A source is any callable taking a TableRequest and returning a TableResponse,
so ServerTable can drive it directly or through the host's own transport.
Sources only page: searching and ordering are left to the backend's query.
"""

from collections.abc import Sequence
from typing import Any

import boto3

from ._logging import logger, redact_token
from .dtos import TableRequest, TableResponse
from .exceptions import TokenDecodeError, handle_dynamo_errors
from .serializer import DynamoSerializer, decode_token, encode_token


class DynamoTableSource:
    """
    Serves table pages from a DynamoDB Scan.

    Each request becomes a single Scan call with ``Limit=request.length``; the
    continuation token carries the previous page's LastEvaluatedKey. DynamoDB
    never reports a total, so totals are 0 and the table estimates instead.

    Usage:
        source = DynamoTableSource("employees")
        table = ServerTable(source)
        table.load_page(0)
    """

    def __init__(
        self,
        table_name: str,
        client: Any | None = None,
        index_name: str | None = None,
        region: str | None = None,
    ) -> None:
        self.table_name = table_name
        self.index_name = index_name
        self.region = region
        self.serializer = DynamoSerializer()
        self._client = client

    @property
    def client(self) -> Any:
        """Returns the injected client, creating a default boto3 client on first use."""
        if self._client is None:
            if self.region:
                self._client = boto3.client("dynamodb", region_name=self.region)
            else:
                self._client = boto3.client("dynamodb")
        return self._client

    def __call__(self, request: TableRequest) -> TableResponse:
        kwargs: dict[str, Any] = {"TableName": self.table_name, "Limit": request.length}
        if self.index_name:
            kwargs["IndexName"] = self.index_name
        if request.continuation_token:
            kwargs["ExclusiveStartKey"] = self.serializer.token_to_cursor(request.continuation_token)

        logger.info(
            "Executing scan page",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "draw": request.draw,
                "limit": request.length,
                "token_hash": redact_token(request.continuation_token),
            },
        )

        with handle_dynamo_errors(table_name=self.table_name):
            response = self.client.scan(**kwargs)

        items = [self.serializer.from_dynamo(item) for item in response.get("Items", [])]

        raw_key = response.get("LastEvaluatedKey")
        token = self.serializer.cursor_to_token(raw_key) if raw_key else None

        logger.debug(
            "Scan page returned",
            extra={"table": self.table_name, "count": len(items), "has_more": token is not None},
        )
        return TableResponse.success(request.draw, 0, 0, items, continuation_token=token)


class InMemoryTableSource:
    """
    Serves table pages from an in-memory list of rows.

    Tokens encode the offset of the next page, mimicking a backend that only
    exposes cursors. Without a token the request's ``start`` is honoured.
    Totals are exact. Search and ordering in the request are ignored.
    """

    def __init__(self, rows: Sequence[Any]) -> None:
        self.rows = list(rows)

    def __call__(self, request: TableRequest) -> TableResponse:
        offset = request.start
        if request.continuation_token:
            cursor = decode_token(request.continuation_token)
            offset = cursor.get("offset")
            if not isinstance(offset, int) or offset < 0:
                raise TokenDecodeError(request.continuation_token)

        page = self.rows[offset : offset + request.length]
        next_offset = offset + len(page)
        token = encode_token({"offset": next_offset}) if next_offset < len(self.rows) else None

        logger.debug(
            "Serving in-memory page",
            extra={"draw": request.draw, "offset": offset, "count": len(page)},
        )
        total = len(self.rows)
        return TableResponse.success(request.draw, total, total, page, continuation_token=token)
