import base64
import binascii
import json
from decimal import Decimal
from typing import Any, cast

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from .exceptions import SerializationError, TokenDecodeError

# Attribute types DynamoDB allows in a primary key
_KEY_TYPES = ("S", "N", "B")


def encode_token(cursor: dict[str, Any]) -> str:
    """
    Packs a plain cursor dict into an opaque, URL-safe continuation token.

    Input:  {"pk": "value", "sk": 123}
    Output: "eyJwayI6InZhbHVlIiwic2siOjEyM30"
    """
    try:
        payload = json.dumps(cursor, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Failed to encode cursor into a token. cursor={cursor!r} error={e!s}", original_error=e
        ) from e
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_token(token: str) -> dict[str, Any]:
    """Reverses encode_token(). Raises TokenDecodeError for anything it did not produce."""
    padded = token + "=" * (-len(token) % 4)
    try:
        cursor = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise TokenDecodeError(token, original_error=e) from e
    if not isinstance(cursor, dict):
        raise TokenDecodeError(token)
    return cursor


class DynamoSerializer:
    """
    Converts between DynamoDB Low-Level format and plain Python values.

    Architectural Note:
    -------------------
    DynamoDB requires numbers to be passed as 'Decimal' to avoid precision loss,
    and returns them as 'Decimal'. Table rows are JSON, so this class converts
    floats to Decimal on the way in and Decimal back to int/float on the way out.

    Continuation tokens are different: they carry the LastEvaluatedKey untouched
    in Low-Level format, so a key never passes through float.
    """

    def __init__(self) -> None:
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def to_dynamo(self, data: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """Converts a standard Python dict to DynamoDB JSON format ({"S": "...", "N": "..."})."""
        result = {}
        for k, v in data.items():
            try:
                result[k] = cast(dict[str, Any], self._serializer.serialize(self._prepare_for_dynamo(v)))
            except TypeError as e:
                raise SerializationError(
                    f"Failed to serialize field '{k}'. value={v!r} error={e!s}", original_error=e
                ) from e
        return result

    def from_dynamo(self, item: dict[str, Any]) -> dict[str, Any]:
        """Converts DynamoDB JSON format back to standard Python dict."""
        python_data = {k: self._deserializer.deserialize(v) for k, v in item.items()}
        result = self._restore_to_python(python_data)
        assert isinstance(result, dict)
        return result

    def cursor_to_token(self, last_evaluated_key: dict[str, Any]) -> str:
        """
        Converts a DynamoDB LastEvaluatedKey into an opaque continuation token.

        The key stays in Low-Level format so it resumes exactly where DynamoDB
        stopped: numbers keep all their digits, binaries travel as base64.

        Input:  {"pk": {"S": "value"}, "sk": {"N": "1697040000.123456789"}}
        Output: encode_token({"pk": {"S": "value"}, "sk": {"N": "1697040000.123456789"}})
        """
        cursor: dict[str, dict[str, str]] = {}
        for name, attribute in last_evaluated_key.items():
            if len(attribute) != 1 or next(iter(attribute)) not in _KEY_TYPES:
                raise SerializationError(f"Unsupported key attribute '{name}': {attribute!r}")
            type_code, raw = next(iter(attribute.items()))
            if type_code == "B":
                raw = base64.b64encode(bytes(raw)).decode("ascii")
            cursor[name] = {type_code: raw}
        return encode_token(cursor)

    def token_to_cursor(self, token: str) -> dict[str, Any]:
        """
        Converts a continuation token back into an ExclusiveStartKey.

        Input:  encode_token({"pk": {"S": "value"}, "id": {"B": "AQI="}})
        Output: {"pk": {"S": "value"}, "id": {"B": b"\\x01\\x02"}}
        """
        start_key: dict[str, Any] = {}
        for name, attribute in decode_token(token).items():
            if not isinstance(attribute, dict) or len(attribute) != 1:
                raise TokenDecodeError(token)
            type_code, raw = next(iter(attribute.items()))
            if type_code not in _KEY_TYPES or not isinstance(raw, str):
                raise TokenDecodeError(token)
            if type_code == "B":
                try:
                    raw = base64.b64decode(raw.encode("ascii"), validate=True)
                except (binascii.Error, UnicodeError) as e:
                    raise TokenDecodeError(token, original_error=e) from e
            start_key[name] = {type_code: raw}
        return start_key

    def _prepare_for_dynamo(self, value: Any) -> Any:
        """Recursively converts float -> Decimal (boto3 requirement)."""
        if isinstance(value, float):
            # Convert to string first to avoid float precision artifacts during Decimal creation
            return Decimal(str(value))
        if isinstance(value, list):
            return [self._prepare_for_dynamo(v) for v in value]
        if isinstance(value, dict):
            return {k: self._prepare_for_dynamo(v) for k, v in value.items()}
        return value

    def _restore_to_python(self, value: Any) -> Any:
        """
        Recursively restores DynamoDB values to JSON-friendly types.

        Converts:
        - Decimal -> int (if whole number) or float
        - set -> sorted list
        """
        if isinstance(value, Decimal):
            if value % 1 == 0:
                return int(value)
            return float(value)
        if isinstance(value, (set, frozenset)):
            return sorted(self._restore_to_python(v) for v in value)
        if isinstance(value, list):
            return [self._restore_to_python(v) for v in value]
        if isinstance(value, dict):
            return {k: self._restore_to_python(v) for k, v in value.items()}
        return value
