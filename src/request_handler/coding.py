"""
JSON decoding and encoding with configurable date and key strategies.

Bodies are parsed with the stdlib `json` module, keys are rewritten according
to the key strategy, and the result is validated into the target type with a
pydantic `TypeAdapter`. The date strategy travels as validation/serialization
context and is honoured by fields typed `WireDatetime`.
"""

import json
import re
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, Callable, Optional, TypeVar

from pydantic import BeforeValidator, PlainSerializer, SerializationInfo, TypeAdapter, ValidationInfo
from pydantic.alias_generators import to_snake

T = TypeVar("T")

DATE_STRATEGY_CONTEXT_KEY = "date_strategy"

# Internet date-time: full date and time with a `Z` or numeric offset.
_ISO8601_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})")


class KeyDecodingStrategy(str, Enum):
    USE_DEFAULT_KEYS = "use_default_keys"
    CONVERT_FROM_SNAKE_CASE = "convert_from_snake_case"
    CONVERT_FROM_CAMEL_CASE = "convert_from_camel_case"


class KeyEncodingStrategy(str, Enum):
    USE_DEFAULT_KEYS = "use_default_keys"
    CONVERT_TO_SNAKE_CASE = "convert_to_snake_case"
    CONVERT_TO_CAMEL_CASE = "convert_to_camel_case"


class DateDecodingStrategy(str, Enum):
    DEFERRED = "deferred"
    ISO8601 = "iso8601"
    SECONDS_SINCE_1970 = "seconds_since_1970"
    MILLISECONDS_SINCE_1970 = "milliseconds_since_1970"


class DateEncodingStrategy(str, Enum):
    ISO8601 = "iso8601"
    SECONDS_SINCE_1970 = "seconds_since_1970"
    MILLISECONDS_SINCE_1970 = "milliseconds_since_1970"


def snake_to_camel(key: str) -> str:
    """`user_name` -> `userName`.

    Leading and trailing underscores are kept, the first word keeps its case
    and later words get a leading capital. Keys without an inner underscore
    are left alone.
    """
    core = key.strip("_")
    if "_" not in core:
        return key
    leading = len(key) - len(key.lstrip("_"))
    words = [word for word in core.split("_") if word]
    camel = words[0] + "".join(word[:1].upper() + word[1:].lower() for word in words[1:])
    return key[:leading] + camel + key[leading + len(core):]


def camel_to_snake(key: str) -> str:
    """`userName` -> `user_name`."""
    return to_snake(key)


def transform_keys(obj: Any, convert: Callable[[str], str]) -> Any:
    """Apply `convert` to every object key, recursively."""
    if isinstance(obj, dict):
        return {
            (convert(k) if isinstance(k, str) else k): transform_keys(v, convert)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [transform_keys(v, convert) for v in obj]
    return obj


def _decode_wire_datetime(value: Any, info: ValidationInfo) -> Any:
    strategy = (info.context or {}).get(DATE_STRATEGY_CONTEXT_KEY, DateDecodingStrategy.DEFERRED)
    if isinstance(value, datetime) or strategy == DateDecodingStrategy.DEFERRED:
        return value

    if strategy == DateDecodingStrategy.ISO8601:
        if not isinstance(value, str) or not _ISO8601_DATETIME.fullmatch(value):
            raise ValueError("Expected date string to be ISO8601-formatted.")
        return value

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number for date strategy {strategy.value}.")
    seconds = value / 1000 if strategy == DateDecodingStrategy.MILLISECONDS_SINCE_1970 else value
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Date value out of range: {value}") from e


def _encode_wire_datetime(value: datetime, info: SerializationInfo) -> Any:
    strategy = (info.context or {}).get(DATE_STRATEGY_CONTEXT_KEY, DateEncodingStrategy.ISO8601)
    if strategy == DateEncodingStrategy.SECONDS_SINCE_1970:
        return value.timestamp()
    if strategy == DateEncodingStrategy.MILLISECONDS_SINCE_1970:
        return value.timestamp() * 1000
    return value.isoformat()


# A datetime whose wire representation follows the active date strategy.
WireDatetime = Annotated[
    datetime,
    BeforeValidator(_decode_wire_datetime),
    PlainSerializer(_encode_wire_datetime, when_used="json"),
]


@lru_cache(maxsize=256)
def _cached_adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def type_adapter(type_: Any) -> TypeAdapter:
    try:
        return _cached_adapter(type_)
    except TypeError:
        # unhashable type expressions
        return TypeAdapter(type_)


def type_name(type_: Any) -> str:
    """Readable name for a type expression, e.g. `User` or `list[User]`."""
    if isinstance(type_, type) and not getattr(type_, "__args__", None):
        return type_.__qualname__
    return repr(type_).replace("typing.", "")


class JSONDecoder:
    """Decodes JSON bytes into a type.

    Both strategies are plain attributes and may be changed after construction.
    """

    def __init__(
        self,
        date_strategy: DateDecodingStrategy = DateDecodingStrategy.DEFERRED,
        key_strategy: KeyDecodingStrategy = KeyDecodingStrategy.USE_DEFAULT_KEYS,
    ):
        self.date_strategy = date_strategy
        self.key_strategy = key_strategy

    def _convert_keys(self, obj: Any) -> Any:
        if self.key_strategy == KeyDecodingStrategy.CONVERT_FROM_SNAKE_CASE:
            return transform_keys(obj, snake_to_camel)
        if self.key_strategy == KeyDecodingStrategy.CONVERT_FROM_CAMEL_CASE:
            return transform_keys(obj, camel_to_snake)
        return obj

    def decode(self, type_: type[T], data: bytes) -> T:
        """Decode `data` as `type_`.

        Raises `ValueError` (json.JSONDecodeError, UnicodeDecodeError or
        pydantic.ValidationError) when the bytes do not fit the type.
        """
        raw = json.loads(data)
        return type_adapter(type_).validate_python(
            self._convert_keys(raw),
            context={DATE_STRATEGY_CONTEXT_KEY: self.date_strategy},
        )

    def __repr__(self) -> str:
        return f"JSONDecoder(date_strategy={self.date_strategy.value!r}, key_strategy={self.key_strategy.value!r})"


class JSONEncoder:
    """Encodes values to compact JSON bytes. `None` values are omitted."""

    def __init__(
        self,
        date_strategy: DateEncodingStrategy = DateEncodingStrategy.ISO8601,
        key_strategy: KeyEncodingStrategy = KeyEncodingStrategy.USE_DEFAULT_KEYS,
    ):
        self.date_strategy = date_strategy
        self.key_strategy = key_strategy

    def _convert_keys(self, obj: Any) -> Any:
        if self.key_strategy == KeyEncodingStrategy.CONVERT_TO_SNAKE_CASE:
            return transform_keys(obj, camel_to_snake)
        if self.key_strategy == KeyEncodingStrategy.CONVERT_TO_CAMEL_CASE:
            return transform_keys(obj, snake_to_camel)
        return obj

    def encode(self, value: Any, type_: Optional[Any] = None) -> bytes:
        adapter = type_adapter(type_ if type_ is not None else type(value))
        obj = adapter.dump_python(
            value,
            mode="json",
            exclude_none=True,
            context={DATE_STRATEGY_CONTEXT_KEY: self.date_strategy},
        )
        return json.dumps(self._convert_keys(obj), separators=(",", ":")).encode("utf-8")
