"""
Semantic field types understood by the marshaler and their pydantic renditions.

Every field in a family's field table is tagged with one `SemanticType`. The
tag decides which Python annotation the generated model uses (and therefore
how a raw value is coerced) and how the value is written back into a mapping.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import (
    AfterValidator,
    PlainSerializer,
    PlainValidator,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
)

# Durations as the API writes them: one or more <number><unit> groups.
DURATION_PATTERN = re.compile(r"^(\d+(\.\d+)?(h|m|s))+$")


class SemanticType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING_LIST = "string_list"
    DURATION = "duration"
    DURATION_MAP = "duration_map"
    TIMESTAMP = "timestamp"
    JSON = "json"
    NESTED = "nested"


def validate_duration(value: Any) -> Union[int, str]:
    """
    Accepts a non-negative number of seconds or a duration string such as
    `8760h`, `1h30m` or `90s`. The value is returned unchanged.
    """
    if isinstance(value, bool):
        raise ValueError("a boolean is not a duration")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("a duration cannot be negative")
        return value
    if isinstance(value, str) and (
        value.isdigit() or DURATION_PATTERN.match(value)
    ):
        return value
    raise ValueError(f"'{value}' is not a duration (expected seconds or e.g. '8760h')")


def _normalize_zone(value: datetime) -> datetime:
    # Naive values are UTC; offsets use the stdlib timezone type.
    offset = value.utcoffset()
    return value.replace(tzinfo=timezone(offset) if offset else timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Formats a date-time as RFC 3339, using the `Z` suffix for UTC."""
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


Duration = Annotated[Union[int, str], PlainValidator(validate_duration)]

Timestamp = Annotated[
    datetime,
    AfterValidator(_normalize_zone),
    PlainSerializer(format_timestamp, return_type=str),
]

# Python annotations for every scalar semantic type. NESTED is resolved per
# field because it points at another model.
ANNOTATIONS = {
    SemanticType.STRING: StrictStr,
    SemanticType.INTEGER: StrictInt,
    SemanticType.BOOLEAN: StrictBool,
    SemanticType.STRING_LIST: list[StrictStr],
    SemanticType.DURATION: Duration,
    SemanticType.DURATION_MAP: dict[StrictStr, Duration],
    SemanticType.TIMESTAMP: Timestamp,
    SemanticType.JSON: Any,
}

_TIMESTAMP = TypeAdapter(Timestamp)


def parse_timestamp(value: Any) -> datetime:
    """
    Parses an RFC 3339 date-time with pydantic's parser. Naive values are
    taken to be UTC.

    Raises:
        ValueError: a `pydantic.ValidationError` if `value` is not a date-time.
    """
    return _TIMESTAMP.validate_python(value)
