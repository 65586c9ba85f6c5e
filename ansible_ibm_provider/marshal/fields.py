"""
Declarative field tables.

A field table is the single description of a remote API shape: an ordered list
of `FieldSpec` entries. `build_model` turns a table into a frozen pydantic
model so that decoded objects are typed and immutable, and `field_table`
returns the table a model was built from. The generic copier in
`marshal.family` only ever walks these tables, so a field cannot be declared
without also being copied in both directions.
"""

import keyword
from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, create_model

from ansible_ibm_provider.marshal.types import ANNOTATIONS, SemanticType


class ApiModel(BaseModel):
    """Base class of every generated descriptor model."""

    model_config = ConfigDict(extra="forbid", frozen=True)


@dataclass(frozen=True)
class FieldSpec:
    """One row of a field table."""

    name: str
    semantic_type: SemanticType = SemanticType.STRING
    required: bool = False
    nested: type[ApiModel] | None = None
    description: str | None = None

    @property
    def attr(self) -> str:
        """The model attribute name; keywords such as `global` get a trailing underscore."""
        return f"{self.name}_" if keyword.iskeyword(self.name) else self.name

    def annotation(self):
        if self.semantic_type is SemanticType.NESTED:
            if self.nested is None:
                raise ValueError(f"Nested field '{self.name}' has no model.")
            return self.nested
        return ANNOTATIONS[self.semantic_type]


def string(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.STRING, required, description=description)


def integer(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.INTEGER, required, description=description)


def boolean(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.BOOLEAN, required, description=description)


def string_list(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.STRING_LIST, required, description=description)


def duration(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.DURATION, required, description=description)


def timestamp(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.TIMESTAMP, required, description=description)


def json_value(name: str, required: bool = False, description: str | None = None):
    return FieldSpec(name, SemanticType.JSON, required, description=description)


def nested(
    name: str,
    model: type[ApiModel],
    required: bool = False,
    description: str | None = None,
):
    return FieldSpec(name, SemanticType.NESTED, required, model, description)


_FIELD_TABLES: dict[type, tuple[FieldSpec, ...]] = {}


def build_model(name: str, fields: Sequence[FieldSpec]) -> type[ApiModel]:
    """
    Creates a frozen model class from a field table.

    Every attribute is optional on the model itself: `required` describes what
    a request must carry, while a decoded response may legitimately omit it.
    Unset attributes stay `None`, which is how absence is told apart from a
    zero value.
    """
    names = [spec.name for spec in fields]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        raise ValueError(f"Model '{name}' declares fields twice: {sorted(duplicates)}")

    definitions = {
        spec.attr: (Optional[spec.annotation()], None) for spec in fields
    }
    model = create_model(name, __base__=ApiModel, **definitions)
    _FIELD_TABLES[model] = tuple(fields)
    return model


def field_table(model: type[ApiModel]) -> tuple[FieldSpec, ...]:
    """Returns the field table a model was built from."""
    try:
        return _FIELD_TABLES[model]
    except KeyError:
        raise TypeError(f"{model!r} was not built from a field table") from None


def required_fields(model: type[ApiModel]) -> list[str]:
    return [spec.name for spec in field_table(model) if spec.required]


def missing_fields(record: ApiModel, exclude=()) -> list[str]:
    """Names of the required fields that are unset on a record."""
    return [
        spec.name
        for spec in field_table(type(record))
        if spec.required
        and spec.name not in exclude
        and getattr(record, spec.attr) is None
    ]
