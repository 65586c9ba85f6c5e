"""
The generic, table-driven copier between untyped mappings and typed models.

`decode_record`/`encode_record` work on any model built by
`marshal.fields.build_model`. `VariantFamily` adds discriminator handling on top
of them for closed sets of shapes that share one discriminator field, such as
the seven secret variants selected by `secret_type`.
"""

import logging
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ansible_ibm_provider.errors import TypeMismatch, UnrecognizedVariant
from ansible_ibm_provider.marshal.fields import ApiModel, field_table
from ansible_ibm_provider.marshal.types import SemanticType, format_timestamp

logger = logging.getLogger(__name__)


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def _unwrap_nested(value: Any, field: str) -> Mapping | None:
    # Nested blocks arrive either as a mapping or as a one-element list.
    if isinstance(value, list):
        if not value:
            return None
        if len(value) > 1:
            raise TypeMismatch(field, "expected a single nested block")
        value = value[0]
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TypeMismatch(field, f"expected a mapping, got {type(value).__name__}")
    return value


def decode_record(model: type[ApiModel], mapping: Mapping, path: str = "") -> ApiModel:
    """
    Copies every field declared on `model` from `mapping` into a new instance.

    Keys that are absent, `None` or the empty string are left unset. Keys that
    the model does not declare are ignored, so one variant never picks up
    another variant's fields.

    Raises:
        TypeMismatch: if a value cannot be coerced to its declared type. The
            error carries the dotted path of the offending field.
    """
    if not isinstance(mapping, Mapping):
        raise TypeMismatch(path.rstrip(".") or model.__name__, "expected a mapping")

    values = {}
    names = {}
    for spec in field_table(model):
        raw = mapping.get(spec.name)
        if _is_absent(raw):
            continue
        names[spec.attr] = spec.name
        if spec.semantic_type is SemanticType.NESTED:
            inner = _unwrap_nested(raw, f"{path}{spec.name}")
            if inner is None:
                continue
            values[spec.attr] = decode_record(
                spec.nested, inner, path=f"{path}{spec.name}."
            )
        else:
            values[spec.attr] = raw

    try:
        return model.model_validate(values)
    except ValidationError as e:
        error = e.errors()[0]
        location = error["loc"][0] if error["loc"] else ""
        field = names.get(location, str(location))
        raise TypeMismatch(f"{path}{field}", error["msg"]) from e


def _encode_value(spec, value, wrap_nested: bool):
    if spec.semantic_type is SemanticType.NESTED:
        encoded = encode_record(value, wrap_nested=wrap_nested)
        return [encoded] if wrap_nested else encoded
    if spec.semantic_type is SemanticType.TIMESTAMP:
        return format_timestamp(value)
    if spec.semantic_type is SemanticType.STRING_LIST:
        return list(value)
    if spec.semantic_type is SemanticType.DURATION_MAP:
        return dict(value)
    return value


def encode_record(obj: ApiModel, wrap_nested: bool = True) -> dict[str, Any]:
    """
    Writes every field that is set on `obj` into a new mapping.

    Unset fields are omitted rather than written as null placeholders. Nested
    records are encoded recursively; with `wrap_nested` they are wrapped into a
    one-element list (the nested-block convention of module parameters),
    without it they stay plain mappings (the shape of API request bodies).
    """
    result = {}
    for spec in field_table(type(obj)):
        value = getattr(obj, spec.attr)
        if value is None:
            continue
        result[spec.name] = _encode_value(spec, value, wrap_nested)
    return result


class VariantFamily:
    """
    A closed set of models distinguished by a discriminator value.

    Args:
        name: Human-readable family name used in error messages.
        discriminator: The mapping key carrying the discriminator value.
        values: The Enum listing every legal discriminator value.
        variants: `(value, model)` pairs in priority order. `discriminate`
            checks objects against them in exactly this order.
    """

    def __init__(
        self,
        name: str,
        discriminator: str,
        values: type[Enum],
        variants: Iterable[tuple[Enum, type[ApiModel]]],
    ):
        self.name = name
        self.discriminator = discriminator
        self.values = values
        self.variants = tuple(variants)
        self._by_value = {value: model for value, model in self.variants}

        missing = [member.value for member in values if member not in self._by_value]
        if missing:
            raise ValueError(f"Variant family '{name}' has no model for {missing}.")

    def __repr__(self):
        return f"VariantFamily({self.name!r}, discriminator={self.discriminator!r})"

    def value_of(self, raw: Any) -> Enum:
        """Returns the Enum member for a raw discriminator value."""
        if isinstance(raw, self.values):
            return raw
        try:
            return self.values(raw)
        except ValueError:
            raise UnrecognizedVariant(self.name, raw) from None

    def model_for(self, raw: Any) -> type[ApiModel]:
        return self._by_value[self.value_of(raw)]

    def decode(self, mapping: Mapping, discriminator_value: Any = None) -> ApiModel:
        """
        Decodes `mapping` into the variant selected by the discriminator.

        The discriminator is taken from `discriminator_value` when given,
        otherwise from the mapping itself. When both are present they must
        name the same variant.

        Raises:
            UnrecognizedVariant: if the discriminator is missing, unknown or
                contradicts the one carried by the mapping.
            TypeMismatch: if a field cannot be coerced.
        """
        carried = mapping.get(self.discriminator) if isinstance(mapping, Mapping) else None
        if discriminator_value is None:
            if not isinstance(mapping, Mapping):
                raise UnrecognizedVariant(self.name)
            discriminator_value = carried
        if _is_absent(discriminator_value):
            raise UnrecognizedVariant(self.name)
        selected = self.value_of(discriminator_value)
        if not _is_absent(carried) and self.value_of(carried) is not selected:
            raise UnrecognizedVariant(self.name, carried)
        model = self._by_value[selected]
        logger.debug("Decoding %s as %s", self.name, model.__name__)
        return decode_record(model, mapping)

    def discriminate(self, obj: Any) -> Enum:
        """
        Returns the discriminator value of `obj` by checking its type against
        the family's variants in priority order.

        Raises:
            UnrecognizedVariant: if `obj` is not an instance of any variant.
        """
        for value, model in self.variants:
            if isinstance(obj, model):
                return value
        raise UnrecognizedVariant(self.name, type(obj).__name__)

    def encode(self, obj: Any, wrap_nested: bool = True) -> dict[str, Any]:
        """
        Encodes a member of the family back into a mapping.

        Raises:
            UnrecognizedVariant: if `obj` is not a member of this family. No
                partial mapping is produced in that case.
        """
        self.discriminate(obj)
        return encode_record(obj, wrap_nested=wrap_nested)

    def decode_payload(self, payload: Mapping) -> ApiModel:
        """
        Decodes an API response body. Nested objects in responses are plain
        mappings, which `decode` already accepts.
        """
        return self.decode(payload)

    def encode_payload(self, obj: Any) -> dict[str, Any]:
        """Encodes a member into the shape of an API request body."""
        return self.encode(obj, wrap_nested=False)
