"""Category attribute schemas and typed attribute values."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, TypeGuard

_KEY_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def is_valid_attribute_key(key: object) -> TypeGuard[str]:
    """Return True if ``key`` can be used as a JSON lookup path segment."""
    return (
        isinstance(key, str)
        and _KEY_PATTERN.fullmatch(key) is not None
        and "__" not in key
    )


class ValueType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUMERATED = "enumerated"

    @classmethod
    def parse(cls, value: object) -> ValueType:
        if isinstance(value, ValueType):
            return value
        if value == "enum":
            return cls.ENUMERATED
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported attribute type: {value!r}.") from None

    @property
    def facetable(self) -> bool:
        return self in (ValueType.ENUMERATED, ValueType.BOOLEAN)


@dataclass(frozen=True)
class AttributeDefinition:
    """One typed attribute of a category.

    ``allowed_values`` keeps the authored order; it drives the order of
    enumerated facet buckets.
    """

    key: str
    display_name: str
    value_type: ValueType
    allowed_values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not is_valid_attribute_key(self.key):
            raise ValueError(
                f"Attribute key {self.key!r} must start with a letter and contain "
                "only letters, digits and single underscores."
            )
        object.__setattr__(self, "value_type", ValueType.parse(self.value_type))
        allowed = tuple(str(value) for value in self.allowed_values)
        if len(set(allowed)) != len(allowed):
            raise ValueError(f"Attribute {self.key!r} has duplicate allowed values.")
        if self.value_type is ValueType.ENUMERATED:
            if not allowed:
                raise ValueError(
                    f"Enumerated attribute {self.key!r} requires allowed values."
                )
        elif allowed:
            raise ValueError(
                f"Only enumerated attributes accept allowed values ({self.key!r})."
            )
        object.__setattr__(self, "allowed_values", allowed)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AttributeDefinition:
        """Build a definition from the ``{key, name, type, options}`` wire shape."""
        try:
            key = data["key"]
            value_type = data["type"]
        except KeyError as exc:
            raise ValueError(f"Attribute definition is missing {exc.args[0]!r}.") from exc
        return cls(
            key=key,
            display_name=str(data.get("name") or key),
            value_type=ValueType.parse(value_type),
            allowed_values=tuple(data.get("options") or ()),
        )

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "key": self.key,
            "name": self.display_name,
            "type": self.value_type.value,
        }
        if self.value_type is ValueType.ENUMERATED:
            payload["options"] = list(self.allowed_values)
        return payload


@dataclass(frozen=True)
class CategorySchema:
    id: Any
    slug: str
    name: str
    attributes: tuple[AttributeDefinition, ...] = ()
    _by_key: dict[str, AttributeDefinition] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        attributes = tuple(self.attributes)
        by_key: dict[str, AttributeDefinition] = {}
        for definition in attributes:
            if definition.key in by_key:
                raise ValueError(
                    f"Category {self.slug!r} defines attribute {definition.key!r} twice."
                )
            by_key[definition.key] = definition
        object.__setattr__(self, "attributes", attributes)
        object.__setattr__(self, "_by_key", by_key)

    def get(self, key: str) -> AttributeDefinition | None:
        return self._by_key.get(key)

    def facetable_attributes(self) -> Iterator[AttributeDefinition]:
        return (d for d in self.attributes if d.value_type.facetable)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "attributes": [definition.to_dict() for definition in self.attributes],
        }


# Tagged attribute values, used for write-time validation of listing attributes.


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: int | float | Decimal


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class EnumValue:
    value: str


AttributeValue = StringValue | NumberValue | BoolValue | EnumValue


def coerce_value(definition: AttributeDefinition, raw: object) -> AttributeValue:
    """Validate ``raw`` against ``definition`` and wrap it in its tagged type."""
    value_type = definition.value_type
    if value_type is ValueType.BOOLEAN:
        if isinstance(raw, bool):
            return BoolValue(raw)
    elif value_type is ValueType.NUMBER:
        if isinstance(raw, int | float | Decimal) and not isinstance(raw, bool):
            return NumberValue(raw)
    elif value_type is ValueType.STRING:
        if isinstance(raw, str):
            return StringValue(raw)
    else:
        if isinstance(raw, str) and raw in definition.allowed_values:
            return EnumValue(raw)
        raise ValueError(
            f"{definition.key!r} must be one of {list(definition.allowed_values)!r}, "
            f"got {raw!r}."
        )
    raise ValueError(f"{definition.key!r} expects a {value_type.value}, got {raw!r}.")


def validate_attributes(
    schema: CategorySchema, attributes: Mapping[str, object]
) -> tuple[dict[str, AttributeValue], dict[str, object]]:
    """Split ``attributes`` into typed schema values and untouched stray keys.

    Raises ``ValueError`` listing every offending key. ``None`` values are
    treated as absent.
    """
    typed: dict[str, AttributeValue] = {}
    stray: dict[str, object] = {}
    errors: list[str] = []
    for key, raw in attributes.items():
        definition = schema.get(key)
        if definition is None:
            stray[key] = raw
            continue
        if raw is None:
            continue
        try:
            typed[key] = coerce_value(definition, raw)
        except ValueError as exc:
            errors.append(str(exc))
    if errors:
        raise ValueError(" ".join(errors))
    return typed, stray


def schemas_from_records(records: Iterable[Mapping[str, Any]]) -> list[CategorySchema]:
    """Build schemas from ``{id, slug, name, attributes}`` records."""
    return [
        CategorySchema(
            id=record.get("id"),
            slug=record["slug"],
            name=record.get("name") or record["slug"],
            attributes=tuple(
                AttributeDefinition.from_dict(item)
                for item in record.get("attributes") or ()
            ),
        )
        for record in records
    ]
