"""Template compiler: the trust boundary between raw schemas and the engine.

A raw schema is a mapping of field name to constraint mapping::

    {
        "id": {"type": "integer", "required": True, "range": [0, None]},
        "name": {"type": "string", "length": [1, 65]},
        "tags": {"type": "string[]", "regex": r"^[a-z]+$"},
    }

Compilation is fail-fast: the first violation raises SchemaError. A
compiled Template is read-only and can be shared between sessions.
"""

import logging
import math
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from payload_schema.catalog import (
    ANY_TYPE,
    BOOLEAN_KEYS,
    BOUNDS_KEYS,
    KEY_ALIASES,
    OPTIONAL_KEYS,
    REQUIRED_KEYS,
    ConstraintKind,
    element_type,
    is_allowed_type,
    is_array_type,
)
from payload_schema.errors import SchemaError

logger = logging.getLogger(__name__)

Bound = int | float | None


@dataclass(frozen=True)
class Bounds:
    """Inclusive (min, max) pair; None on either side means unbounded."""
    min: Bound = None
    max: Bound = None

    def contains(self, value: int | float) -> bool:
        """NaN is never contained, even in an unbounded pair."""
        if isinstance(value, float) and math.isnan(value):
            return False
        return (self.min is None or self.min <= value) and (self.max is None or value <= self.max)

    def render(self) -> str:
        low = "-infinity" if self.min is None else _format_bound(self.min)
        high = "+infinity" if self.max is None else _format_bound(self.max)
        return f"[{low}, {high}]"

    def to_list(self) -> list[Bound]:
        return [self.min, self.max]


def _format_bound(bound: int | float) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


@dataclass(frozen=True)
class FieldSpec:
    """Constraint set for one field."""
    name: str
    type: str
    required: bool | None = None
    nullable: bool | None = None
    not_blank: bool | None = None
    range: Bounds | None = None
    length: Bounds | None = None
    regex: re.Pattern | None = None

    @property
    def is_any(self) -> bool:
        return self.type == ANY_TYPE

    @property
    def is_array(self) -> bool:
        return is_array_type(self.type)

    @property
    def element_type(self) -> str:
        return element_type(self.type)

    def declares(self, constraint: ConstraintKind) -> bool:
        """Whether the constraint was present in the raw schema."""
        if constraint is ConstraintKind.TYPE:
            return True
        return getattr(self, constraint.value, None) is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        for key in BOOLEAN_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        for key in BOUNDS_KEYS:
            bounds = getattr(self, key)
            if bounds is not None:
                data[key] = bounds.to_list()
        if self.regex is not None:
            data["regex"] = self.regex.pattern
        return data


class Template(Mapping):
    """A compiled, trusted schema: field name -> FieldSpec, in declaration order.

    Raw schemas go through :meth:`from_dict` (or :func:`compile_template`).
    The constructor only takes already compiled FieldSpec values.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, FieldSpec]):
        for name, spec in fields.items():
            if not isinstance(spec, FieldSpec) or spec.name != name:
                raise SchemaError(
                    f"Template fields must be compiled FieldSpec values, use Template.from_dict() for '{name}'.",
                    field=name,
                )
        self._fields = MappingProxyType(dict(fields))

    def __getitem__(self, name: str) -> FieldSpec:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Template({list(self._fields)!r})"

    def __setattr__(self, name, value):
        if hasattr(self, "_fields"):
            raise AttributeError("Template is immutable")
        super().__setattr__(name, value)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: spec.to_dict() for name, spec in self._fields.items()}

    @classmethod
    def from_dict(cls, raw_schema: Mapping[str, Any]) -> "Template":
        """Validate a raw schema and return the trusted Template.

        Raises:
            SchemaError: On the first structural violation found
        """
        if not isinstance(raw_schema, Mapping):
            raise SchemaError(f"Schema must be a mapping, got {type(raw_schema).__name__}")

        fields = {}
        for name, raw_spec in raw_schema.items():
            if not isinstance(name, str):
                raise SchemaError(f"Field names must be strings, got {name!r}")
            fields[name] = _compile_field(name, raw_spec)

        logger.debug(f"Compiled template with {len(fields)} fields")
        return cls(fields)


def compile_template(raw_schema: Mapping[str, Any]) -> Template:
    """Compile a raw schema mapping into a Template."""
    if isinstance(raw_schema, Template):
        return raw_schema
    return Template.from_dict(raw_schema)


def _compile_field(name: str, raw_spec: Any) -> FieldSpec:
    if not isinstance(raw_spec, Mapping):
        raise SchemaError(f"Specification for '{name}' must be a mapping.", field=name)

    spec = {KEY_ALIASES.get(key, key): value for key, value in raw_spec.items()}

    for key in REQUIRED_KEYS:
        if key not in spec:
            raise SchemaError(f"Missing required key: '{key}' for '{name}'.", field=name, constraint=key)

    for key in spec:
        if key not in REQUIRED_KEYS and key not in OPTIONAL_KEYS:
            raise SchemaError(f"Unknown constraint '{key}' for '{name}'.", field=name, constraint=key)

    type_name = spec["type"]
    if not is_allowed_type(type_name):
        raise SchemaError(f"Invalid type: '{type_name}' for '{name}'.", field=name, constraint="type")

    flags = {}
    for key in BOOLEAN_KEYS:
        if key in spec:
            if not isinstance(spec[key], bool):
                raise SchemaError(f"'{key}' for '{name}' must be a boolean.", field=name, constraint=key)
            flags[key] = spec[key]

    bounds = {}
    for key in BOUNDS_KEYS:
        if key in spec:
            bounds[key] = _compile_bounds(name, key, spec[key])

    regex = None
    if "regex" in spec:
        regex = _compile_regex(name, spec["regex"])

    return FieldSpec(name=name, type=type_name, regex=regex, **flags, **bounds)


def _compile_bounds(name: str, key: str, raw: Any) -> Bounds:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise SchemaError(
            f"Invalid {key} format for '{name}'. Must be a tuple[min, max].", field=name, constraint=key
        )

    for bound in raw:
        if bound is None:
            continue
        if isinstance(bound, bool) or not isinstance(bound, (int, float)):
            raise SchemaError(f"{key.capitalize()} values must be numeric for '{name}'.", field=name, constraint=key)
        if key == ConstraintKind.LENGTH.value and bound < 0:
            raise SchemaError(f"Length values must not be negative for '{name}'.", field=name, constraint=key)

    low, high = raw
    if low is not None and high is not None and low > high:
        raise SchemaError(
            f"Invalid {key} for '{name}': minimum {low} exceeds maximum {high}.", field=name, constraint=key
        )
    return Bounds(low, high)


def _compile_regex(name: str, raw: Any) -> re.Pattern:
    if isinstance(raw, re.Pattern):
        if isinstance(raw.pattern, bytes):
            raise SchemaError(f"Regex for '{name}' must be a str pattern, not bytes.", field=name, constraint="regex")
        return raw
    if not isinstance(raw, str):
        raise SchemaError(f"Regex for '{name}' must be a string pattern.", field=name, constraint="regex")
    try:
        return re.compile(raw)
    except re.error as e:
        raise SchemaError(f"Invalid regex for '{name}': {e}", field=name, constraint="regex") from e
