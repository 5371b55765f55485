"""Constraint catalog: the closed sets of constraint kinds and value kinds.

Pure data. Everything that decides whether a schema key or a type name is
recognized reads from here.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any


class _Missing:
    """Marker for a schema field whose key is absent from the payload."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class ConstraintKind(str, Enum):
    """Recognized constraint kinds."""
    TYPE = "type"
    REQUIRED = "required"
    NULLABLE = "nullable"
    NOT_BLANK = "not_blank"
    RANGE = "range"
    LENGTH = "length"
    REGEX = "regex"
    KEY_LIMITER = "key_limiter"


class ValueKind(str, Enum):
    """Runtime kinds of decoded payload values."""
    NULL = "null"
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, value: Any) -> "ValueKind":
        """Derive the kind of a decoded value.

        bool is tested before int since it is an int subclass.
        """
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.DOUBLE
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, (list, tuple)):
            return cls.ARRAY
        if isinstance(value, Mapping):
            return cls.OBJECT
        return cls.UNKNOWN

    @property
    def is_numeric(self) -> bool:
        return self in (ValueKind.INTEGER, ValueKind.DOUBLE)


ARRAY_SUFFIX = "[]"

ANY_TYPE = "any"

# Declared type name -> runtime kind it accepts
SCALAR_TYPES: dict[str, ValueKind] = {
    "null": ValueKind.NULL,
    "string": ValueKind.STRING,
    "integer": ValueKind.INTEGER,
    "double": ValueKind.DOUBLE,
    "float": ValueKind.DOUBLE,
    "boolean": ValueKind.BOOLEAN,
    "array": ValueKind.ARRAY,
    "object": ValueKind.OBJECT,
}

# Element types allowed in the typed-array form T[]
ARRAY_ELEMENT_TYPES = (
    "string", "integer", "double", "float", "boolean", "array", "object", ANY_TYPE,
)

REQUIRED_KEYS = (ConstraintKind.TYPE.value,)

OPTIONAL_KEYS = (
    ConstraintKind.REQUIRED.value,
    ConstraintKind.NULLABLE.value,
    ConstraintKind.NOT_BLANK.value,
    ConstraintKind.RANGE.value,
    ConstraintKind.LENGTH.value,
    ConstraintKind.REGEX.value,
)

# Alternate spellings accepted in raw schemas
KEY_ALIASES = {
    "notBlank": ConstraintKind.NOT_BLANK.value,
}

BOOLEAN_KEYS = (
    ConstraintKind.REQUIRED.value,
    ConstraintKind.NULLABLE.value,
    ConstraintKind.NOT_BLANK.value,
)

BOUNDS_KEYS = (
    ConstraintKind.RANGE.value,
    ConstraintKind.LENGTH.value,
)


def is_array_type(type_name: str) -> bool:
    return type_name.endswith(ARRAY_SUFFIX)


def element_type(type_name: str) -> str:
    """Strip the typed-array suffix: ``"integer[]"`` -> ``"integer"``."""
    return type_name[: -len(ARRAY_SUFFIX)] if is_array_type(type_name) else type_name


def allowed_types() -> list[str]:
    """All type names a template may declare."""
    names = list(SCALAR_TYPES) + [ANY_TYPE]
    names.extend(f"{name}{ARRAY_SUFFIX}" for name in ARRAY_ELEMENT_TYPES)
    return names


def is_allowed_type(type_name: Any) -> bool:
    if not isinstance(type_name, str):
        return False
    if is_array_type(type_name):
        return element_type(type_name) in ARRAY_ELEMENT_TYPES
    return type_name in SCALAR_TYPES or type_name == ANY_TYPE


def kind_matches(type_name: str, kind: ValueKind) -> bool:
    """Whether a runtime kind satisfies a declared scalar type name."""
    if type_name == ANY_TYPE:
        return True
    return SCALAR_TYPES.get(type_name) is kind


def describe_catalog() -> dict[str, list[str]]:
    """Recognized constraint keys and type names, for display."""
    return {
        "required": list(REQUIRED_KEYS),
        "optional": list(OPTIONAL_KEYS),
        "aliases": [f"{alias} -> {key}" for alias, key in KEY_ALIASES.items()],
        "types": allowed_types(),
    }
