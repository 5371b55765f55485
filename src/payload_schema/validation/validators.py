"""Validator variants, one per constraint kind.

Each validator is configuration only: ``check(value, path)`` is a pure
function returning the results for that value. Scalar checks return one
result; elementwise array checks return one result per offending element,
or a single valid result when every element passes.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from payload_schema.catalog import (
    MISSING,
    ConstraintKind,
    ValueKind,
    element_type,
    kind_matches,
)
from payload_schema.template import Bounds
from payload_schema.validation.results import PathElement, ResultCode, ValidationResult

Path = tuple[PathElement, ...]


class Validator(ABC):
    """Base class for constraint validators."""

    constraint: ConstraintKind

    @property
    def name(self) -> str:
        """Constraint name for identification."""
        return self.constraint.value

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        """Applicability guard; ``kind`` is None when the key is absent."""
        return value is not MISSING

    def decides(self, value: Any) -> bool:
        """Whether the field needs no further checks after this one."""
        return False

    @abstractmethod
    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        """Check one value and return its results."""

    def _result(
        self, code: ResultCode, expected: str, received: Any, path: Path, message: str
    ) -> ValidationResult:
        return ValidationResult(code, expected, received, path, message, constraint=self.constraint)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RequiredValidator(Validator):
    """Checks key presence, independent of the value."""

    constraint = ConstraintKind.REQUIRED

    def __init__(self, required: bool):
        self.required = required

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return True

    def decides(self, value: Any) -> bool:
        return value is MISSING

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        expected = "defined" if self.required else "optional"
        if value is not MISSING:
            return [self._result(ResultCode.VALID, expected, "defined", path, "Value is present")]
        if self.required:
            return [self._result(ResultCode.INVALID_REQUIRED, expected, "not defined", path, "Value is required")]
        return [self._result(ResultCode.VALID, expected, "not defined", path, "Value is not required")]

    def __repr__(self) -> str:
        return f"RequiredValidator(required={self.required})"


class NullableValidator(Validator):
    """Decides whether a present null value is permitted."""

    constraint = ConstraintKind.NULLABLE

    def __init__(self, nullable: bool):
        self.nullable = nullable

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return kind is ValueKind.NULL

    def decides(self, value: Any) -> bool:
        return value is None

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        if self.nullable:
            return [self._result(ResultCode.VALID, "nullable", "null", path, "Value is nullable")]
        return [self._result(ResultCode.INVALID_NULLABLE, "not nullable", "null", path, "Value is not nullable")]

    def __repr__(self) -> str:
        return f"NullableValidator(nullable={self.nullable})"


class NotBlankValidator(Validator):
    """A value is blank when it is null, an empty string, false or an empty collection."""

    constraint = ConstraintKind.NOT_BLANK

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return self.enabled and value is not MISSING

    @staticmethod
    def is_blank(value: Any) -> bool:
        if value is None or value is False:
            return True
        if isinstance(value, str):
            return value == ""
        if isinstance(value, (list, tuple, Mapping)):
            return len(value) == 0
        return False

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        if self.is_blank(value):
            return [self._result(ResultCode.NOT_BLANK, "not_blank", "blank", path, "Value cannot be blank")]
        return [self._result(ResultCode.VALID, "not_blank", "not_blank", path, "Value is not blank")]


class TypeValidator(Validator):
    """Scalar kind check against a declared type name."""

    constraint = ConstraintKind.TYPE

    def __init__(self, type_name: str):
        self.type_name = type_name

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        kind = ValueKind.of(value)
        received = kind.value
        if kind_matches(self.type_name, kind):
            return [self._result(ResultCode.VALID, self.type_name, received, path, "Valid type")]
        return [self._result(
            ResultCode.INVALID_TYPE, self.type_name, received, path,
            f"Expected {self.type_name}, received {received}"
        )]

    def __repr__(self) -> str:
        return f"TypeValidator({self.type_name!r})"


class ArrayTypeValidator(TypeValidator):
    """Elementwise kind check for typed arrays such as ``integer[]``."""

    def __init__(self, type_name: str):
        super().__init__(type_name)
        self.item_type = element_type(type_name)

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        kind = ValueKind.of(value)
        if kind is not ValueKind.ARRAY:
            return [self._result(
                ResultCode.INVALID_TYPE, self.type_name, kind.value, path,
                f"Expected {self.type_name}, received {kind.value}"
            )]

        errors = []
        for index, item in enumerate(value):
            item_kind = ValueKind.of(item)
            if not kind_matches(self.item_type, item_kind):
                errors.append(self._result(
                    ResultCode.INVALID_TYPE, self.item_type, item_kind.value, path + (index,),
                    f"Expected {self.item_type}, received {item_kind.value}"
                ))

        if errors:
            return errors
        return [self._result(ResultCode.VALID, self.type_name, self.type_name, path, "Valid type")]

    def __repr__(self) -> str:
        return f"ArrayTypeValidator({self.type_name!r})"


class AnyTypeValidator(Validator):
    """``type: any`` accepts every value and ends the field's checks."""

    constraint = ConstraintKind.TYPE

    def decides(self, value: Any) -> bool:
        return True

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        return []


class RangeValidator(Validator):
    """Inclusive numeric range check."""

    constraint = ConstraintKind.RANGE

    def __init__(self, bounds: Bounds):
        self.bounds = bounds

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return kind is not None and kind.is_numeric

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        expected = f"in range {self.bounds.render()}"
        if self.bounds.contains(value):
            return [self._result(ResultCode.VALID, expected, value, path, "Value is within the range")]
        if self.bounds.min is not None and value < self.bounds.min:
            message = "Value is below the minimum"
        elif self.bounds.max is not None and value > self.bounds.max:
            message = "Value is above the maximum"
        else:
            message = "Value is not a comparable number"
        return [self._result(ResultCode.INVALID_RANGE, expected, value, path, message)]

    def __repr__(self) -> str:
        return f"RangeValidator({self.bounds.render()})"


class LengthValidator(Validator):
    """Character count of strings or element count of arrays."""

    constraint = ConstraintKind.LENGTH

    def __init__(self, bounds: Bounds):
        self.bounds = bounds

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return kind in (ValueKind.STRING, ValueKind.ARRAY)

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        size = len(value)
        expected = f"in length {self.bounds.render()}"
        if self.bounds.contains(size):
            return [self._result(ResultCode.VALID, expected, size, path, "Length is within the range")]
        if self.bounds.min is not None and size < self.bounds.min:
            return [self._result(ResultCode.INVALID_LENGTH, expected, size, path, "Length is below the minimum")]
        return [self._result(ResultCode.INVALID_LENGTH, expected, size, path, "Length is above the maximum")]

    def __repr__(self) -> str:
        return f"LengthValidator({self.bounds.render()})"


class RegexValidator(Validator):
    """Pattern search on strings and numbers, elementwise on arrays."""

    constraint = ConstraintKind.REGEX

    def __init__(self, pattern: re.Pattern):
        self.pattern = pattern

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return kind is not None and (kind.is_numeric or kind in (ValueKind.STRING, ValueKind.ARRAY))

    def matches(self, value: Any) -> bool:
        kind = ValueKind.of(value)
        if kind is not ValueKind.STRING and not kind.is_numeric:
            return False
        return self.pattern.search(str(value)) is not None

    def check(self, value: Any, path: Path) -> list[ValidationResult]:
        source = self.pattern.pattern
        passed = self._result(ResultCode.VALID, f"regex {source}", value, path, "Value matches the regex")

        if ValueKind.of(value) is not ValueKind.ARRAY:
            if self.matches(value):
                return [passed]
            return [self._result(ResultCode.INVALID_REGEX, source, value, path, "Value does not match the regex")]

        errors = [
            self._result(ResultCode.INVALID_REGEX, source, item, path + (index,), "Value does not match the regex")
            for index, item in enumerate(value)
            if not self.matches(item)
        ]
        return errors or [passed]

    def __repr__(self) -> str:
        return f"RegexValidator({self.pattern.pattern!r})"


class KeyLimiterValidator(Validator):
    """Bounds the number of keys in the whole payload."""

    constraint = ConstraintKind.KEY_LIMITER

    def __init__(self, limit: int, known_keys: Iterable[str]):
        self.limit = limit
        self.known_keys = frozenset(known_keys)

    def applies(self, value: Any, kind: ValueKind | None) -> bool:
        return True

    def excess_keys(self, payload: Mapping[str, Any]) -> list[str]:
        """Payload keys that are not template fields, in payload order."""
        return [key for key in payload if key not in self.known_keys]

    def check(self, value: Mapping[str, Any], path: Path = ()) -> list[ValidationResult]:
        count = len(value)
        expected = f"at most {self.limit} keys"
        if count > self.limit:
            return [self._result(
                ResultCode.INVALID_KEY_LIMITER, expected, count, tuple(self.excess_keys(value)),
                "Number of keys is above the limit in provided data"
            )]
        return [self._result(
            ResultCode.VALID, expected, count, ("key_limiter",),
            "Number of keys is within the limit in provided data"
        )]

    def __repr__(self) -> str:
        return f"KeyLimiterValidator(limit={self.limit})"
