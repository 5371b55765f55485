"""Validation result model and aggregation."""

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from payload_schema.catalog import ConstraintKind

PathElement = str | int


class ResultCode(str, Enum):
    """Machine-readable result codes."""
    VALID = "valid"
    INVALID_TYPE = "invalid_type"
    INVALID_REQUIRED = "invalid_required"
    INVALID_NULLABLE = "invalid_nullable"
    INVALID_RANGE = "invalid_range"
    INVALID_LENGTH = "invalid_length"
    INVALID_REGEX = "invalid_regex"
    INVALID_KEY_LIMITER = "invalid_key_limiter"
    NOT_BLANK = "not_blank"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one check against one value (or one array element)."""
    code: ResultCode
    expected: str
    received: Any
    path: tuple[PathElement, ...]
    message: str
    constraint: ConstraintKind | None = None

    @property
    def is_valid(self) -> bool:
        return self.code == ResultCode.VALID

    @property
    def field(self) -> PathElement | None:
        """Top-level field name this result is about, None for the payload key limiter."""
        if self.constraint is ConstraintKind.KEY_LIMITER or not self.path:
            return None
        return self.path[0]

    def __str__(self) -> str:
        location = ".".join(str(part) for part in self.path)
        return f"[{self.code.value}] {location}: {self.message} (expected {self.expected}, received {self.received!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "expected": self.expected,
            "received": self.received,
            "path": list(self.path),
            "message": self.message,
        }


@dataclass
class ValidationOutcome:
    """Results of one validation run, partitioned into errors and valids."""
    results: list[ValidationResult] = field(default_factory=list)
    errors: list[ValidationResult] = field(default_factory=list)
    valids: list[ValidationResult] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> ValidationResult | None:
        return self.errors[0] if self.errors else None

    def add(self, result: ValidationResult) -> None:
        """Record a result in execution order."""
        self.results.append(result)
        if result.is_valid:
            self.valids.append(result)
        else:
            self.errors.append(result)

    def extend(self, results) -> None:
        for result in results:
            self.add(result)

    def clear(self) -> None:
        self.results.clear()
        self.errors.clear()
        self.valids.clear()

    def for_field(self, name: str) -> list[ValidationResult]:
        """All results about the given field; key limiter results belong to no field."""
        return [result for result in self.results if result.field == name]

    def codes(self) -> Counter:
        """Number of results per code."""
        return Counter(result.code.value for result in self.results)

    def __iter__(self) -> Iterator[ValidationResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "is_valid": self.is_valid,
            "counters": {
                "results": len(self.results),
                "errors": len(self.errors),
                "valids": len(self.valids),
            },
            "results": [result.to_dict() for result in self.results],
        }
