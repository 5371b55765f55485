"""Exceptions raised by payload-schema.

Three disjoint classes: schema errors (bad template), usage errors (bad
session handling) and validation failures (fail-fast data errors). Data
errors in collect-all mode are never exceptions.
"""

from typing import Any


class PayloadSchemaError(Exception):
    """Base class for all payload-schema exceptions."""


class SchemaError(PayloadSchemaError, ValueError):
    """Raised when a raw schema cannot be compiled into a Template."""

    def __init__(self, message: str, field: str | None = None, constraint: str | None = None):
        super().__init__(message)
        self.field = field
        self.constraint = constraint


class SchemaUsageError(PayloadSchemaError, RuntimeError):
    """Raised when a Schema session is driven out of order."""


class ValidationFailure(PayloadSchemaError):
    """Raised by fail-fast parsing with the first failing result."""

    def __init__(self, result):
        super().__init__(result.message)
        self.result = result

    @property
    def data(self) -> dict[str, Any]:
        """The failing result as plain data."""
        return self.result.to_dict()
