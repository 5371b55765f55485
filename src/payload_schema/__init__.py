"""payload-schema - Declarative validation of untrusted decoded payloads.

A raw schema is compiled into a trusted Template, turned into an ordered
plan of constraint checks, and applied to a decoded payload. The output is
a structured list of results rather than a boolean.
"""

__version__ = "0.1.0"
__description__ = "Declarative schema validation for untrusted decoded payloads"

from payload_schema.errors import (
    PayloadSchemaError,
    SchemaError,
    SchemaUsageError,
    ValidationFailure,
)
from payload_schema.template import FieldSpec, Template, compile_template
from payload_schema.validation import (
    ResultCode,
    Schema,
    ValidationOutcome,
    ValidationResult,
    validate,
)

__all__ = [
    "__version__",
    "__description__",
    "PayloadSchemaError",
    "SchemaError",
    "SchemaUsageError",
    "ValidationFailure",
    "FieldSpec",
    "Template",
    "compile_template",
    "ResultCode",
    "Schema",
    "ValidationOutcome",
    "ValidationResult",
    "validate",
]
