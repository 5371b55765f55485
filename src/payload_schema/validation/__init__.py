"""Validation layer: plan building, execution and result aggregation."""

from .engine import Schema, SessionState, ValidationEngine, validate
from .plan import ValidationPlan, build_plan
from .results import ResultCode, ValidationOutcome, ValidationResult
from .validators import (
    AnyTypeValidator,
    ArrayTypeValidator,
    KeyLimiterValidator,
    LengthValidator,
    NotBlankValidator,
    NullableValidator,
    RangeValidator,
    RegexValidator,
    RequiredValidator,
    TypeValidator,
    Validator,
)

__all__ = [
    "Schema",
    "SessionState",
    "ValidationEngine",
    "validate",
    "ValidationPlan",
    "build_plan",
    "ResultCode",
    "ValidationOutcome",
    "ValidationResult",
    "Validator",
    "RequiredValidator",
    "NullableValidator",
    "NotBlankValidator",
    "TypeValidator",
    "ArrayTypeValidator",
    "AnyTypeValidator",
    "RangeValidator",
    "LengthValidator",
    "RegexValidator",
    "KeyLimiterValidator",
]
