"""Validation plan builder.

Turns a trusted Template into an ordered list of validators per field.
Constraint kinds are resolved to validator factories once, here, and the
per-field order is fixed by PRIORITY regardless of raw declaration order.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from payload_schema.catalog import ConstraintKind
from payload_schema.template import FieldSpec, Template
from payload_schema.validation.validators import (
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

logger = logging.getLogger(__name__)

# Execution order within a field
PRIORITY = (
    ConstraintKind.REQUIRED,
    ConstraintKind.NULLABLE,
    ConstraintKind.NOT_BLANK,
    ConstraintKind.TYPE,
    ConstraintKind.RANGE,
    ConstraintKind.LENGTH,
    ConstraintKind.REGEX,
)


def _type_validator(spec: FieldSpec) -> Validator:
    if spec.is_any:
        return AnyTypeValidator()
    if spec.is_array:
        return ArrayTypeValidator(spec.type)
    return TypeValidator(spec.type)


FACTORIES: dict[ConstraintKind, Callable[[FieldSpec], Validator]] = {
    ConstraintKind.REQUIRED: lambda spec: RequiredValidator(spec.required),
    ConstraintKind.NULLABLE: lambda spec: NullableValidator(spec.nullable),
    ConstraintKind.NOT_BLANK: lambda spec: NotBlankValidator(spec.not_blank),
    ConstraintKind.TYPE: _type_validator,
    ConstraintKind.RANGE: lambda spec: RangeValidator(spec.range),
    ConstraintKind.LENGTH: lambda spec: LengthValidator(spec.length),
    ConstraintKind.REGEX: lambda spec: RegexValidator(spec.regex),
}


@dataclass(frozen=True)
class ValidationPlan:
    """Validators per field in template order, plus the payload key limiter."""
    fields: Mapping[str, tuple[Validator, ...]] = field(default_factory=dict)
    key_limiter: KeyLimiterValidator | None = None

    def __len__(self) -> int:
        return sum(len(validators) for validators in self.fields.values())

    def describe(self) -> dict[str, list[str]]:
        """Constraint names per field, in execution order."""
        return {name: [v.name for v in validators] for name, validators in self.fields.items()}


def resolve_key_limit(template: Template, key_limit: bool | int | None) -> int | None:
    """True -> template field count, False/None -> no limit, int -> that limit."""
    if key_limit is None or key_limit is False:
        return None
    if key_limit is True:
        return len(template)
    if key_limit < 0:
        raise ValueError(f"key limit must be >= 0, got: {key_limit}")
    return key_limit


def build_plan(template: Template, key_limit: bool | int | None = True) -> ValidationPlan:
    """Build the validation plan for a compiled template."""
    fields = {}
    for name, spec in template.items():
        fields[name] = tuple(
            FACTORIES[constraint](spec) for constraint in PRIORITY if spec.declares(constraint)
        )

    limit = resolve_key_limit(template, key_limit)
    key_limiter = KeyLimiterValidator(limit, template.field_names) if limit is not None else None

    plan = ValidationPlan(fields=fields, key_limiter=key_limiter)
    logger.debug(f"Built validation plan: {len(plan)} validators over {len(fields)} fields")
    return plan
