"""Validation engine and the Schema session.

How a session is used:

    1) A Schema is created with a compiled Template.
    2) ``safe_parse(payload)`` (collect-all) or ``parse(payload)``
       (fail-fast) builds the plan if needed and runs it.
    3) Results are read back through ``results``, ``errors``, ``valids``
       and ``is_valid``.

A parsed session must be ``reset()`` before it can parse again.
"""

import logging
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from payload_schema.catalog import MISSING, ValueKind
from payload_schema.errors import SchemaUsageError, ValidationFailure
from payload_schema.template import Template, compile_template
from payload_schema.validation.plan import ValidationPlan, build_plan
from payload_schema.validation.results import ValidationOutcome, ValidationResult
from payload_schema.validation.validators import Validator

logger = logging.getLogger(__name__)


class FieldDecision(Enum):
    """Per-field state during one run."""
    UNDECIDED = "undecided"
    SHORT_CIRCUITED = "short_circuited"


class SessionState(str, Enum):
    """Lifecycle of a Schema session."""
    UNPROCESSED = "unprocessed"
    PROCESSED = "processed"
    PARSED = "parsed"


class ValidationEngine:
    """Applies a validation plan to decoded payloads."""

    def __init__(self, plan: ValidationPlan):
        self.plan = plan

    def run(self, payload: Mapping[str, Any]) -> Iterator[ValidationResult]:
        """Yield results in execution order.

        The key limiter runs first since it needs the full key set; fields
        then run in template order and are independent of one another.
        """
        if self.plan.key_limiter is not None:
            yield from self.plan.key_limiter.check(payload)

        for name, validators in self.plan.fields.items():
            yield from self.run_field(name, validators, payload.get(name, MISSING))

    def run_field(
        self, name: str, validators: tuple[Validator, ...], value: Any
    ) -> Iterator[ValidationResult]:
        """Run one field's validators until one of them decides the field."""
        kind = None if value is MISSING else ValueKind.of(value)
        path = (name,)
        decision = FieldDecision.UNDECIDED

        for validator in validators:
            if decision is FieldDecision.SHORT_CIRCUITED:
                break
            if not validator.applies(value, kind):
                continue
            yield from validator.check(value, path)
            if validator.decides(value):
                decision = FieldDecision.SHORT_CIRCUITED

    def collect(self, payload: Mapping[str, Any]) -> ValidationOutcome:
        """Collect-all execution."""
        outcome = ValidationOutcome()
        outcome.extend(self.run(payload))
        return outcome


class Schema:
    """A validation session over one Template.

    Example:
        template = Template.from_dict(raw_schema)
        schema = Schema(template)
        results = schema.safe_parse(payload).results
    """

    def __init__(self, template: Template | None = None, *, key_limit: bool | int = True):
        self._template: Template | None = None
        self._key_limit = key_limit
        self._plan: ValidationPlan | None = None
        self._outcome = ValidationOutcome()
        self._state = SessionState.UNPROCESSED
        if template is not None:
            self.set_template(template)

    @property
    def template(self) -> Template | None:
        return self._template

    @property
    def has_template(self) -> bool:
        return self._template is not None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_parsed(self) -> bool:
        return self._state is SessionState.PARSED

    @property
    def plan(self) -> ValidationPlan | None:
        return self._plan

    @property
    def outcome(self) -> ValidationOutcome:
        return self._outcome

    @property
    def results(self) -> list[ValidationResult]:
        return list(self._outcome.results)

    @property
    def errors(self) -> list[ValidationResult]:
        return list(self._outcome.errors)

    @property
    def valids(self) -> list[ValidationResult]:
        return list(self._outcome.valids)

    @property
    def is_valid(self) -> bool:
        return self._outcome.is_valid

    def set_template(self, template: Template | Mapping[str, Any]) -> "Schema":
        """Attach a template; a raw mapping is compiled first."""
        if self._state is not SessionState.UNPROCESSED:
            raise SchemaUsageError("Template cannot change once processed, use reset() first.")
        self._template = compile_template(template)
        return self

    def set_key_limiter(self, limit: bool | int) -> "Schema":
        """True limits payload keys to the field count, False disables the check, an int sets the limit."""
        if self._state is not SessionState.UNPROCESSED:
            raise SchemaUsageError("Key limiter cannot change once processed, use reset() first.")
        if not isinstance(limit, bool) and (not isinstance(limit, int) or limit < 0):
            raise SchemaUsageError(f"Key limit must be a boolean or a non-negative integer, got: {limit!r}")
        self._key_limit = limit
        return self

    def process(self) -> ValidationPlan:
        """Build the validation plan (UNPROCESSED -> PROCESSED)."""
        self._require_template()
        if self._state is SessionState.PARSED:
            raise SchemaUsageError("The schema has already been parsed, use reset() to start over.")
        if self._plan is None:
            self._plan = build_plan(self._template, self._key_limit)
            self._state = SessionState.PROCESSED
        return self._plan

    def reset(self) -> "Schema":
        """Clear plan and results but keep the template."""
        self._require_template()
        self._plan = None
        self._outcome = ValidationOutcome()
        self._state = SessionState.UNPROCESSED
        return self

    def safe_parse(self, payload: Mapping[str, Any]) -> "Schema":
        """Validate the payload and collect every result."""
        engine = self._prepare(payload)
        self._state = SessionState.PARSED
        self._outcome.extend(engine.run(payload))
        logger.info(
            f"Validated payload: {len(self._outcome.results)} results, {len(self._outcome.errors)} errors"
        )
        return self

    def parse(self, payload: Mapping[str, Any]) -> "Schema":
        """Validate the payload and stop at the first failing result.

        Raises:
            ValidationFailure: Carrying the first failing result
        """
        engine = self._prepare(payload)
        self._state = SessionState.PARSED
        for result in engine.run(payload):
            self._outcome.add(result)
            if not result.is_valid:
                logger.info(f"Validation aborted at {list(result.path)}: {result.code.value}")
                raise ValidationFailure(result)
        logger.info(f"Validated payload: {len(self._outcome.results)} results, no errors")
        return self

    def _prepare(self, payload: Any) -> ValidationEngine:
        self._require_template()
        if self._state is SessionState.PARSED:
            raise SchemaUsageError("The schema has already been parsed, use reset() to start over.")
        if not isinstance(payload, Mapping):
            raise SchemaUsageError(f"Payload must be a mapping, got {type(payload).__name__}")
        return ValidationEngine(self.process())

    def _require_template(self) -> None:
        if self._template is None:
            raise SchemaUsageError("Schema has no template, use set_template() first.")


def validate(
    template: Template | Mapping[str, Any],
    payload: Mapping[str, Any],
    *,
    fail_fast: bool = False,
    key_limit: bool | int = True,
) -> ValidationOutcome:
    """One-shot validation on a fresh session.

    Raises:
        SchemaError: If ``template`` is a raw mapping that does not compile
        ValidationFailure: In fail-fast mode, on the first failing result
    """
    schema = Schema(compile_template(template), key_limit=key_limit)
    if fail_fast:
        schema.parse(payload)
    else:
        schema.safe_parse(payload)
    return schema.outcome
