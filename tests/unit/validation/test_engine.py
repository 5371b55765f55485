"""Tests for the validation engine and Schema sessions."""

import re

import pytest

from payload_schema.errors import SchemaError, SchemaUsageError, ValidationFailure
from payload_schema.template import Template
from payload_schema.validation import ResultCode, Schema, SessionState, validate


def field_codes(outcome, name):
    return [result.code for result in outcome.for_field(name)]


class TestExecutionOrder:
    """Key limiter first, then fields in template order."""

    def test_valid_payload(self, user_template, valid_user):
        outcome = validate(user_template, valid_user)
        assert outcome.is_valid
        assert outcome.results[0].path == ("key_limiter",)
        fields = [result.field for result in outcome.results[1:]]
        assert fields == sorted(fields, key=list(user_template).index)

    def test_determinism(self, user_template):
        payload = {"id": -1, "name": "", "email": None, "tags": ["A", 3], "extra": 1}
        first = validate(user_template, payload).results
        second = validate(user_template, payload).results
        assert first == second

    def test_end_to_end_missing_required(self):
        template = Template.from_dict({
            "id": {"type": "integer", "required": True},
            "name": {"type": "string", "length": [1, 10]},
        })
        outcome = validate(template, {"name": "ab"})

        assert [(r.code, r.path) for r in outcome.results] == [
            (ResultCode.VALID, ("key_limiter",)),
            (ResultCode.INVALID_REQUIRED, ("id",)),
            (ResultCode.VALID, ("name",)),
            (ResultCode.VALID, ("name",)),
        ]
        assert outcome.results[2].expected == "string"
        assert outcome.results[3].expected == "in length [1, 10]"
        assert not outcome.is_valid


class TestShortCircuit:
    """Skip rules per field."""

    def test_missing_required_stops_field(self, user_template):
        outcome = validate(user_template, {"name": "ada"}, key_limit=False)
        assert field_codes(outcome, "id") == [ResultCode.INVALID_REQUIRED]

    def test_missing_optional_field_emits_nothing(self, user_template):
        outcome = validate(user_template, {"id": 1, "name": "ada"})
        assert outcome.for_field("score") == []
        assert outcome.for_field("tags") == []

    def test_missing_declared_optional(self):
        outcome = validate({"nick": {"type": "string", "required": False, "length": [3, 5]}}, {})
        [result] = outcome.for_field("nick")
        assert result.code == ResultCode.VALID
        assert result.received == "not defined"

    def test_null_with_nullable_skips_remaining_checks(self, user_template):
        outcome = validate(user_template, {"id": 1, "name": "ada", "email": None})
        [result] = outcome.for_field("email")
        assert result.code == ResultCode.VALID
        assert result.expected == "nullable"

    def test_null_with_nullable_false(self):
        outcome = validate({"email": {"type": "string", "nullable": False, "regex": "@"}}, {"email": None})
        assert field_codes(outcome, "email") == [ResultCode.INVALID_NULLABLE]

    def test_null_without_nullable_falls_through_to_type(self):
        outcome = validate({"age": {"type": "integer", "range": [0, 5]}}, {"age": None})
        [result] = outcome.for_field("age")
        assert result.code == ResultCode.INVALID_TYPE
        assert result.received == "null"

    def test_declared_null_type(self):
        outcome = validate({"nothing": {"type": "null"}}, {"nothing": None})
        assert field_codes(outcome, "nothing") == [ResultCode.VALID]

    def test_any_skips_other_checks(self):
        outcome = validate({"meta": {"type": "any", "required": True}}, {"meta": "x"})
        assert field_codes(outcome, "meta") == [ResultCode.VALID]

    def test_incompatible_kind_skips_check_silently(self):
        template = {"age": {"type": "integer", "range": [0, 10], "length": [1, 2], "regex": "^1"}}
        outcome = validate(template, {"age": "abc"})
        assert field_codes(outcome, "age") == [ResultCode.INVALID_TYPE, ResultCode.INVALID_LENGTH, ResultCode.INVALID_REGEX]

    def test_not_blank_runs_before_type(self):
        outcome = validate({"title": {"type": "string", "not_blank": True, "length": [0, 10]}}, {"title": ""})
        assert field_codes(outcome, "title") == [ResultCode.NOT_BLANK, ResultCode.VALID, ResultCode.VALID]


class TestTestableScenarios:
    """Scenarios about result counts and paths."""

    def test_typed_array_offending_index(self):
        outcome = validate({"ids": {"type": "integer[]"}}, {"ids": [1, "x", 3]})
        [error] = outcome.errors
        assert error.code == ResultCode.INVALID_TYPE
        assert error.path == ("ids", 1)
        assert field_codes(outcome, "ids") == [ResultCode.INVALID_TYPE]

    def test_range_over_and_within(self):
        template = {"score": {"type": "integer", "range": [0, 100]}}
        [range_result] = [r for r in validate(template, {"score": 150}).results if r.code == ResultCode.INVALID_RANGE]
        assert range_result.received == 150

        results = validate(template, {"score": 50}).for_field("score")
        assert [r.code for r in results] == [ResultCode.VALID, ResultCode.VALID]
        assert results[1].expected == "in range [0, 100]"

    def test_key_limiter_lists_unrecognized_keys(self):
        template = {"a": {"type": "integer"}, "b": {"type": "integer"}, "c": {"type": "integer"}}
        outcome = validate(template, {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5})
        limiter = [r for r in outcome.results if r.code == ResultCode.INVALID_KEY_LIMITER]
        assert len(limiter) == 1
        assert limiter[0].path == ("d", "e")


    def test_nan_fails_range(self):
        outcome = validate({"x": {"type": "double", "range": [0, 100]}}, {"x": float("nan")})
        assert field_codes(outcome, "x") == [ResultCode.VALID, ResultCode.INVALID_RANGE]

    def test_bytes_regex_rejected_before_validation(self):
        with pytest.raises(SchemaError):
            validate({"x": {"type": "string", "regex": re.compile(b"^a")}}, {"x": "abc"})

    def test_key_limiter_does_not_belong_to_a_field(self):
        template = {"key_limiter": {"type": "integer"}, "a": {"type": "integer"}}
        outcome = validate(template, {"key_limiter": 1, "a": 2})
        assert field_codes(outcome, "key_limiter") == [ResultCode.VALID]
        assert outcome.results[0].field is None

        outcome = validate({"a": {"type": "integer"}}, {"a": 1, "b": 2})
        assert field_codes(outcome, "b") == []
    def test_unknown_type_produces_no_template(self):
        with pytest.raises(SchemaError):
            validate({"x": {"type": "unknown"}}, {"x": 1})

    def test_is_valid_matches_errors(self, user_template, valid_user):
        for payload in (valid_user, {}, {"id": "x"}):
            outcome = validate(user_template, payload)
            assert outcome.is_valid == (len(outcome.errors) == 0)


class TestSchemaSession:
    """Session state machine and execution modes."""

    def test_state_transitions(self, user_template, valid_user):
        schema = Schema(user_template)
        assert schema.state is SessionState.UNPROCESSED

        schema.process()
        assert schema.state is SessionState.PROCESSED

        schema.safe_parse(valid_user)
        assert schema.state is SessionState.PARSED
        assert schema.is_parsed

        schema.reset()
        assert schema.state is SessionState.UNPROCESSED
        assert schema.results == []
        assert schema.plan is None

    def test_process_is_idempotent(self, user_template):
        schema = Schema(user_template)
        assert schema.process() is schema.process()

    def test_reparse_without_reset_is_usage_error(self, user_template, valid_user):
        schema = Schema(user_template).safe_parse(valid_user)
        with pytest.raises(SchemaUsageError):
            schema.safe_parse(valid_user)
        with pytest.raises(SchemaUsageError):
            schema.parse(valid_user)

    def test_reset_allows_reparse(self, user_template, valid_user):
        schema = Schema(user_template).safe_parse(valid_user)
        first = schema.results
        second = schema.reset().safe_parse(valid_user).results
        assert first == second

    def test_parse_without_template(self):
        schema = Schema()
        assert not schema.has_template
        with pytest.raises(SchemaUsageError, match="no template"):
            schema.safe_parse({})
        with pytest.raises(SchemaUsageError):
            schema.reset()

    def test_set_template_compiles_raw_mapping(self):
        schema = Schema().set_template({"a": {"type": "integer"}})
        assert isinstance(schema.template, Template)

    def test_template_locked_after_processing(self, user_template):
        schema = Schema(user_template)
        schema.process()
        with pytest.raises(SchemaUsageError):
            schema.set_template({"a": {"type": "integer"}})

    def test_payload_must_be_mapping(self, user_template):
        with pytest.raises(SchemaUsageError, match="mapping"):
            Schema(user_template).safe_parse([1, 2])

    def test_usage_error_is_not_validation_failure(self, user_template, valid_user):
        schema = Schema(user_template).safe_parse(valid_user)
        with pytest.raises(SchemaUsageError) as exc_info:
            schema.parse(valid_user)
        assert not isinstance(exc_info.value, ValidationFailure)

    def test_collect_all_accessors(self, user_template):
        schema = Schema(user_template).safe_parse({"id": -3, "name": "ada", "x": 1})
        assert not schema.is_valid
        assert len(schema.results) == len(schema.errors) + len(schema.valids)
        assert {r.code for r in schema.errors} == {ResultCode.INVALID_RANGE}

    def test_accessors_return_copies(self, user_template, valid_user):
        schema = Schema(user_template).safe_parse(valid_user)
        schema.results.clear()
        assert schema.results

    def test_fail_fast_raises_first_error(self, user_template):
        schema = Schema(user_template)
        with pytest.raises(ValidationFailure) as exc_info:
            schema.parse({"name": "ada", "score": 500})

        failure = exc_info.value
        assert failure.result.code == ResultCode.INVALID_REQUIRED
        assert failure.result.path == ("id",)
        assert failure.data["code"] == "invalid_required"
        assert str(failure) == "Value is required"
        assert schema.is_parsed
        assert schema.errors == [failure.result]
        assert not any(r.field == "score" for r in schema.results)

    def test_fail_fast_valid_payload(self, user_template, valid_user):
        schema = Schema(user_template).parse(valid_user)
        assert schema.is_valid
        assert schema.results == validate(user_template, valid_user).results

    def test_fail_fast_helper(self, user_template):
        with pytest.raises(ValidationFailure):
            validate(user_template, {}, fail_fast=True)


class TestKeyLimiterConfiguration:
    """Key limiter switches on Schema sessions."""

    def test_disabled(self, user_template, valid_user):
        payload = dict(valid_user, extra=1)
        schema = Schema(user_template).set_key_limiter(False).safe_parse(payload)
        assert schema.is_valid
        assert all(r.path != ("key_limiter",) for r in schema.results)

    def test_explicit_limit(self, user_template):
        schema = Schema(user_template, key_limit=1).safe_parse({"id": 1, "name": "a"})
        assert schema.results[0].code == ResultCode.INVALID_KEY_LIMITER
        assert schema.results[0].path == ()

    @pytest.mark.parametrize("limit", [-1, "3", 1.5])
    def test_invalid_limit(self, user_template, limit):
        with pytest.raises(SchemaUsageError):
            Schema(user_template).set_key_limiter(limit)

    def test_locked_after_parse(self, user_template, valid_user):
        schema = Schema(user_template).safe_parse(valid_user)
        with pytest.raises(SchemaUsageError):
            schema.set_key_limiter(False)
