"""Shared fixtures for payload-schema tests."""

import pytest

from payload_schema.template import Template


@pytest.fixture
def user_schema():
    """Raw schema covering every constraint kind."""
    return {
        "id": {"type": "integer", "required": True, "range": [0, None]},
        "name": {"type": "string", "required": True, "length": [1, 10]},
        "email": {"type": "string", "nullable": True, "regex": r"^[^@\s]+@[^@\s]+$"},
        "score": {"type": "double", "range": [0, 100]},
        "tags": {"type": "string[]", "length": [0, 3], "regex": r"^[a-z]+$"},
        "meta": {"type": "any"},
    }


@pytest.fixture
def user_template(user_schema):
    """Compiled template for user_schema."""
    return Template.from_dict(user_schema)


@pytest.fixture
def valid_user():
    """Payload that satisfies user_schema."""
    return {
        "id": 7,
        "name": "ada",
        "email": "ada@example.org",
        "score": 99.5,
        "tags": ["math", "code"],
        "meta": {"anything": [1, 2]},
    }
