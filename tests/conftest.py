"""Pytest configuration and shared fixtures for fleet-common tests."""

import pytest


@pytest.fixture
def person_validator():
    """Validator over the sample person model: name, address, age, gender."""
    from fleet_common.validation import ModelValidator, schema

    return ModelValidator.create(
        {
            "name": schema.string().pattern(r"^[\w -]+$").max(10).min(3).required(),
            "address": schema.string().required(),
            "age": schema.number().min(15).max(99).integer(),
            "gender": schema.only("male", "female"),
        },
        name="Person",
    )


@pytest.fixture
def valid_person():
    return {"id": "1", "name": "Alice", "address": "1 Main St", "age": 30, "gender": "female"}
