"""Tests for dypatch.rules module."""

import pytest

from dypatch import ValidationFailed, apply
from dypatch.rules import (
    RuleError,
    RuleValidator,
    ValidateFunc,
    ValidationRule,
    Validator,
    as_validator,
)


def test_validation_rule():
    """Test a single rule."""
    rule = ValidationRule("A", lambda v: v != "", "can't be empty string")

    rule.validate("foo")
    with pytest.raises(RuleError, match="^can't be empty string$") as exc_info:
        rule.validate("")
    assert exc_info.value.rule is rule


def test_validation_rule_applies_to():
    """Test which keys a rule checks."""
    assert ValidationRule("A", bool, "x").applies_to("A")
    assert not ValidationRule("A", bool, "x").applies_to("B")
    assert ValidationRule("*", bool, "x").applies_to("B")


def test_validation_rule_exception():
    """Test that a predicate raising fails the rule and is chained."""
    rule = ValidationRule("C", lambda v: v > 0, "must be positive")

    with pytest.raises(RuleError, match="^must be positive: ") as exc_info:
        rule.validate("x")
    assert isinstance(exc_info.value.__cause__, TypeError)


def test_rule_validator_priority():
    """Test that rules run in priority order and the first failure wins."""
    validator = RuleValidator(
        [
            ValidationRule("C", lambda v: v < 100, "too big", priority=2),
            ValidationRule("C", lambda v: v > 0, "must be positive", priority=1),
        ]
    )

    with pytest.raises(RuleError, match="must be positive") as exc_info:
        validator.validate("C", -1)
    assert exc_info.value.rule.priority == 1

    with pytest.raises(RuleError, match="too big"):
        validator.validate("C", 1000)

    validator.validate("C", 5)


def test_rule_validator_wildcard():
    """Test that '*' rules apply to every key."""
    validator = RuleValidator(
        [
            ValidationRule("*", lambda v: v is not None, "can't be null"),
            ValidationRule("A", lambda v: len(v) < 5, "too long"),
        ]
    )

    assert [r.message for r in validator.rules_for("A")] == ["can't be null", "too long"]
    assert [r.message for r in validator.rules_for("B")] == ["can't be null"]

    with pytest.raises(RuleError, match="can't be null"):
        validator.validate("B", None)


def test_rule_validator_other_keys():
    """Test that keys without rules are accepted."""
    validator = RuleValidator([ValidationRule("A", lambda v: False, "never")])

    validator.validate("B", "anything")


def test_rule_validator_is_validator():
    """Test that RuleValidator satisfies the Validator protocol."""
    validator = RuleValidator([])

    assert isinstance(validator, Validator)
    assert as_validator(validator) is validator


def test_as_validator():
    """Test normalizing validator arguments."""

    def func(key, value):
        pass

    assert as_validator(None) is None
    wrapped = as_validator(func)
    assert isinstance(wrapped, ValidateFunc)
    assert wrapped.func is func

    with pytest.raises(TypeError):
        as_validator("not a validator")  # type: ignore[arg-type]


def test_validate_func():
    """Test that ValidateFunc propagates the wrapped function's error."""

    def func(key, value):
        raise ValueError(f"{key} rejected")

    with pytest.raises(ValueError, match="A rejected"):
        ValidateFunc(func).validate("A", 1)


def test_apply_with_rules(original, before, snapshot):
    """Test rules gating an update."""
    validator = RuleValidator(
        [
            ValidationRule("A", lambda v: v != "", "can't be empty string"),
            ValidationRule("C", lambda v: v > 0, "can't be < 0"),
        ]
    )

    with pytest.raises(ValidationFailed) as exc_info:
        apply(original, b'{"A": "", "C": 2}', validator)

    assert exc_info.value.key == "A"
    assert isinstance(exc_info.value.error, RuleError)
    assert str(exc_info.value) == "validate error on key A: can't be empty string"
    assert snapshot(original) == before

    apply(original, b'{"A": "bar", "C": 2}', validator)
    assert original.A == "bar"
    assert original.C == 2
