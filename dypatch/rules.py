"""Validators applied to decoded values before they are staged."""

import typing


@typing.runtime_checkable
class Validator(typing.Protocol):
    """Inspects a decoded value before it is applied.

    validate() rejects the value by raising an exception; returning normally
    accepts it.
    """

    def validate(self, key: str, value: typing.Any) -> None: ...


class ValidateFunc:
    """Wraps a func(key, value) callable as a Validator."""

    def __init__(self, func: typing.Callable[[str, typing.Any], typing.Any]) -> None:
        self.func = func

    def validate(self, key: str, value: typing.Any) -> None:
        self.func(key, value)


def as_validator(
    validator: Validator | typing.Callable[[str, typing.Any], typing.Any] | None,
) -> Validator | None:
    """Normalize a validator argument.

    Args:
        validator: None, a Validator, or a func(key, value) callable

    Returns:
        A Validator, or None if no validation is requested

    Raises:
        TypeError: If validator is neither a Validator nor callable
    """
    if validator is None or isinstance(validator, Validator):
        return validator
    if callable(validator):
        return ValidateFunc(validator)
    raise TypeError(f"{validator!r} is not a validator")


class RuleError(ValueError):
    """Raised by RuleValidator when a rule rejects a value.

    Attributes:
        rule: The rule that failed
    """

    def __init__(self, rule: "ValidationRule", message: str) -> None:
        self.rule = rule
        super().__init__(message)


class ValidationRule:
    """A predicate on the decoded value of one update key.

    Attributes:
        field: Update key the rule checks, or '*' for every key
        check: Predicate taking the decoded value, True if it is acceptable
        message: Text of the RuleError raised when check fails
        priority: Execution order (lower numbers execute first)
    """

    def __init__(
        self,
        field: str,
        check: typing.Callable[[typing.Any], bool],
        message: str,
        priority: int = 0,
    ) -> None:
        self.field = field
        self.check = check
        self.message = message
        self.priority = priority

    def applies_to(self, key: str) -> bool:
        return self.field in (key, "*")

    def validate(self, value: typing.Any) -> None:
        """Check a decoded value.

        A predicate that raises fails the rule, and its error is appended to
        the message and chained as the cause.

        Raises:
            RuleError: If check rejects value
        """
        try:
            accepted = self.check(value)
        except Exception as e:
            raise RuleError(self, f"{self.message}: {e}") from e
        if not accepted:
            raise RuleError(self, self.message)


class RuleValidator:
    """Validates update values against a collection of rules.

    Rules for a key run in priority order; rules with field '*' are merged in
    with the same ordering. The first failing rule rejects the value.
    """

    def __init__(self, rules: typing.Iterable[ValidationRule]) -> None:
        self.rules = sorted(rules, key=lambda r: r.priority)

    def rules_for(self, key: str) -> list[ValidationRule]:
        """Rules that apply to a key, in execution order."""
        return [r for r in self.rules if r.applies_to(key)]

    def validate(self, key: str, value: typing.Any) -> None:
        """Validate a decoded value.

        Args:
            key: Update key the value was supplied under
            value: Decoded value

        Raises:
            RuleError: If any rule for key rejects value
        """
        for rule in self.rules_for(key):
            rule.validate(value)
