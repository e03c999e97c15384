"""Errors raised when an update is aborted.

Every error derives from UpdateError, and each kind is a distinct class so
callers can tell a rejected value (ValidationFailed) apart from a bad request
(UnknownField, TypeMismatch, MalformedInput).
"""

import typing

import pydantic


class UpdateError(Exception):
    """Base class for all update errors."""


class InvalidTarget(UpdateError, TypeError):
    """Raised when the destination is not a mutable record instance.

    Attributes:
        target: The value passed as destination
    """

    def __init__(self, target: typing.Any) -> None:
        self.target = target
        super().__init__(
            f"destination must be a mutable record instance, got {type(target).__name__}"
        )


class MalformedInput(UpdateError, ValueError):
    """Raised when the update source is not a JSON object.

    Attributes:
        error: The underlying parse error
    """

    def __init__(self, error: Exception) -> None:
        self.error = error
        super().__init__(f"can't decode update source: {error}")


class UnknownField(UpdateError, LookupError):
    """Raised when an update key does not resolve to a field.

    Attributes:
        key: The unresolved key
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"key {key} wasn't found in field map")


class TypeMismatch(UpdateError, TypeError):
    """Raised when a value can't be decoded into its field's type.

    Attributes:
        key: The update key
        expected: The field's declared type
        error: The underlying decode error
    """

    def __init__(self, key: str, expected: typing.Any, error: Exception) -> None:
        self.key = key
        self.expected = expected
        self.error = error
        super().__init__(
            f"error decoding {key} as {_type_name(expected)}: {_describe(error)}"
        )


class ValidationFailed(UpdateError, ValueError):
    """Raised when the validator rejects a decoded value.

    Attributes:
        key: The update key
        error: The error raised by the validator
    """

    def __init__(self, key: str, error: Exception) -> None:
        self.key = key
        self.error = error
        super().__init__(f"validate error on key {key}: {error}")


def _type_name(annotation: typing.Any) -> str:
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        return annotation.__name__
    return str(annotation)


def _describe(error: Exception) -> str:
    if isinstance(error, pydantic.ValidationError):
        return "; ".join(e["msg"] for e in error.errors())
    return str(error) or type(error).__name__
