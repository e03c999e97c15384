"""Apply partial JSON updates to typed records using Pydantic.

A Python package for updating Pydantic models, dataclasses, or annotated
classes from a JSON object that holds only the fields to change. Values are
decoded into each field's declared type, optionally validated, and committed
all at once or not at all.
"""

__version__ = "0.1.0"

from dypatch.update import apply, apply_decoded
from dypatch.decode import decode_update_set, decode_value
from dypatch.errors import (
    UpdateError,
    InvalidTarget,
    MalformedInput,
    UnknownField,
    TypeMismatch,
    ValidationFailed,
)
from dypatch.fields import Alias, Exclude, FieldSlot, field_map
from dypatch.options import ErrorOption
from dypatch.result import UpdateResult
from dypatch.rules import (
    Validator,
    ValidateFunc,
    ValidationRule,
    RuleValidator,
    RuleError,
)

__all__ = [
    "apply",
    "apply_decoded",
    "decode_update_set",
    "decode_value",
    "UpdateError",
    "InvalidTarget",
    "MalformedInput",
    "UnknownField",
    "TypeMismatch",
    "ValidationFailed",
    "Alias",
    "Exclude",
    "FieldSlot",
    "field_map",
    "ErrorOption",
    "UpdateResult",
    "Validator",
    "ValidateFunc",
    "ValidationRule",
    "RuleValidator",
    "RuleError",
]
