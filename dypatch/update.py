"""Apply partial JSON updates to typed records.

Only the fields named in an update are touched. Every value is decoded into
its field's declared type and checked by the optional validator before
anything is written; the record is updated only if every key succeeds.

Values are decoded against the field annotation alone: constraints declared
on a field apply, but a Pydantic model's field and model validators do not
run. Checks of that kind belong in the validator argument.
"""

import inspect
import logging
import typing as _typing

import pydantic as _pydantic

from . import decode as _decode
from . import errors as _errors
from . import fields as _fields
from . import options as _options
from . import record as _record
from . import result as _result
from . import rules as _rules


_logger = logging.getLogger(__name__)

ValidatorArg = (
    _rules.Validator | _typing.Callable[[str, _typing.Any], _typing.Any] | None
)


def _check_target(record: _typing.Any) -> None:
    if not _fields.is_mutable(record):
        raise _errors.InvalidTarget(record)


def _decode_update_set(src: _record.Json) -> dict[str, str]:
    try:
        return _decode.decode_update_set(src)
    except (ValueError, TypeError, RecursionError) as e:
        raise _errors.MalformedInput(e) from e


def _stage(
    record: _record.Record,
    update_set: _record.UpdateSet,
    validator: _rules.Validator | None,
    strict: bool,
) -> dict[str, _typing.Any]:
    """Decode and validate every key of an update without touching record.

    Keys are processed in sorted order so the same update always fails on
    the same key.

    Returns:
        Dictionary mapping attribute names to their new values
    """
    if not isinstance(update_set, _typing.Mapping):
        raise _errors.MalformedInput(
            TypeError(f"expected a mapping, got {type(update_set).__name__}")
        )

    slots = _fields.field_map(type(record))
    staged: dict[str, _typing.Any] = {}

    for key in sorted(update_set):
        slot = slots.get(key)
        if slot is None:
            raise _errors.UnknownField(key)

        try:
            value = _decode.decode_value(
                update_set[key], slot.annotation, strict=strict
            )
        except (
            _pydantic.ValidationError,
            _pydantic.PydanticSchemaGenerationError,
            RecursionError,
        ) as e:
            raise _errors.TypeMismatch(key, slot.annotation, e) from e

        if validator is not None:
            try:
                validator.validate(key, value)
            except Exception as e:
                raise _errors.ValidationFailed(key, e) from e

        staged[slot.name] = value

    return staged


_MISSING = object()


def _current(record: _record.Record, name: str) -> _typing.Any:
    # slots and properties live on the class, plain attributes in __dict__
    if hasattr(inspect.getattr_static(type(record), name, None), "__set__"):
        return getattr(record, name, _MISSING)
    return getattr(record, "__dict__", {}).get(name, _MISSING)


def _restore(record: _record.Record, saved: list[tuple[str, _typing.Any]]) -> None:
    for name, value in reversed(saved):
        if value is _MISSING:
            object.__delattr__(record, name)
        else:
            object.__setattr__(record, name, value)


def _commit(record: _record.Record, staged: dict[str, _typing.Any]) -> None:
    """Write staged values into record, all of them or none.

    Raises:
        InvalidTarget: If an attribute of record can't be written (a slot
            that doesn't exist, a read-only property), after restoring the
            attributes already written
    """
    if isinstance(record, _pydantic.BaseModel):
        record.__dict__.update(staged)
        record.__pydantic_fields_set__.update(staged)
        return

    saved: list[tuple[str, _typing.Any]] = []
    try:
        for name, value in staged.items():
            old = _current(record, name)
            object.__setattr__(record, name, value)
            saved.append((name, old))
    except (AttributeError, TypeError) as e:
        _restore(record, saved)
        raise _errors.InvalidTarget(record) from e


def _apply(
    record: _record.Record,
    update_set: _record.UpdateSet,
    validator: ValidatorArg,
    strict: bool,
) -> tuple[str, ...]:
    staged = _stage(record, update_set, _rules.as_validator(validator), strict)
    _commit(record, staged)
    _logger.debug(
        "committed %d field(s) to %s: %s",
        len(staged),
        type(record).__qualname__,
        ", ".join(staged),
    )
    return tuple(staged)


def _run(
    record: _record.Record,
    error_option: _options.ErrorOption,
    func: _typing.Callable[[], tuple[str, ...]],
) -> _result.UpdateResult:
    try:
        fields = func()
    except _errors.UpdateError as e:
        _logger.debug("aborted update of %s: %s", type(record).__qualname__, e)
        if error_option == _options.ErrorOption.RAISE:
            raise
        return _result.UpdateResult(e, (), record)
    return _result.UpdateResult(None, fields, record)


def apply_decoded(
    record: _record.Record,
    update_set: _record.UpdateSet,
    validator: ValidatorArg = None,
    *,
    strict: bool = True,
    error_option: _options.ErrorOption = _options.ErrorOption.RAISE,
) -> _result.UpdateResult:
    """Apply an already decoded update to a record.

    Args:
        record: Mutable record instance to update in place
        update_set: Mapping of external key to the raw JSON text of its value
        validator: Validator, or func(key, value) raising to reject a value
        strict: Whether to decode values with Pydantic strict validation
        error_option: RAISE to raise the error, RETURN to return it in the result

    Returns:
        UpdateResult with the error (if any), the attributes written and the record

    Raises:
        InvalidTarget: If record is not a mutable record instance
        MalformedInput: If update_set is not a mapping
        UnknownField: If a key does not resolve to a field
        TypeMismatch: If a value can't be decoded into its field's type
        ValidationFailed: If the validator rejects a value
    """

    def func() -> tuple[str, ...]:
        _check_target(record)
        return _apply(record, update_set, validator, strict)

    return _run(record, error_option, func)


def apply(
    record: _record.Record,
    src: _record.Json,
    validator: ValidatorArg = None,
    *,
    strict: bool = True,
    error_option: _options.ErrorOption = _options.ErrorOption.RAISE,
) -> _result.UpdateResult:
    """Apply a JSON object holding a partial update to a record.

    Args:
        record: Mutable record instance to update in place
        src: JSON text of an object whose keys are external field names
        validator: Validator, or func(key, value) raising to reject a value
        strict: Whether to decode values with Pydantic strict validation
        error_option: RAISE to raise the error, RETURN to return it in the result

    Returns:
        UpdateResult with the error (if any), the attributes written and the record

    Raises:
        InvalidTarget: If record is not a mutable record instance
        MalformedInput: If src is not a JSON object
        UnknownField: If a key does not resolve to a field
        TypeMismatch: If a value can't be decoded into its field's type
        ValidationFailed: If the validator rejects a value
    """

    def func() -> tuple[str, ...]:
        _check_target(record)
        return _apply(record, _decode_update_set(src), validator, strict)

    return _run(record, error_option, func)
