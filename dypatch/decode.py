"""Decode raw JSON fragments into declared field types."""

import decimal
import functools
import json
import re
import types
import typing

import pydantic

from . import record as _record


_decoder = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][-+]?\d+)?")


@functools.cache
def _adapter(annotation: typing.Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(annotation)


def type_adapter(annotation: typing.Any) -> pydantic.TypeAdapter:
    """Get the (memoized) TypeAdapter for an annotation.

    Unhashable annotations get a fresh adapter on every call.

    Raises:
        pydantic.PydanticSchemaGenerationError: If pydantic can't handle the type
    """
    try:
        hash(annotation)
    except TypeError:
        return pydantic.TypeAdapter(annotation)
    return _adapter(annotation)


def _is_decimal(annotation: typing.Any) -> bool:
    if typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not types.NoneType]
        return len(args) == 1 and _is_decimal(args[0])
    return isinstance(annotation, type) and issubclass(annotation, decimal.Decimal)


def decode_value(
    raw: _record.Json, annotation: typing.Any, *, strict: bool = True
) -> typing.Any:
    """Decode a JSON fragment into a value of the annotation type.

    In strict mode a JSON boolean is not accepted for an int, a fractional
    number is not accepted for an int, and strings are not coerced into
    numbers. Integers are accepted for floats.

    Args:
        raw: JSON text of a single value
        annotation: The target type annotation
        strict: Whether to use Pydantic strict validation

    Returns:
        The decoded value

    Raises:
        pydantic.ValidationError: If raw can't be decoded into annotation
        pydantic.PydanticSchemaGenerationError: If pydantic can't handle the type
    """
    adapter = type_adapter(annotation)
    if _is_decimal(annotation) and isinstance(raw, str | bytes | bytearray):
        text = raw if isinstance(raw, str) else bytes(raw).decode(errors="replace")
        if _NUMBER.fullmatch(text.strip()):
            # JSON numbers would pass through a double on the way to Decimal
            return adapter.validate_python(decimal.Decimal(text), strict=strict)
    return adapter.validate_json(raw, strict=strict)


def decode_update_set(src: _record.Json) -> dict[str, str]:
    """Decode an update source into a mapping of key to JSON fragment.

    Args:
        src: JSON text of an object

    Returns:
        Dictionary mapping each key to the JSON text of its value

    Raises:
        json.JSONDecodeError: If src is not valid JSON
        UnicodeDecodeError: If src bytes are not valid UTF-8
        TypeError: If src is not text, or does not hold a JSON object
    """
    if not isinstance(src, str | bytes | bytearray):
        raise TypeError(f"expected JSON text, got {type(src).__name__}")
    if not isinstance(src, str):
        src = src.decode(json.detect_encoding(src), "surrogatepass")
    decoded = _decoder.decode(src)
    if not isinstance(decoded, dict):
        raise TypeError(f"expected a JSON object, got {type(decoded).__name__}")
    return _fragments(src)


def _skip(text: str, idx: int) -> int:
    return _WHITESPACE.match(text, idx).end()


def _fragments(text: str) -> dict[str, str]:
    # text is a valid JSON object; slice out the source text of each value
    fragments: dict[str, str] = {}
    idx = _skip(text, _skip(text, 0) + 1)
    while text[idx] != "}":
        key, idx = json.decoder.scanstring(text, idx + 1)
        idx = _skip(text, _skip(text, idx) + 1)
        _, end = _decoder.raw_decode(text, idx)
        fragments[key] = text[idx:end]
        idx = _skip(text, end)
        if text[idx] == ",":
            idx = _skip(text, idx + 1)
    return fragments
