"""Resolve external update keys to record fields."""

import dataclasses
import functools
import inspect
import logging
import types
import typing

import pydantic


_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Alias:
    """Annotated marker declaring the external key of a field.

    Example:
        ``count: Annotated[int, Alias("n")]``
    """

    name: str


class _ExcludeMarker:
    def __repr__(self) -> str:
        return "Exclude"


Exclude = _ExcludeMarker()
"""Annotated marker removing a field from the update surface."""


class FieldSlot(typing.NamedTuple):
    """A field addressable by an update.

    Attributes:
        name: Attribute name on the record
        key: External key the field is updated through
        annotation: Declared type the value is decoded into
    """

    name: str
    key: str
    annotation: typing.Any


def cls_annotations(cls: type) -> dict[str, typing.Any]:
    """Get type annotations from a class and its bases.

    Annotated metadata is preserved. Falls back to the raw annotations of the
    class itself if they can't be evaluated.

    Args:
        cls: The class to extract annotations from

    Returns:
        Dictionary mapping field names to their type annotations
    """
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return dict(inspect.get_annotations(cls))


def _metadata(annotation: typing.Any) -> tuple[typing.Any, ...]:
    if typing.get_origin(annotation) is typing.Annotated:
        return typing.get_args(annotation)[1:]
    return ()


def _marker_alias(metadata: typing.Iterable[typing.Any]) -> typing.Any:
    for item in metadata:
        if isinstance(item, Alias):
            return item.name
    return None


def _is_excluded(metadata: typing.Iterable[typing.Any]) -> bool:
    return any(item is Exclude for item in metadata)


def _key(name: str, alias: typing.Any) -> str:
    # malformed aliases fall back to the natural name
    if isinstance(alias, str) and alias:
        return alias
    return name


def _pydantic_fields(
    cls: type[pydantic.BaseModel],
) -> typing.Iterator[FieldSlot]:
    for name, info in cls.model_fields.items():
        if info.exclude is True or info.frozen or _is_excluded(info.metadata):
            continue
        alias = _marker_alias(info.metadata)
        if alias is None:
            alias = info.validation_alias
            if not isinstance(alias, str):
                alias = info.alias
        yield FieldSlot(name, _key(name, alias), info.rebuild_annotation())


def _dataclass_fields(cls: type) -> typing.Iterator[FieldSlot]:
    hints = cls_annotations(cls)
    for field in dataclasses.fields(cls):
        annotation = hints.get(field.name, field.type)
        metadata = _metadata(annotation)
        if field.metadata.get("exclude") is True or _is_excluded(metadata):
            continue
        alias = field.metadata.get("alias", _marker_alias(metadata))
        yield FieldSlot(field.name, _key(field.name, alias), annotation)


def _class_fields(cls: type) -> typing.Iterator[FieldSlot]:
    for name, annotation in cls_annotations(cls).items():
        if name.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
            continue
        metadata = _metadata(annotation)
        if _is_excluded(metadata):
            continue
        yield FieldSlot(name, _key(name, _marker_alias(metadata)), annotation)


def record_kind(obj: typing.Any) -> str | None:
    """Identify the kind of record an object is.

    Args:
        obj: Object to inspect

    Returns:
        "pydantic", "dataclass" or "class", or None if obj is not a record
        instance (a class, or a builtin value such as a dict or an int)
    """
    if isinstance(obj, type):
        return None
    if isinstance(obj, pydantic.BaseModel):
        return "pydantic"
    if dataclasses.is_dataclass(obj):
        return "dataclass"
    if type(obj).__module__ == "builtins":
        return None
    return "class"


def is_mutable(obj: typing.Any) -> bool:
    """Check whether a record instance can be updated in place."""
    kind = record_kind(obj)
    if kind is None:
        return False
    if kind == "pydantic":
        return not obj.model_config.get("frozen", False)
    if kind == "dataclass":
        return not type(obj).__dataclass_params__.frozen
    # named tuples and other tuple records are immutable values
    return not isinstance(obj, tuple)


@functools.cache
def field_map(cls: type) -> typing.Mapping[str, FieldSlot]:
    """Build the map of external keys to fields for a record type.

    Excluded fields are skipped. A field with an alias is reachable only by
    its alias; other fields are reachable by their own name. If two fields
    share a key, the first declared wins.

    Args:
        cls: Record type (Pydantic model, dataclass or annotated class)

    Returns:
        Dictionary mapping external keys to FieldSlot
    """
    if issubclass(cls, pydantic.BaseModel):
        slots = _pydantic_fields(cls)
    elif dataclasses.is_dataclass(cls):
        slots = _dataclass_fields(cls)
    else:
        slots = _class_fields(cls)

    mapping: dict[str, FieldSlot] = {}
    for slot in slots:
        if slot.key in mapping:
            _logger.warning(
                "%s: key %r of field %r already used by field %r",
                cls.__qualname__,
                slot.key,
                slot.name,
                mapping[slot.key].name,
            )
            continue
        mapping[slot.key] = slot
    _logger.debug("%s: field map %s", cls.__qualname__, sorted(mapping))
    return types.MappingProxyType(mapping)
