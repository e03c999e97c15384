"""Type aliases for update inputs."""

import typing

import pydantic


Record = pydantic.BaseModel | typing.Any
"""Type alias for a record that can be updated.

A Record is a Pydantic BaseModel, a dataclass, or an instance of a plain
class with type annotations.
"""

Json = str | bytes | bytearray
"""Type alias for JSON data.

JSON can be provided as a string, bytes, or bytearray.
"""

UpdateSet = typing.Mapping[str, Json]
"""Type alias for a decoded update.

Maps each external key to the raw JSON fragment of its new value.
"""
