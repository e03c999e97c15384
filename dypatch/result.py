"""Result types for update operations."""

import typing as _t

from . import errors as _errors
from . import record as _record


class UpdateResult(_t.NamedTuple):
    """Result of applying an update to a record.

    Attributes:
        error: UpdateError if the update was aborted, None otherwise
        fields: Names of the attributes written, empty if aborted
        value: The record the update was applied to
    """

    error: _errors.UpdateError | None
    fields: tuple[str, ...]
    value: _record.Record

    @property
    def ok(self) -> bool:
        """True if the update was committed."""
        return self.error is None
