"""Error handling options for update operations."""

from enum import Enum


class ErrorOption(str, Enum):
    """Options for how to handle update errors.

    Attributes:
        RETURN: Return the error in the result object without raising
        RAISE: Raise the error as soon as the update is aborted
    """

    RETURN = "return"
    RAISE = "raise"
