"""Shared pytest fixtures for dypatch tests."""

import dataclasses
import math
import typing

import pydantic
import pytest

from dypatch import Alias, Exclude


class BasicModel(pydantic.BaseModel):
    """Test model with an aliased and an excluded field."""

    A: str
    B: bool
    C: int
    D: float
    E: int = pydantic.Field(default=0, alias="e")
    F: str = pydantic.Field(default="hidden", exclude=True)


@dataclasses.dataclass
class BasicData:
    """Test dataclass mirroring BasicModel."""

    A: str
    B: bool
    C: int
    D: float
    E: int = dataclasses.field(default=0, metadata={"alias": "e"})
    F: str = dataclasses.field(default="hidden", metadata={"exclude": True})


class BasicClass:
    """Test annotated class mirroring BasicModel."""

    A: str
    B: bool
    C: int
    D: float
    E: typing.Annotated[int, Alias("e")]
    F: typing.Annotated[str, Exclude]

    def __init__(self, A: str, B: bool, C: int, D: float, E: int = 0, F: str = "hidden"):
        self.A = A
        self.B = B
        self.C = C
        self.D = D
        self.E = E
        self.F = F


RECORD_TYPES = [BasicModel, BasicData, BasicClass]


def state(record: typing.Any) -> dict[str, typing.Any]:
    """Snapshot of every field of a record, excluded ones included."""
    if isinstance(record, pydantic.BaseModel):
        return dict(record.__dict__)
    if dataclasses.is_dataclass(record):
        return dataclasses.asdict(record)
    return dict(vars(record))


@pytest.fixture(params=RECORD_TYPES, ids=lambda t: t.__name__)
def record_type(request: pytest.FixtureRequest) -> type:
    """Fixture providing each kind of record type."""
    return request.param


@pytest.fixture
def original(record_type: type) -> typing.Any:
    """Fixture providing a record with A="foo", B=True, C=1, D=pi."""
    return record_type(A="foo", B=True, C=1, D=math.pi)


@pytest.fixture
def before(original: typing.Any) -> dict[str, typing.Any]:
    """Fixture providing the state of the original record before any update."""
    return state(original)


@pytest.fixture
def snapshot() -> typing.Callable[[typing.Any], dict[str, typing.Any]]:
    """Fixture providing the record state snapshot function."""
    return state
