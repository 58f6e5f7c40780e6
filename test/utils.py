import typing as t
from dataclasses import dataclass
from enum import Enum

from loguru import logger
from pydantic import BaseModel, RootModel
from pydantic_core import core_schema

from typed_store.types.tags import tagged


class A(RootModel[int]):
    """A newtype around an integer, which serializes as the bare integer."""


@tagged("fruit")
class Fruit(BaseModel):
    name: str
    color: str
    is_tropical: bool
    price: float


@dataclass
class Point:
    x: int
    y: int


class Points(RootModel[t.List[Point]]):
    """A typed collection, which keeps its elements typed through a round trip."""


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Opaque:
    """Serializable through a custom pydantic schema, but has no readable ``str`` or ``repr``."""

    def __init__(self, n: int):
        self.n = n

    def __eq__(self, other):
        return isinstance(other, Opaque) and other.n == self.n

    @classmethod
    def _validate(cls, value):
        return value if isinstance(value, cls) else cls(value)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate, serialization=core_schema.plain_serializer_function_ser_schema(lambda value: value.n)
        )


class Unserializable:
    pass


class CapturedLogs:
    """Collects the messages loguru logs while in use as a context manager."""

    def __init__(self, level: str = "DEBUG"):
        self.level = level
        self.messages: t.List[str] = []
        self._handler_id = None

    def __enter__(self):
        self._handler_id = logger.add(lambda message: self.messages.append(message.record["message"]), level=self.level)
        return self

    def __exit__(self, *exc_info):
        logger.remove(self._handler_id)
