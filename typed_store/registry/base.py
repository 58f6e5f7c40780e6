import typing as t
from abc import ABC
from collections import abc as collections_abc

from typed_store.errors import CodecError, UnsupportedTypeError
from typed_store.types.data_box import DataBox
from typed_store.types.serializers import resolve_serializer


IdT = t.TypeVar("IdT", bound=t.Hashable)


class TypeFactory:
    """
    Deserializes raw data into a value of one specific type and boxes it.

    Parameters
    ----------
    type_ : type
        The type to deserialize into.
    box_class : DataBox type
        The kind of box to put deserialized values in.
    optional : bool
        If ``True``, ``None`` data produces an absent value (``None``) instead of failing.
    """

    def __init__(self, type_: type, box_class: t.Type[DataBox], optional: bool = False):
        serializer = resolve_serializer(type_)
        if serializer is None:
            raise UnsupportedTypeError(type_)
        # Fail at registration rather than on the first value.
        box_class.check_capabilities(type_)
        self.type_ = type_
        self.optional = optional
        self._box_class = box_class
        self._serializer = serializer

    def __call__(self, raw: t.Any, *, nullable: bool = False) -> t.Optional[DataBox]:
        if raw is None and (self.optional or nullable):
            return None
        try:
            value = self._serializer.deserialize(self.type_, raw)
        except (TypeError, ValueError) as e:
            raise CodecError(f"failed to deserialize a {self.type_.__qualname__!r} value") from e
        return self._box_class(value)

    def __repr__(self):
        optional = ", optional" if self.optional else ""
        return f"TypeFactory({self.type_.__qualname__}{optional})"


class BaseRegistry(ABC, t.Generic[IdT]):
    """
    Base class for registries which map an identifier (a type tag or a map key) to the :class:`TypeFactory` that
    deserializes data found under it. Registering the same identifier again replaces its factory.

    Registries are plain values: build one, register the types a piece of data may contain, and pass it data to
    deserialize. Nothing is registered globally.

    Parameters
    ----------
    box_class : DataBox type, optional
        The kind of box deserialized values are stored in. Defaults to :class:`~typed_store.types.data_box.DataBox`.
    """

    def __init__(self, *, box_class: t.Type[DataBox] = DataBox):
        self._box_class = box_class
        self._factories: t.Dict[IdT, TypeFactory] = {}

    @property
    def box_class(self) -> t.Type[DataBox]:
        return self._box_class

    def _add(self, id_: IdT, type_: type, optional: bool = False) -> TypeFactory:
        factory = TypeFactory(type_, self._box_class, optional)
        self._factories[id_] = factory
        return factory

    def get_type(self, id_: IdT) -> t.Optional[type]:
        """Returns the type registered under ``id_``, or ``None``."""
        factory = self._factories.get(id_)
        return None if factory is None else factory.type_

    def keys(self) -> t.Iterator[IdT]:
        return iter(self._factories.keys())

    def __contains__(self, id_) -> bool:
        return id_ in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self):
        # Factories are opaque, so only the identifiers are shown.
        entries = ", ".join(f"{id_!r}: .." for id_ in self._factories)
        return f"{type(self).__name__}({{{entries}}})"

    @staticmethod
    def _expect_mapping(data: t.Any, what: str) -> t.Mapping:
        if not isinstance(data, collections_abc.Mapping):
            raise CodecError(f"expected {what}, got {type(data).__name__}")
        return data
