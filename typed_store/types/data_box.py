import copy
import typing as t

from pydantic_core import PydanticSerializationError

from typed_store.errors import CodecError, UnsupportedTypeError
from typed_store.types.resource import ResourceHandle
from typed_store.types.serializers import ValueSerializer, resolve_serializer
from typed_store.types.tags import type_tag


T = t.TypeVar("T")


class DataBox:
    """
    Owns exactly one value of some concrete type, erased behind a uniform interface. The box remembers the exact class
    of its value, so the value can only ever be read back as that class:

    >>> box = DataBox(1)
    ... box.downcast_ref(int)  # 1
    ... box.downcast_ref(str)  # None
    ... box.downcast_ref(bool)  # None, exact class identity is used, not ``isinstance``.

    The box can serialize its value without the caller knowing its type, using the value serializer that was resolved
    for the value's class when it was boxed.

    *Note*: only the boxed value's own class is remembered. Elements of plain containers (``list``, ``dict``, ...)
    must be JSON-native to survive a round trip: ``[Point(x=1, y=2)]`` boxed as a ``list`` comes back as
    ``[{"x": 1, "y": 2}]``, and non-string ``dict`` keys come back as strings. Give typed collections a type of their
    own instead, e.g. ``RootModel[List[Point]]`` or a pydantic model with a ``List[Point]`` field.

    Parameters
    ----------
    value : object
        The value to box. Its class must be supported by one of the value serializers in
        :mod:`typed_store.types.serializers`, otherwise :class:`~typed_store.errors.UnsupportedTypeError` is raised.
    """

    def __init__(self, value: t.Any):
        if isinstance(value, DataBox):
            raise TypeError("cannot box a DataBox; use `box()` to pass existing boxes through")
        type_ = type(value)
        serializer = resolve_serializer(type_)
        if serializer is None:
            raise UnsupportedTypeError(type_)
        self.check_capabilities(type_)
        self._value = value
        self._type = type_
        self._serializer: ValueSerializer = serializer

    @classmethod
    def check_capabilities(cls, type_: type):
        """
        Hook for subclasses that require more of their values than serializability. Raises
        :class:`~typed_store.errors.UnsupportedTypeError` if ``type_`` lacks a required capability.
        """
        pass

    @property
    def type_(self) -> type:
        """The exact class of the boxed value."""
        return self._type

    @property
    def type_name(self) -> str:
        """The boxed value's stable type tag. See :func:`~typed_store.types.tags.type_tag`."""
        return type_tag(self._type)

    def is_type(self, type_: type) -> bool:
        return self._type is type_

    def downcast_ref(self, type_: t.Type[T]) -> t.Optional[T]:
        """Returns the boxed value if its class is exactly ``type_``, else ``None``."""
        if self._type is type_:
            return self._value
        return None

    def downcast_mut(self, type_: t.Type[T]) -> t.Optional[T]:
        """
        Like :meth:`downcast_ref`. The returned object is the boxed object itself rather than a copy, so in-place
        changes to a mutable value are seen by the box and by whichever container owns it.
        """
        return self.downcast_ref(type_)

    def into_inner(self, type_: t.Type[T]) -> t.Union[T, "DataBox"]:
        """
        Unwraps the boxed value if its class is exactly ``type_``. Otherwise this same box is returned, so the value is
        never lost by a failed unwrap.
        """
        if self._type is type_:
            return self._value
        return self

    def serialize(self) -> t.Any:
        """Converts the boxed value to JSON-model data using its own serializer."""
        try:
            return self._serializer.serialize(self._value)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise CodecError(
                f"failed to serialize value with the {self._serializer.name} serializer", tag=self.type_name
            ) from e

    def clone(self) -> "DataBox":
        """Returns a new box holding a deep copy of this box's value."""
        return copy.deepcopy(self)

    def into_resource(self) -> ResourceHandle:
        """
        Upcasts this box into a handle that can be owned by an external resource manager. The handle downcasts
        exactly like this box does.
        """
        return ResourceHandle(self)

    def __deepcopy__(self, memo):
        clone = copy.copy(self)
        clone._value = copy.deepcopy(self._value, memo)
        return clone

    def __eq__(self, other):
        if not isinstance(other, DataBox):
            return NotImplemented
        return self._type is other._type and self._serializer.equals(self._value, other._value)

    __hash__ = None  # mutable

    def __repr__(self):
        return f"{type(self).__name__}(type={self.type_name!r}, value={self._value!r})"


class DisplayDataBox(DataBox):
    """
    A :class:`DataBox` which also requires its value to have a human readable string form. ``str(box)`` gives the
    value's own ``str``. Classes which customize neither ``__str__`` nor ``__repr__`` are rejected.
    """

    @classmethod
    def check_capabilities(cls, type_: type):
        if type_.__str__ is object.__str__ and type_.__repr__ is object.__repr__:
            raise UnsupportedTypeError(type_, "it does not define `__str__` or `__repr__`")

    def __str__(self):
        return str(self._value)


BoxT = t.TypeVar("BoxT", bound=DataBox)


def box(value: t.Any, box_class: t.Type[BoxT] = DataBox) -> BoxT:
    """
    Boxes ``value`` into a ``box_class``. A value that is already a ``box_class`` is returned unchanged, and a value
    that is a different kind of box is re-boxed into ``box_class``.
    """
    if isinstance(value, box_class):
        return value
    if isinstance(value, DataBox):
        return box_class(value._value)
    return box_class(value)
