import copy
import typing as t
from abc import ABC, abstractmethod

from loguru import logger

from typed_store.codec import Codec, JsonCodec
from typed_store.errors import CodecError
from typed_store.types.data_box import DataBox, box


K = t.TypeVar("K", bound=t.Hashable)  # used to help static type checking tools
T = t.TypeVar("T")


class BaseTypeMap(ABC, t.Generic[K]):
    """
    Abstract base class for a map from keys to values of any serializable type. Values are stored type erased in
    :class:`~typed_store.types.data_box.DataBox` objects and read back by naming the type they were stored as:

    >>> type_map.insert("one", 1)
    ... type_map.get("one", int)  # 1
    ... type_map.get("one", str)  # None

    Keys iterate in the order they were first inserted. Overwriting a key keeps its original position. Subclasses
    decide how each entry is laid out when the map is serialized.

    Parameters
    ----------
    entries : mapping, optional
        Initial entries, inserted in iteration order.
    box_class : DataBox type, optional
        The kind of box values are stored in, i.e. the capabilities every value must have. Defaults to
        :class:`~typed_store.types.data_box.DataBox`.
    """

    optional_values = False
    """Whether ``None`` may be stored as an absent value instead of being boxed."""

    def __init__(self, entries: t.Optional[t.Mapping[K, t.Any]] = None, *, box_class: t.Type[DataBox] = DataBox):
        self._box_class = box_class
        # Entries in the map can be resolved via `self._entries[key]`.
        self._entries: t.Dict[K, t.Optional[DataBox]] = {}
        if entries is not None:
            for key, value in entries.items():
                self.insert(key, value)

    @abstractmethod
    def _serialize_entry(self, boxed: DataBox) -> t.Any:
        """Returns the wire representation of a single stored value."""
        pass

    @property
    def box_class(self) -> t.Type[DataBox]:
        return self._box_class

    def insert(self, key: K, value: t.Any) -> t.Optional[DataBox]:
        """
        Boxes ``value`` and stores it under ``key``. Returns the box previously stored under ``key``, or ``None`` if
        there was none.

        ``value`` may itself be a :class:`~typed_store.types.data_box.DataBox`, in which case a clone of it is stored,
        so the map always owns its boxes exclusively.

        *Note*: on maps with ``optional_values``, ``None`` is also returned when ``key`` held an absent value. Check
        :meth:`contains_key` beforehand to tell the two apart.
        """
        if value is None and self.optional_values:
            return self.insert_raw(key, None)
        if isinstance(value, DataBox):
            value = value.clone()
        return self.insert_raw(key, box(value, self._box_class))

    def insert_raw(self, key: K, boxed: t.Optional[DataBox]) -> t.Optional[DataBox]:
        """
        Stores an already boxed value under ``key``, returning the previously stored box, if any. The box itself is
        stored, not a copy: the caller hands it over and should not keep using it.
        """
        if boxed is None:
            if not self.optional_values:
                raise TypeError(f"{type(self).__name__} cannot store absent values")
        elif not isinstance(boxed, self._box_class):
            raise TypeError(f"expected a {self._box_class.__name__}, got {type(boxed).__name__}")
        previous = self._entries.get(key)
        self._entries[key] = boxed
        return previous

    def get(self, key: K, type_: t.Type[T]) -> t.Optional[T]:
        """
        Returns the value stored under ``key`` if it is exactly of type ``type_``. Returns ``None`` both when there is
        no such key and when the stored value is of another type; use :meth:`contains_key` to tell them apart.
        """
        boxed = self._entries.get(key)
        if boxed is None:
            return None
        return boxed.downcast_ref(type_)

    def get_mut(self, key: K, type_: t.Type[T]) -> t.Optional[T]:
        """Like :meth:`get`, returning the stored object itself so in-place changes are kept by the map."""
        boxed = self._entries.get(key)
        if boxed is None:
            return None
        return boxed.downcast_mut(type_)

    def get_raw(self, key: K) -> t.Optional[DataBox]:
        """Returns the box stored under ``key``, or ``None``."""
        return self._entries.get(key)

    def remove(self, key: K, type_: t.Type[T]) -> t.Optional[T]:
        """
        Removes the entry under ``key`` and returns its value if it is exactly of type ``type_``.

        *Note*: the entry is removed whenever ``key`` is present, even when its value is not a ``type_``. In that case
        the value is discarded and ``None`` is returned. Use :meth:`get_raw` and :meth:`remove_raw` to remove only
        after checking the type.
        """
        boxed = self._entries.pop(key, None)
        if boxed is None:
            return None
        value = boxed.downcast_ref(type_)
        if value is None:
            logger.debug(
                f"removed {key!r} holding a {boxed.type_name!r} value, which is not a {type_.__qualname__!r}; "
                "the value was discarded"
            )
        return value

    def remove_raw(self, key: K) -> t.Optional[DataBox]:
        """Removes the entry under ``key``, returning its box, or ``None`` if there was no such key."""
        return self._entries.pop(key, None)

    def contains_key(self, key: K) -> bool:
        return key in self._entries

    def keys(self) -> t.Iterator[K]:
        return iter(self._entries.keys())

    def items(self) -> t.Iterator[t.Tuple[K, t.Optional[DataBox]]]:
        """Lazily iterates over ``(key, box)`` pairs in insertion order."""
        return iter(self._entries.items())

    def into_inner(self) -> t.Dict[K, t.Optional[DataBox]]:
        """Returns the entries of this map as a plain ``dict`` of boxes, in insertion order."""
        return dict(self._entries)

    def to_data(self) -> t.Dict[K, t.Any]:
        """Serializes this map to JSON-model data."""
        data = {}
        for key, boxed in self._entries.items():
            if boxed is None:
                data[key] = None
                continue
            try:
                data[key] = self._serialize_entry(boxed)
            except CodecError as e:
                raise CodecError("failed to serialize entry", key=key, tag=e.tag) from e
        return data

    def dumps(self, codec: t.Optional[Codec] = None) -> str:
        """Serializes this map to text, using ``codec`` (JSON by default)."""
        codec = codec or JsonCodec()
        return codec.dumps(self.to_data())

    def clone(self):
        """Returns a deep copy of this map. Each value is copied using ``copy.deepcopy``."""
        return copy.deepcopy(self)

    def __deepcopy__(self, memo):
        clone = copy.copy(self)
        clone._entries = {key: copy.deepcopy(boxed, memo) for key, boxed in self._entries.items()}
        return clone

    def __contains__(self, key) -> bool:
        return self.contains_key(key)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> t.Iterator[K]:
        return self.keys()

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None

    def __repr__(self):
        entries = ", ".join(f"{key!r}: {boxed!r}" for key, boxed in self._entries.items())
        return f"{type(self).__name__}({{{entries}}})"
