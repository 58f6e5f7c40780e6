import copy
import typing as t
from types import MappingProxyType

from typed_store.type_map.base import BaseTypeMap, K
from typed_store.types.data_box import DataBox


UnknownEntries = t.Mapping[K, t.Any]
"""
A read-only mapping of entries which could not be deserialized because their keys were not registered, from each key to
its raw, still serialized value.
"""


class UntaggedTypeMap(BaseTypeMap[K]):
    """
    A type map whose serialized form is a plain mapping from each key to its bare value, e.g.

    .. code-block:: yaml

       one: 1
       three: 3

    No type information is written, so reading the data back needs a
    :class:`~typed_store.registry.untagged.KeyRegistry` which knows the type to expect under each key.

    A map produced by deserializing in capture mode also holds the :attr:`unknown_entries` that had no registered
    type. They are kept apart from the typed entries: typed lookups never see them and they are not serialized.
    """

    def __init__(self, entries: t.Optional[t.Mapping[K, t.Any]] = None, *, box_class: t.Type[DataBox] = DataBox):
        super().__init__(entries, box_class=box_class)
        self._unknown_entries: t.Dict[K, t.Any] = {}

    def _serialize_entry(self, boxed: DataBox) -> t.Any:
        return boxed.serialize()

    @property
    def unknown_entries(self) -> UnknownEntries:
        """The entries encountered during deserialization for which no type was registered."""
        return MappingProxyType(self._unknown_entries)

    def get_unknown_entry(self, key: K) -> t.Any:
        """
        Returns the raw value of the unknown entry under ``key``, or ``None``. A raw value may itself be ``None``;
        check ``key in type_map.unknown_entries`` to tell the two apart.
        """
        return self._unknown_entries.get(key)

    def insert_unknown_entry(self, key: K, raw: t.Any) -> t.Any:
        """
        Records an unknown entry. Used during deserialization. Returns the raw value previously recorded under ``key``,
        if any.
        """
        previous = self._unknown_entries.get(key)
        self._unknown_entries[key] = raw
        return previous

    def into_parts(self) -> t.Tuple[t.Dict[K, t.Optional[DataBox]], t.Dict[K, t.Any]]:
        """Returns the typed entries and the unknown entries of this map, as plain ``dict``s."""
        return self.into_inner(), dict(self._unknown_entries)

    def __deepcopy__(self, memo):
        clone = super().__deepcopy__(memo)
        clone._unknown_entries = copy.deepcopy(self._unknown_entries, memo)
        return clone

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._entries == other._entries and self._unknown_entries == other._unknown_entries

    __hash__ = None


class TypeMapOpt(UntaggedTypeMap[K]):
    """
    An untagged type map whose values are optional: where :class:`UntaggedTypeMap` maps keys to values, this maps keys
    to values or ``None``. Absent values are stored as ``None`` and serialized as ``null``.

    >>> type_map = TypeMapOpt()
    ... type_map.insert("one", 1)
    ... type_map.insert("two", None)
    ... type_map.to_data()  # {"one": 1, "two": None}
    """

    optional_values = True

    def is_null(self, key: K) -> bool:
        """Whether ``key`` is present with an absent value. ``False`` for keys that are not present at all."""
        return key in self._entries and self._entries[key] is None
