import copy
import typing as t

from loguru import logger

from typed_store.codec import Codec, JsonCodec
from typed_store.errors import CodecError, UnregisteredKeyError
from typed_store.registry.base import BaseRegistry
from typed_store.type_map.base import K
from typed_store.type_map.untagged import TypeMapOpt, UnknownEntries, UntaggedTypeMap
from typed_store.types.data_box import DataBox


MapT = t.TypeVar("MapT", bound=UntaggedTypeMap)


class KeyRegistry(BaseRegistry[K]):
    """
    Maps the keys of untagged data to the types of the values found under them. Untagged data carries no type
    information, so whoever builds the registry must know which type to expect under each key. E.g.

    >>> registry = KeyRegistry()
    ... registry.register("one", int)
    ... registry.register("three", A)
    ... type_map = registry.deserialize_map({"one": 1, "three": 3})
    ... type_map.get("three", A)  # A(3)

    Parameters
    ----------
    capture_unknown : bool, optional
        What to do with keys in the data that have no registered type. If ``False`` (the default), deserialization
        fails with :class:`~typed_store.errors.UnregisteredKeyError`. If ``True``, their raw values are kept in the
        resulting map's :attr:`~typed_store.type_map.untagged.UntaggedTypeMap.unknown_entries` and deserialization
        carries on.
    box_class : DataBox type, optional
        The kind of box deserialized values are stored in.
    """

    def __init__(self, *, capture_unknown: bool = False, box_class: t.Type[DataBox] = DataBox):
        super().__init__(box_class=box_class)
        self.capture_unknown = capture_unknown

    def register(self, key: K, type_: type):
        """Registers ``type_`` as the type of values found under ``key``, replacing any earlier registration."""
        self._add(key, type_)
        logger.debug(f"registered type {type_.__qualname__} for key {key!r}")

    def register_optional(self, key: K, type_: type):
        """
        Like :meth:`register`, except a ``null`` value under ``key`` is tolerated: it deserializes as an absent value
        rather than failing.
        """
        self._add(key, type_, optional=True)
        logger.debug(f"registered optional type {type_.__qualname__} for key {key!r}")

    def deserialize_single(self, data: t.Mapping[K, t.Any]) -> t.Optional[DataBox]:
        """
        Deserializes a single value from a mapping with one entry, whose key determines the value's type. Returns
        ``None`` only for a ``null`` value under an optional key.
        """
        data = self._expect_mapping(data, "a map with a single entry")
        if len(data) != 1:
            raise CodecError(f"expected a single entry, got {len(data)} entries")
        ((key, raw),) = data.items()
        factory = self._factories.get(key)
        if factory is None:
            raise UnregisteredKeyError(key, self._factories.keys())
        return self._call_factory(key, raw)

    def deserialize_map(self, data: t.Mapping[K, t.Any]) -> UntaggedTypeMap[K]:
        """
        Deserializes a mapping from keys to bare values into an :class:`UntaggedTypeMap`. Entries under optional keys
        whose value is ``null`` are left out of the map. Fails on the first invalid entry; no partially filled map is
        ever returned.
        """
        return self._deserialize_into(UntaggedTypeMap(box_class=self._box_class), data, self.capture_unknown)

    def deserialize_map_with_unknowns(self, data: t.Mapping[K, t.Any]) -> t.Tuple[UntaggedTypeMap[K], UnknownEntries]:
        """
        Like :meth:`deserialize_map`, except entries with unregistered keys are always captured, whatever
        ``capture_unknown`` is set to. Returns the map and its unknown entries.
        """
        type_map = self._deserialize_into(UntaggedTypeMap(box_class=self._box_class), data, True)
        return type_map, type_map.unknown_entries

    def deserialize_map_opt(self, data: t.Mapping[K, t.Any]) -> TypeMapOpt[K]:
        """
        Deserializes a mapping from keys to optional bare values into a :class:`TypeMapOpt`. A ``null`` value under any
        registered key is stored as an absent value.
        """
        return self._deserialize_into(TypeMapOpt(box_class=self._box_class), data, self.capture_unknown)

    def deserialize_map_opt_with_unknowns(self, data: t.Mapping[K, t.Any]) -> t.Tuple[TypeMapOpt[K], UnknownEntries]:
        """Like :meth:`deserialize_map_opt`, always capturing entries with unregistered keys."""
        type_map = self._deserialize_into(TypeMapOpt(box_class=self._box_class), data, True)
        return type_map, type_map.unknown_entries

    def loads(self, text: t.Union[str, bytes], codec: t.Optional[Codec] = None) -> UntaggedTypeMap[K]:
        """Decodes ``text`` with ``codec`` (JSON by default), then deserializes it with :meth:`deserialize_map`."""
        codec = codec or JsonCodec()
        return self.deserialize_map(codec.loads(text))

    def loads_opt(self, text: t.Union[str, bytes], codec: t.Optional[Codec] = None) -> TypeMapOpt[K]:
        """Decodes ``text`` with ``codec`` (JSON by default), then deserializes it with :meth:`deserialize_map_opt`."""
        codec = codec or JsonCodec()
        return self.deserialize_map_opt(codec.loads(text))

    def _deserialize_into(self, type_map: MapT, data: t.Mapping[K, t.Any], capture_unknown: bool) -> MapT:
        data = self._expect_mapping(data, "a map of values")
        nullable = type_map.optional_values
        for key, raw in data.items():
            if key not in self._factories:
                if not capture_unknown:
                    raise UnregisteredKeyError(key, self._factories.keys())
                type_map.insert_unknown_entry(key, copy.deepcopy(raw))
                continue
            boxed = self._call_factory(key, raw, nullable)
            if boxed is None and not nullable:
                # A null optional value; leave the key absent.
                continue
            type_map.insert_raw(key, boxed)
        if type_map.unknown_entries:
            logger.info(
                f"{len(type_map.unknown_entries)} entries had no registered type and were kept as unknown entries: "
                f"{list(type_map.unknown_entries)}"
            )
        logger.debug(f"deserialized {len(type_map)} untagged entries")
        return type_map

    def _call_factory(self, key: K, raw: t.Any, nullable: bool = False) -> t.Optional[DataBox]:
        try:
            return self._factories[key](raw, nullable=nullable)
        except CodecError as e:
            raise CodecError(str(e), key=key) from e.__cause__
