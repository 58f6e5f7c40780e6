import typing as t

from loguru import logger

from typed_store.codec import Codec, JsonCodec
from typed_store.errors import CodecError, UnknownTagError
from typed_store.registry.base import BaseRegistry
from typed_store.type_map.base import K
from typed_store.type_map.tagged import TaggedTypeMap
from typed_store.types.data_box import DataBox
from typed_store.types.tags import type_tag


class TagRegistry(BaseRegistry[str]):
    """
    Maps type tags to the types they stand for, so data written by :class:`~typed_store.type_map.tagged.TaggedTypeMap`
    can be read back as the types it was written as. E.g.

    >>> registry = TagRegistry()
    ... registry.register(int)
    ... registry.register(A)
    ... type_map = registry.deserialize_map({"one": {"int": 1}, "three": {"my_app.A": 3}})
    ... type_map.get("three", A)  # A(3)

    Each type a piece of data may contain must be registered before the data is deserialized.
    """

    def register(self, type_: type, tag: t.Optional[str] = None) -> str:
        """
        Registers ``type_`` under its :func:`~typed_store.types.tags.type_tag`, or under ``tag`` if given, and returns
        the tag used. Registering the same type twice has no further effect.

        Tagged maps always write a value's own :func:`~typed_store.types.tags.type_tag`; an explicit ``tag`` is for
        reading data written under another tag, e.g. before a class was renamed.
        """
        tag = type_tag(type_) if tag is None else tag
        self._add(tag, type_)
        logger.debug(f"registered type {type_.__qualname__} under tag {tag!r}")
        return tag

    def deserialize_single(self, data: t.Mapping[str, t.Any]) -> DataBox:
        """Deserializes a single tagged value, i.e. a mapping with one entry from a type tag to a value."""
        tag, raw = self._split_tagged(data)
        return self._deserialize_tagged(tag, raw)

    def deserialize_map(self, data: t.Mapping[K, t.Any]) -> TaggedTypeMap[K]:
        """
        Deserializes a mapping from keys to tagged values into a :class:`TaggedTypeMap`. Fails on the first entry whose
        tag is not registered (:class:`~typed_store.errors.UnknownTagError`) or whose data is invalid
        (:class:`~typed_store.errors.CodecError`); no partially filled map is ever returned.
        """
        data = self._expect_mapping(data, "a map of tagged values")
        type_map: TaggedTypeMap[K] = TaggedTypeMap(box_class=self._box_class)
        for key, value in data.items():
            try:
                tag, raw = self._split_tagged(value)
            except CodecError as e:
                raise CodecError(str(e), key=key) from e
            type_map.insert_raw(key, self._deserialize_tagged(tag, raw, key))
        logger.debug(f"deserialized {len(type_map)} tagged entries")
        return type_map

    def loads(self, text: t.Union[str, bytes], codec: t.Optional[Codec] = None) -> TaggedTypeMap:
        """Decodes ``text`` with ``codec`` (JSON by default), then deserializes it with :meth:`deserialize_map`."""
        codec = codec or JsonCodec()
        return self.deserialize_map(codec.loads(text))

    def _deserialize_tagged(self, tag: str, raw: t.Any, key: t.Any = None) -> DataBox:
        factory = self._factories.get(tag)
        if factory is None:
            raise UnknownTagError(tag, self._factories.keys(), key=key)
        try:
            return factory(raw)
        except CodecError as e:
            raise CodecError(str(e), key=key, tag=tag) from e.__cause__

    def _split_tagged(self, value: t.Any) -> t.Tuple[str, t.Any]:
        value = self._expect_mapping(value, "a tagged value, i.e. a map with a single type tag entry")
        if len(value) != 1:
            raise CodecError(f"expected a single type tag entry, got {len(value)} entries")
        ((tag, raw),) = value.items()
        if not isinstance(tag, str):
            raise CodecError(f"expected a string type tag, got {type(tag).__name__}")
        return tag, raw
