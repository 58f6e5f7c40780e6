"""
A map that can store values of any serializable type and give them back as their original types, including after a
round trip through JSON or YAML. Two wire layouts are supported:

- **Tagged** (:class:`TaggedTypeMap` with :class:`TagRegistry`): every value is written next to its type tag, so the
  data describes itself.
- **Untagged** (:class:`UntaggedTypeMap` and :class:`TypeMapOpt` with :class:`KeyRegistry`): values are written bare,
  and the registry supplies the type expected under each key.
"""
from typed_store.codec import Codec, JsonCodec, YamlCodec
from typed_store.errors import CodecError, TypeStoreError, UnknownTagError, UnregisteredKeyError, UnsupportedTypeError
from typed_store.registry.tagged import TagRegistry
from typed_store.registry.untagged import KeyRegistry
from typed_store.type_map.tagged import TaggedTypeMap
from typed_store.type_map.untagged import TypeMapOpt, UnknownEntries, UntaggedTypeMap
from typed_store.types.data_box import DataBox, DisplayDataBox, box
from typed_store.types.resource import ResourceHandle
from typed_store.types.tags import tagged, type_tag
