"""
Maps from keys to values of any serializable type. Contains a base class for the shared map behavior, as well as
subclasses which serialize with type tags (:class:`~typed_store.type_map.tagged.TaggedTypeMap`) or without them
(:class:`~typed_store.type_map.untagged.UntaggedTypeMap` and :class:`~typed_store.type_map.untagged.TypeMapOpt`).
"""
