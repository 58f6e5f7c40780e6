"""
Registries which deserialize data back into type maps. A :class:`~typed_store.registry.tagged.TagRegistry` resolves the
type tags written into tagged data, and a :class:`~typed_store.registry.untagged.KeyRegistry` knows the type expected
under each key of untagged data.
"""
