"""
The type-erased value holder (:class:`~typed_store.types.data_box.DataBox`), the stable type tags values are written
with (in the :mod:`~typed_store.types.tags` module), and the serializers that convert values to and from JSON-model data
(in the :mod:`~typed_store.types.serializers` module).
"""
