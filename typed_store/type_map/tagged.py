import typing as t

from typed_store.type_map.base import BaseTypeMap, K
from typed_store.types.data_box import DataBox


class TaggedTypeMap(BaseTypeMap[K]):
    """
    A type map whose serialized form is self-describing: each value is wrapped in a single-entry mapping from its type
    tag to the value, e.g.

    .. code-block:: yaml

       one:
         int: 1
       three:
         my_app.A: 3

    Such data can be read back with a :class:`~typed_store.registry.tagged.TagRegistry` that has every tag used
    registered.
    """

    def _serialize_entry(self, boxed: DataBox) -> t.Dict[str, t.Any]:
        return {boxed.type_name: boxed.serialize()}
