import typing as t


if t.TYPE_CHECKING:
    from typed_store.types.data_box import DataBox

T = t.TypeVar("T")


class ResourceHandle:
    """
    A boxed value handed over to an external resource manager. The handle keeps the box's downcast identity: it can be
    read back as exactly the class the value was boxed as, and nothing else.
    """

    def __init__(self, box: "DataBox"):
        self._box = box

    @property
    def type_(self) -> type:
        return self._box.type_

    def downcast_ref(self, type_: t.Type[T]) -> t.Optional[T]:
        return self._box.downcast_ref(type_)

    def downcast_mut(self, type_: t.Type[T]) -> t.Optional[T]:
        return self._box.downcast_mut(type_)

    def into_box(self) -> "DataBox":
        """Returns the box this handle was made from."""
        return self._box

    def __repr__(self):
        return f"ResourceHandle({self._box!r})"
