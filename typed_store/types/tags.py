import builtins
import typing as t


TAG_ATTRIBUTE = "__type_tag__"

T = t.TypeVar("T", bound=type)


def tagged(tag: str) -> t.Callable[[T], T]:
    """
    Class decorator which gives a class an explicit, stable type tag. The tag is what :class:`TaggedTypeMap` writes
    next to each value of the class, and what :class:`TagRegistry` resolves back to it, so it should not change once
    data has been persisted. E.g.

    >>> @tagged("point")
    ... class Point(BaseModel):
    ...     x: int
    ...     y: int
    """
    if not isinstance(tag, str) or not tag:
        raise ValueError("a type tag must be a non-empty string")

    def decorator(cls: T) -> T:
        # Stored in the class's own namespace so subclasses don't inherit it.
        setattr(cls, TAG_ATTRIBUTE, tag)
        return cls

    return decorator


def type_tag(type_: type) -> str:
    """
    Returns the stable tag for ``type_``. In order of precedence:

    1. An explicit tag given with the :func:`tagged` decorator.
    2. The bare name of a builtin type, e.g. ``int`` or ``str``.
    3. The type's module and qualified name, e.g. ``my_app.models.Point``.

    Option 3 changes whenever the class is moved or renamed, so prefer explicit tags for data that outlives the code
    that wrote it.
    """
    explicit = vars(type_).get(TAG_ATTRIBUTE)
    if explicit is not None:
        return explicit
    if type_.__module__ == builtins.__name__:
        return type_.__qualname__
    return f"{type_.__module__}.{type_.__qualname__}"
