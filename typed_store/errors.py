"""
Exceptions raised by the type store. Everything raised on purpose by this package inherits from
:class:`TypeStoreError`, and also from the builtin exception that best describes it, so callers can catch either.

A type mismatch on a typed lookup is never an error: it is reported as ``None``.
"""
import typing as t

from typed_store.utils import format_available


class TypeStoreError(Exception):
    """Base class for all errors raised by this package."""


class UnsupportedTypeError(TypeStoreError, TypeError):
    """A value was boxed whose type has no serializer, or lacks a capability the container requires."""

    def __init__(self, type_: type, reason: str = "no value serializer supports it"):
        self.type_ = type_
        super().__init__(f"cannot store a value of type `{type_.__qualname__}`: {reason}")


class UnknownTagError(TypeStoreError, KeyError):
    """Tagged deserialization met a type tag that has no registered factory."""

    def __init__(self, tag: str, available: t.Iterable[str], key: t.Any = None):
        self.tag = tag
        self.key = key
        self.available = list(available)
        super().__init__(tag)

    def __str__(self):
        message = f"Type `{self.tag!r}` not registered in type registry."
        if self.key is not None:
            message += f" (entry {self.key!r})"
        return message + "\nAvailable types are:\n\n" + format_available(self.available) + "\n"


class UnregisteredKeyError(TypeStoreError, KeyError):
    """Untagged deserialization in strict mode met a key that has no registered factory."""

    def __init__(self, key: t.Any, available: t.Iterable[t.Any]):
        self.key = key
        self.available = list(available)
        super().__init__(key)

    def __str__(self):
        return (
            f"Type key `{self.key!r}` not registered in type registry."
            + "\nAvailable types are:\n\n"
            + format_available(self.available)
            + "\n"
        )


class CodecError(TypeStoreError, ValueError):
    """
    The underlying data could not be encoded or decoded, e.g. malformed text, or data that does not match the type
    registered for it. ``key`` and ``tag`` locate the offending entry when known. The original exception is chained
    as ``__cause__``.
    """

    def __init__(self, message: str, *, key: t.Any = None, tag: t.Optional[str] = None):
        self.key = key
        self.tag = tag
        context = []
        if key is not None:
            context.append(f"key {key!r}")
        if tag is not None:
            context.append(f"tag {tag!r}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
