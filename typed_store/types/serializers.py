"""
Value serializers turn a stored value into JSON-model data (dicts, lists, strings, numbers, booleans and ``None``) and
back again. Each boxed value resolves its serializer once, when it is boxed, so the containers never need to know which
concrete type they are serializing.

Most types are handled by pydantic: builtins, pydantic models, dataclasses, enums, datetimes, and containers of those.
Numpy arrays are supported when the ``ml`` extra is installed, which can be installed in this way:

.. code-block::

   pip install typed-store[ml]
"""
import json
import typing as t
from abc import ABC, abstractmethod
from functools import lru_cache
from io import BytesIO

from pydantic import TypeAdapter
from pydantic.errors import PydanticSchemaGenerationError


try:
    import numpy as np
except ImportError:
    _has_numpy = False
else:
    _has_numpy = True


class ValueSerializer(ABC):
    """
    When implemented, provides functionality for converting instances of some type or group of types to and from
    JSON-model data.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """A name identifying this serializer, used in error messages."""
        pass

    @abstractmethod
    def is_serializable(self, type_: type) -> bool:
        """Whether values whose exact class is ``type_`` can be handled by this serializer."""
        pass

    @abstractmethod
    def serialize(self, value: t.Any) -> t.Any:
        pass

    @abstractmethod
    def deserialize(self, type_: type, data: t.Any) -> t.Any:
        """Reconstructs an instance of ``type_`` from ``data``, which was produced by :meth:`serialize`."""
        pass

    def equals(self, a: t.Any, b: t.Any) -> bool:
        """Compares two values this serializer handles."""
        return bool(a == b)


@lru_cache(maxsize=None)
def _type_adapter(type_: type) -> TypeAdapter:
    return TypeAdapter(type_)


class PydanticSerializer(ValueSerializer):
    """Serializes any type pydantic can build a schema for, using a cached :class:`pydantic.TypeAdapter` per type."""

    name = "pydantic"

    def is_serializable(self, type_: type) -> bool:
        try:
            _type_adapter(type_)
        except PydanticSchemaGenerationError:
            return False
        return True

    def serialize(self, value: t.Any) -> t.Any:
        return _type_adapter(type(value)).dump_python(value, mode="json")

    def deserialize(self, type_: type, data: t.Any) -> t.Any:
        # Strict JSON mode: the wire type must match, but ISO datetimes and enum values still parse from strings.
        return _type_adapter(type_).validate_json(json.dumps(data), strict=True)


def encode_numpy(data: "np.ndarray", mode="w"):
    """
    Serializes a numpy array to ``bytes`` or `str`, depending on ``mode``. Includes shape, datatype, and endianness
    information for perfect cross-platform reconstruction.

    Parameters
    ----------
    data : np.ndarray
        The data to serialize.
    mode : {'w', 'wb'}
        The serialization mode to use. if ``mode=="w"``, the output will be a string. If ``mode=="wb"``, the output
        will be ``bytes``.
    """
    mf = BytesIO()
    np.save(mf, data, allow_pickle=False)
    value = mf.getvalue()
    mf.close()
    if mode == "w":
        return value.decode("latin-1")
    return value


def decode_numpy(data: t.Union[str, bytes]):
    """
    Deserializes a numpy array from ``bytes`` or ``str``, which was serialized using the :func:`encode_numpy` method.
    """
    if isinstance(data, str):
        data = data.encode("latin-1")
    mf = BytesIO(data)
    arr = np.load(mf, allow_pickle=False)
    mf.close()
    return arr


class NumpySerializer(ValueSerializer):
    """Serializes numpy arrays to latin-1 strings. Requires the ``ml`` extra."""

    name = "numpy"

    def is_serializable(self, type_: type) -> bool:
        return _has_numpy and type_ is np.ndarray

    def serialize(self, value: "np.ndarray") -> str:
        return encode_numpy(value, mode="w")

    def deserialize(self, type_: type, data: t.Any) -> "np.ndarray":
        if not isinstance(data, (str, bytes)):
            raise TypeError(f"cannot decode a numpy array from {type(data).__name__} data")
        try:
            return decode_numpy(data)
        except EOFError as e:
            raise ValueError("numpy array data is empty or truncated") from e

    def equals(self, a: "np.ndarray", b: "np.ndarray") -> bool:
        return a.dtype == b.dtype and np.array_equal(a, b)


_serializers: t.Tuple[ValueSerializer, ...] = (NumpySerializer(), PydanticSerializer())


def resolve_serializer(type_: type) -> t.Optional[ValueSerializer]:
    """Returns the first serializer that supports ``type_``, or ``None`` if none of them do."""
    for serializer in _serializers:
        if serializer.is_serializable(type_):
            return serializer
    return None
