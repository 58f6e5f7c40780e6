"""
Codecs convert between text and JSON-model data (dicts, lists and scalars). Containers and registries only ever deal in
JSON-model data; a codec is what puts it on the wire. JSON is always available. YAML requires the ``yaml`` extra, which
can be installed in this way:

.. code-block::

   pip install typed-store[yaml]
"""
import json
import typing as t
from abc import ABC, abstractmethod

from typed_store.errors import CodecError
from typed_store.utils import requires_extras


try:
    import yaml
except ImportError:
    _has_yaml_deps = False
else:
    _has_yaml_deps = True


class Codec(ABC):
    """A text format with the JSON data model."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def dumps(self, data: t.Any) -> str:
        """Encodes JSON-model ``data`` as text."""
        pass

    @abstractmethod
    def loads(self, text: t.Union[str, bytes]) -> t.Any:
        """
        Decodes ``text`` into JSON-model data. Raises :class:`~typed_store.errors.CodecError` if ``text`` is
        malformed.
        """
        pass


class JsonCodec(Codec):
    """
    Parameters
    ----------
    indent : int, optional
        If provided, output is pretty printed with this indent. Otherwise it is compact.
    """

    name = "json"

    def __init__(self, indent: t.Optional[int] = None):
        self.indent = indent

    def dumps(self, data: t.Any) -> str:
        try:
            return json.dumps(data, indent=self.indent)
        except (TypeError, ValueError) as e:
            raise CodecError("failed to encode data as JSON") from e

    def loads(self, text: t.Union[str, bytes]) -> t.Any:
        try:
            return json.loads(text)
        except ValueError as e:
            raise CodecError("failed to decode JSON") from e


class YamlCodec(Codec):
    """Reads and writes YAML using PyYAML's safe loader and dumper. Key order is preserved on output."""

    name = "yaml"

    @requires_extras(yaml=_has_yaml_deps)
    def __init__(self):
        pass

    def dumps(self, data: t.Any) -> str:
        try:
            return yaml.safe_dump(data, sort_keys=False)
        except yaml.YAMLError as e:
            raise CodecError("failed to encode data as YAML") from e

    def loads(self, text: t.Union[str, bytes]) -> t.Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise CodecError("failed to decode YAML") from e
