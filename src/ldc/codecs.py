"""Codecs converting cached values to and from bytes."""

from __future__ import annotations

import dataclasses
import json
import pickle
import types
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, Union, get_args, get_origin, get_type_hints

from ldc.errors import CacheDecodeError, CacheEncodeError

T = TypeVar("T")


class Codec(ABC, Generic[T]):
    """Base class for value codecs.

    A codec is bound to the value type it produces, and ``decode`` rejects
    anything that is not an instance of that type.
    """

    name = "codec"

    def __init__(self, value_type: type[T]) -> None:
        self.value_type = value_type

    @abstractmethod
    def encode(self, value: T) -> bytes:
        """Serialize ``value``.

        Raises:
            CacheEncodeError: If the value cannot be serialized.
        """
        pass

    @abstractmethod
    def decode(self, data: bytes) -> T:
        """Deserialize ``data`` into a ``value_type`` instance.

        Raises:
            CacheDecodeError: If the bytes are malformed or hold another type.
        """
        pass

    def _check_type(self, value: Any) -> T:
        if not isinstance(value, self.value_type):
            raise CacheDecodeError(
                f"{self.name} data holds {type(value).__name__}, "
                f"expected {self.value_type.__name__}"
            )
        return value


class PickleCodec(Codec[T]):
    """Binary codec backed by :mod:`pickle`.

    Round-trips any picklable Python value. Only load files written by
    your own process: unpickling untrusted data can execute code.
    """

    name = "pickle"

    def __init__(self, value_type: type[T], protocol: int = 4) -> None:
        super().__init__(value_type)
        self.protocol = protocol

    def encode(self, value: T) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError, ValueError) as e:
            raise CacheEncodeError(f"Cannot pickle {type(value).__name__}: {e}") from e

    def decode(self, data: bytes) -> T:
        try:
            value = pickle.loads(data)
        except Exception as e:
            # Corrupt pickles surface as many different exception types
            raise CacheDecodeError(f"Invalid pickle data: {e}") from e
        return self._check_type(value)


class JsonCodec(Codec[T]):
    """Human-readable UTF-8 JSON codec for configuration records.

    Objects with ``to_dict``/``from_dict`` use them. Other dataclasses are
    converted field by field, nested records included, and decoded fields
    are checked against their annotated scalar, list, dict and tuple types.
    """

    name = "json"

    def __init__(self, value_type: type[T], indent: int | None = 2) -> None:
        super().__init__(value_type)
        self.indent = indent

    def encode(self, value: T) -> bytes:
        try:
            obj = _to_jsonable(value)
            return json.dumps(obj, indent=self.indent, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CacheEncodeError(f"Cannot encode {type(value).__name__} as JSON: {e}") from e

    def decode(self, data: bytes) -> T:
        try:
            obj = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheDecodeError(f"Invalid JSON: {e}") from e

        try:
            value = _from_jsonable(self.value_type, obj, self.value_type.__name__)
        except CacheDecodeError:
            raise
        except Exception as e:
            # from_dict hooks and __post_init__ validation may raise anything
            raise CacheDecodeError(
                f"Invalid {self.value_type.__name__} record: {e}"
            ) from e
        return self._check_type(value)


_SCALAR_TYPES = (str, int, float, bool)


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict") and not isinstance(value, type):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    return value


def _field_types(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable annotations leave those fields unchecked
        return {}


def _from_jsonable(tp: Any, obj: Any, where: str) -> Any:
    """Rebuild a value of annotated type ``tp`` from decoded JSON."""
    if isinstance(tp, type) and hasattr(tp, "from_dict"):
        return tp.from_dict(obj)
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _record_from_jsonable(tp, obj, where)

    origin = get_origin(tp)
    args = get_args(tp)

    if origin in (Union, types.UnionType):
        if obj is None and type(None) in args:
            return None
        options = [a for a in args if a is not type(None)]
        if len(options) == 1:
            return _from_jsonable(options[0], obj, where)
        return obj

    container = origin or tp
    if container in (list, tuple):
        if not isinstance(obj, list):
            raise CacheDecodeError(f"{where}: expected a JSON array, got {type(obj).__name__}")
        if container is list:
            item_type = args[0] if args else Any
            return [_from_jsonable(item_type, v, f"{where}[{i}]") for i, v in enumerate(obj)]
        if len(args) == 2 and args[1] is Ellipsis:
            item_types = [args[0]] * len(obj)
        elif args and len(args) == len(obj):
            item_types = list(args)
        else:
            item_types = [Any] * len(obj)
        return tuple(
            _from_jsonable(t, v, f"{where}[{i}]")
            for i, (t, v) in enumerate(zip(item_types, obj))
        )

    if container is dict:
        if not isinstance(obj, dict):
            raise CacheDecodeError(f"{where}: expected a JSON object, got {type(obj).__name__}")
        value_type = args[1] if len(args) == 2 else Any
        return {k: _from_jsonable(value_type, v, f"{where}.{k}") for k, v in obj.items()}

    if tp is float and isinstance(obj, int) and not isinstance(obj, bool):
        return float(obj)
    if tp in _SCALAR_TYPES:
        if not isinstance(obj, tp) or (tp is int and isinstance(obj, bool)):
            raise CacheDecodeError(f"{where}: expected {tp.__name__}, got {type(obj).__name__}")
    return obj


def _record_from_jsonable(cls: type, obj: Any, where: str) -> Any:
    if not isinstance(obj, dict):
        raise CacheDecodeError(
            f"Expected a JSON object for {where}, got {type(obj).__name__}"
        )

    fields = {f.name: f for f in dataclasses.fields(cls)}
    unknown = sorted(set(obj) - set(fields))
    if unknown:
        raise CacheDecodeError(f"{where}: unknown field(s) {', '.join(unknown)}")

    hints = _field_types(cls)
    kwargs = {
        name: _from_jsonable(hints.get(name, Any), value, f"{where}.{name}")
        for name, value in obj.items()
        if fields[name].init
    }
    return cls(**kwargs)
