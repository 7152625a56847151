"""XML-RPC value model.

A ProtocolValue is a tagged union over the leaf and compound types the
remote API speaks. Date and binary values are not supported.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Union

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ValueKind(str, Enum):
    """Type tags, named after their XML-RPC element."""
    STRING = "string"
    INT = "int"
    BOOLEAN = "boolean"
    DOUBLE = "double"
    ARRAY = "array"
    STRUCT = "struct"


@dataclass(frozen=True)
class ProtocolValue:
    """One node of an XML-RPC value tree.

    `value` holds a str, int, bool or float for leaves, a tuple of
    ProtocolValue for arrays, and a tuple of (name, ProtocolValue) pairs for
    structs. Struct member order is the order the members were encountered.
    """

    kind: ValueKind
    value: Any

    @classmethod
    def string(cls, value: str) -> "ProtocolValue":
        return cls(ValueKind.STRING, str(value))

    @classmethod
    def integer(cls, value: int) -> "ProtocolValue":
        value = int(value)
        if not INT32_MIN <= value <= INT32_MAX:
            raise ValueError(f"Integer out of 32-bit range: {value}")
        return cls(ValueKind.INT, value)

    @classmethod
    def boolean(cls, value: bool) -> "ProtocolValue":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def double(cls, value: float) -> "ProtocolValue":
        return cls(ValueKind.DOUBLE, float(value))

    @classmethod
    def array(cls, items: Iterable["ProtocolValue"]) -> "ProtocolValue":
        return cls(ValueKind.ARRAY, tuple(items))

    @classmethod
    def struct(
        cls, members: Iterable[tuple[str, "ProtocolValue"]]
    ) -> "ProtocolValue":
        return cls(ValueKind.STRUCT, tuple((str(k), v) for k, v in members))

    @classmethod
    def from_python(cls, obj: Any) -> "ProtocolValue":
        """Build a value tree from plain Python data."""
        if isinstance(obj, ProtocolValue):
            return obj
        # bool first: bool is a subclass of int
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.double(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, dict):
            return cls.struct((k, cls.from_python(v)) for k, v in obj.items())
        if isinstance(obj, (list, tuple)):
            return cls.array(cls.from_python(v) for v in obj)
        raise TypeError(f"Unsupported XML-RPC value type: {type(obj).__name__}")

    @property
    def is_array(self) -> bool:
        return self.kind == ValueKind.ARRAY

    @property
    def is_struct(self) -> bool:
        return self.kind == ValueKind.STRUCT

    def member(self, name: str) -> Union["ProtocolValue", None]:
        """Look up a struct member by name (first match)."""
        if self.kind != ValueKind.STRUCT:
            return None
        for key, value in self.value:
            if key == name:
                return value
        return None

    def to_python(self) -> Any:
        """Convert to plain Python data (structs become dicts)."""
        if self.kind == ValueKind.ARRAY:
            return [item.to_python() for item in self.value]
        if self.kind == ValueKind.STRUCT:
            return {key: item.to_python() for key, item in self.value}
        return self.value
