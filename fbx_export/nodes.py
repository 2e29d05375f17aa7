"""
In-memory FBX node tree.

A document is an ordered list of top-level nodes. Every node has a name, an
ordered list of typed property values and an ordered list of child nodes.
Nodes only support whole-slot replacement of their properties; children and
property slots are never removed or reordered, so a patched template keeps
the exact shape it was parsed with.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import numpy as np


class PropertyType(Enum):
    """Binary FBX property type codes."""
    INT16 = "Y"
    BOOL = "C"
    INT32 = "I"
    FLOAT32 = "F"
    FLOAT64 = "D"
    INT64 = "L"
    STRING = "S"
    RAW = "R"
    FLOAT32_ARRAY = "f"
    FLOAT64_ARRAY = "d"
    INT32_ARRAY = "i"
    INT64_ARRAY = "l"
    BOOL_ARRAY = "b"

    @property
    def code(self) -> str:
        return self.value

    @property
    def is_array(self) -> bool:
        return self in ARRAY_DTYPES


ARRAY_DTYPES: dict[PropertyType, type] = {
    PropertyType.FLOAT32_ARRAY: np.float32,
    PropertyType.FLOAT64_ARRAY: np.float64,
    PropertyType.INT32_ARRAY: np.int32,
    PropertyType.INT64_ARRAY: np.int64,
    PropertyType.BOOL_ARRAY: np.bool_,
}

_SCALAR_COERCIONS = {
    PropertyType.INT16: int,
    PropertyType.BOOL: int,  # raw byte, any non-zero value is true
    PropertyType.INT32: int,
    PropertyType.FLOAT32: float,
    PropertyType.FLOAT64: float,
    PropertyType.INT64: int,
    PropertyType.STRING: str,
    PropertyType.RAW: bytes,
}


def array_type_for_dtype(dtype: np.dtype) -> PropertyType:
    """Map a numpy dtype to the matching FBX array type.

    Raises:
        TypeError: If FBX has no array type for the dtype.
    """
    dtype = np.dtype(dtype)
    for ptype, array_dtype in ARRAY_DTYPES.items():
        if dtype == np.dtype(array_dtype):
            return ptype
    raise TypeError(f"No FBX array type for dtype {dtype}")


@dataclass(frozen=True, eq=False)
class PropertyValue:
    """A tagged property value.

    Array payloads are held as 1-D numpy arrays of the tag's dtype, scalars
    as plain Python values.
    """
    type: PropertyType
    value: Any

    def __post_init__(self):
        if self.type.is_array:
            array = np.array(self.value, dtype=ARRAY_DTYPES[self.type]).ravel()
            object.__setattr__(self, "value", array)
        else:
            object.__setattr__(self, "value", _SCALAR_COERCIONS[self.type](self.value))

    @property
    def is_array(self) -> bool:
        return self.type.is_array

    @classmethod
    def from_python(cls, obj: Any) -> "PropertyValue":
        """Wrap a plain Python or numpy value, inferring its type tag.

        Raises:
            TypeError: If the value has no FBX representation.
        """
        if isinstance(obj, PropertyValue):
            return obj
        if isinstance(obj, str):
            return cls(PropertyType.STRING, obj)
        if isinstance(obj, (bytes, bytearray)):
            return cls(PropertyType.RAW, bytes(obj))
        if isinstance(obj, (bool, np.bool_)):
            return cls(PropertyType.BOOL, obj)
        if isinstance(obj, (int, np.integer)):
            return cls(PropertyType.INT64, obj)
        if isinstance(obj, (float, np.floating)):
            return cls(PropertyType.FLOAT64, obj)
        if isinstance(obj, (list, tuple)):
            obj = np.asarray(obj)
        if isinstance(obj, np.ndarray):
            return cls(array_type_for_dtype(obj.dtype), obj)
        raise TypeError(f"Cannot store {type(obj).__name__} as an FBX property")

    @classmethod
    def string(cls, text: str) -> "PropertyValue":
        return cls(PropertyType.STRING, text)

    @classmethod
    def int32(cls, number: int) -> "PropertyValue":
        return cls(PropertyType.INT32, number)

    @classmethod
    def int64(cls, number: int) -> "PropertyValue":
        return cls(PropertyType.INT64, number)

    @classmethod
    def float64(cls, number: float) -> "PropertyValue":
        return cls(PropertyType.FLOAT64, number)

    @classmethod
    def array(cls, values: Any, ptype: PropertyType) -> "PropertyValue":
        if not ptype.is_array:
            raise TypeError(f"{ptype.name} is not an array type")
        return cls(ptype, values)

    def __eq__(self, other):
        if not isinstance(other, PropertyValue):
            return NotImplemented
        if self.type is not other.type:
            return False
        if self.is_array:
            return bool(np.array_equal(self.value, other.value))
        return self.value == other.value

    __hash__ = None

    def __repr__(self):
        if self.is_array:
            return f"PropertyValue({self.type.code}, len={len(self.value)})"
        return f"PropertyValue({self.type.code}, {self.value!r})"


@dataclass(eq=False, repr=False)
class FbxNode:
    """A named node with typed properties and child nodes."""
    name: str
    properties: list = field(default_factory=list)
    children: list = field(default_factory=list)

    def __post_init__(self):
        self.properties = [PropertyValue.from_python(p) for p in self.properties]
        self.children = list(self.children)

    @property
    def value(self) -> Optional[PropertyValue]:
        """The node payload (property slot 0), or None when it has no properties."""
        return self.properties[0] if self.properties else None

    @value.setter
    def value(self, value: Any) -> None:
        value = PropertyValue.from_python(value)
        if self.properties:
            self.properties[0] = value
        else:
            self.properties.append(value)

    def get_property(self, index: int) -> Optional[PropertyValue]:
        if 0 <= index < len(self.properties):
            return self.properties[index]
        return None

    def replace_property(self, index: int, value: Any) -> None:
        """Replace an existing property slot.

        Raises:
            IndexError: If the node has no slot at index.
        """
        if not 0 <= index < len(self.properties):
            raise IndexError(f"{self.name} has no property slot {index}")
        self.properties[index] = PropertyValue.from_python(value)

    def __repr__(self):
        return f"FbxNode({self.name}, props={len(self.properties)}, children={len(self.children)})"


@dataclass(eq=False, repr=False)
class FbxDocument:
    """Root container: ordered top-level nodes and the binary format version."""
    children: list = field(default_factory=list)
    version: int = 7400

    def __repr__(self):
        return f"FbxDocument(version={self.version}, nodes={len(self.children)})"


NodeContainer = Union[FbxDocument, FbxNode]
