# wobj/buffers/format.py
import struct
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Tuple

from wobj.codec.numeric import (
    ElementType,
    decode_element,
    element_info,
    encode_element,
)

Float4 = Tuple[float, float, float, float]

# Attribute descriptors keep offset and size in 6-bit fields.
MAX_ATTRIBUTE_OFFSET = 63
MAX_ATTRIBUTE_BYTES = 63

MAX_INDEXABLE_VERTICES = 0xFFFFFFFF


@lru_cache(maxsize=None)
def _attribute_struct(element_type: ElementType, arity: int) -> struct.Struct:
    return struct.Struct(f"<{arity}{element_info(element_type).struct_code}")


@dataclass(frozen=True, slots=True)
class AttribType:
    """One vertex channel: where it lives inside a vertex and how it is stored."""

    name: str
    offset: int  # bytes from vertex start
    size: int  # bytes for the whole attribute
    arity: int  # 1 to 4 elements
    normalized: bool
    element_type: ElementType

    def read(self, data: bytes, base: int) -> Float4:
        """
        Unpack this attribute of the vertex starting at `base`.
        Missing components read as 0, except w which reads as 1.
        """
        raw = _attribute_struct(self.element_type, self.arity).unpack_from(
            data, base + self.offset
        )
        out = [0.0, 0.0, 0.0, 1.0]
        for i, element in enumerate(raw):
            out[i] = decode_element(element, self.element_type, self.normalized)
        return out[0], out[1], out[2], out[3]

    def write(self, data: bytearray, base: int, value) -> None:
        components = tuple(value)
        components += (0.0, 0.0, 0.0, 1.0)[len(components):]
        packed = [
            encode_element(component, self.element_type, self.normalized)
            for component in components[: self.arity]
        ]
        _attribute_struct(self.element_type, self.arity).pack_into(
            data, base + self.offset, *packed
        )


class VertexFormat:
    """Ordered attributes sharing one vertex stride."""

    def __init__(self) -> None:
        self._attributes: List[AttribType] = []
        self._by_name: Dict[str, int] = {}
        self._stride = 0

    def add_attribute(
        self,
        name: str,
        element_type: ElementType,
        arity: int,
        normalized: bool = False,
    ) -> int:
        """Append a channel at the current end of the vertex, returns its index."""
        if arity not in (1, 2, 3, 4):
            raise ValueError(f"Attribute arity must be 1-4, got {arity}")
        if name in self._by_name:
            raise ValueError(f"Duplicate vertex attribute: {name}")

        size = element_info(element_type).size * arity
        if size > MAX_ATTRIBUTE_BYTES:
            raise ValueError(f"Attribute '{name}' is {size} bytes, limit is {MAX_ATTRIBUTE_BYTES}")
        if self._stride > MAX_ATTRIBUTE_OFFSET:
            raise ValueError(f"Attribute '{name}' would start at byte {self._stride}, limit is {MAX_ATTRIBUTE_OFFSET}")

        attrib = AttribType(
            name=name,
            offset=self._stride,
            size=size,
            arity=arity,
            normalized=normalized,
            element_type=ElementType(element_type),
        )
        self._attributes.append(attrib)
        self._by_name[name] = len(self._attributes) - 1
        self._stride += size
        return self._by_name[name]

    @property
    def stride(self) -> int:
        return self._stride

    @property
    def attributes(self) -> Tuple[AttribType, ...]:
        return tuple(self._attributes)

    def __getitem__(self, index: int) -> AttribType:
        return self._attributes[index]

    def __len__(self) -> int:
        return len(self._attributes)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def index_of(self, name: str) -> int:
        return self._by_name[name]

    def describe(self) -> str:
        """Human-readable layout, e.g. 'position:3f normal:3f uv:2f'."""
        return " ".join(
            f"{a.name}:{a.arity}{element_info(a.element_type).struct_code}"
            for a in self._attributes
        )


class IndexFormat:
    """Smallest index width able to address every vertex."""

    _WIDTHS = ((1, "B"), (2, "H"), (4, "I"))

    def __init__(self, vertex_count: int) -> None:
        if vertex_count < 0 or vertex_count > MAX_INDEXABLE_VERTICES:
            raise ValueError(f"Cannot index {vertex_count} vertices")

        if vertex_count < 0x100:
            self.width, code = self._WIDTHS[0]
        elif vertex_count < 0x10000:
            self.width, code = self._WIDTHS[1]
        else:
            self.width, code = self._WIDTHS[2]

        self._struct = struct.Struct("<" + code)
        self.max_index = (1 << (self.width * 8)) - 1

    def read(self, data: bytes, offset: int) -> int:
        return self._struct.unpack_from(data, offset)[0]

    def write(self, data: bytearray, offset: int, value: int) -> None:
        if not 0 <= value <= self.max_index:
            raise ValueError(f"Index {value} does not fit in {self.width} byte(s)")
        self._struct.pack_into(data, offset, value)
