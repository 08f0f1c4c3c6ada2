# wobj/buffers/buffer.py
from typing import Sequence

from wobj.buffers.format import Float4, IndexFormat, VertexFormat


class VertexBuffer:
    """
    Packed, zero-initialized storage for `vertex_count` vertices.
    The format is shared, not owned.
    """

    def __init__(self, vertex_format: VertexFormat, vertex_count: int) -> None:
        self.format = vertex_format
        self.vertex_count = vertex_count
        self._data = bytearray(vertex_format.stride * vertex_count)

    def _base(self, vertex: int) -> int:
        if not 0 <= vertex < self.vertex_count:
            raise IndexError(vertex)
        return vertex * self.format.stride

    def get(self, vertex: int, attribute: int) -> Float4:
        return self.format[attribute].read(self._data, self._base(vertex))

    def set(self, vertex: int, attribute: int, value: Sequence[float]) -> None:
        self.format[attribute].write(self._data, self._base(vertex), value)

    @property
    def size(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def to_bytes(self) -> bytes:
        return bytes(self._data)


class IndexBuffer:
    def __init__(self, index_format: IndexFormat, index_count: int) -> None:
        self.format = index_format
        self.index_count = index_count
        self._data = bytearray(index_format.width * index_count)

    def _offset(self, i: int) -> int:
        if not 0 <= i < self.index_count:
            raise IndexError(i)
        return i * self.format.width

    def get(self, i: int) -> int:
        return self.format.read(self._data, self._offset(i))

    def set(self, i: int, value: int) -> None:
        self.format.write(self._data, self._offset(i), value)

    @property
    def size(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def to_bytes(self) -> bytes:
        return bytes(self._data)
