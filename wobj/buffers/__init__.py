from wobj.buffers.buffer import IndexBuffer, VertexBuffer
from wobj.buffers.format import AttribType, IndexFormat, VertexFormat

__all__ = [
    "AttribType",
    "VertexFormat",
    "IndexFormat",
    "VertexBuffer",
    "IndexBuffer",
]
