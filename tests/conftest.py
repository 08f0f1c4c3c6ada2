import struct
from typing import Any, Dict, List, Optional

import numpy as np
import pytest

from wobj.buffers.format import IndexFormat
from wobj.math import IDENTITY
from wobj.scene.types import Mesh, MeshBone, SceneNode, VertexWeight
from wobj.settings import CompilerSettings
from wobj.types import Vector3


def translation(x: float, y: float, z: float) -> np.ndarray:
    mat = np.eye(4)
    mat[:3, 3] = (x, y, z)
    return mat


def triangle_mesh(name: str = "Tri", offset: float = 0.0, **kwargs) -> Mesh:
    return Mesh(
        name=name,
        positions=[
            Vector3(offset, 0.0, 0.0),
            Vector3(offset + 1.0, 0.0, 0.0),
            Vector3(offset, 2.0, 3.0),
        ],
        faces=[(0, 1, 2)],
        **kwargs,
    )


def skinned_mesh(name: str, bone_weights: Dict[str, List[tuple]]) -> Mesh:
    """bone_weights: bone name -> [(vertex_id, weight), ...]"""
    return triangle_mesh(
        name,
        bones=[
            MeshBone(name=bone, weights=[VertexWeight(v, w) for v, w in weights])
            for bone, weights in bone_weights.items()
        ],
    )


class ByteReader:
    """Sequential little-endian reader over an emitted .wobj stream."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, fmt: str) -> tuple:
        st = struct.Struct("<" + fmt)
        values = st.unpack_from(self.data, self.pos)
        self.pos += st.size
        return values

    def one(self, fmt: str) -> Any:
        return self.take(fmt)[0]

    def raw(self, n: int) -> bytes:
        chunk = self.data[self.pos : self.pos + n]
        self.pos += n
        return chunk

    def utf(self) -> str:
        return self.raw(self.one("H")).decode("utf-8")

    def matrix(self) -> np.ndarray:
        return np.array(self.take("16f"), dtype=np.float64).reshape(4, 4)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos


def parse_wobj(data: bytes, stride: int, write_meshes: bool = False) -> Dict[str, Any]:
    r = ByteReader(data)
    vertex_count, index_count, animation_count = r.take("iih")
    out: Dict[str, Any] = {
        "vertex_count": vertex_count,
        "index_count": index_count,
        "animation_count": animation_count,
        "vertices": r.raw(vertex_count * stride),
    }

    code = {1: "B", 2: "H", 4: "I"}[IndexFormat(vertex_count).width]
    out["indices"] = list(r.take(f"{index_count}{code}"))
    out["bounds"] = r.take("6f")

    animations: List[Dict[str, Any]] = []
    skeleton: List[Dict[str, Any]] = []
    if animation_count > 0:
        for _ in range(animation_count):
            name = r.utf()
            duration = r.one("f")
            channels = []
            for _ in range(r.one("i")):
                node = r.one("h")
                position = [r.take("4f") for _ in range(r.one("i") // 4)]
                rotation = [r.take("5f") for _ in range(r.one("i") // 5)]
                scale = [r.take("4f") for _ in range(r.one("i") // 4)]
                channels.append(
                    {"node": node, "position": position, "rotation": rotation, "scale": scale}
                )
            animations.append({"name": name, "duration": duration, "channels": channels})

        for _ in range(r.one("h")):
            child_count = r.one("B")
            first_child: Optional[int] = r.one("h") if child_count > 0 else None
            local = r.matrix()
            bone_id = r.one("h")
            inverse_bind = r.matrix() if bone_id != -1 else None
            skeleton.append(
                {
                    "child_count": child_count,
                    "first_child": first_child,
                    "local": local,
                    "bone_id": bone_id,
                    "inverse_bind": inverse_bind,
                }
            )

    subsets = []
    if write_meshes:
        for _ in range(r.one("h")):
            subsets.append((r.utf(), r.one("i"), r.one("i")))

    out["animations"] = animations
    out["skeleton"] = skeleton
    out["subsets"] = subsets
    out["remaining"] = r.remaining
    return out


def vertex_floats(vertices: bytes, stride: int, vertex: int, offset: int, count: int) -> tuple:
    return struct.unpack_from(f"<{count}f", vertices, vertex * stride + offset)


@pytest.fixture
def settings():
    """Compiler settings that keep source axes."""
    return CompilerSettings(root_transform=IDENTITY.copy())


@pytest.fixture
def triangle_node():
    return SceneNode(name="Tri", meshes=[triangle_mesh()])
