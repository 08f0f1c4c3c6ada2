"""In-memory scene graph handed over by a scene import provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Iterator, List, Optional, Tuple

import numpy as np

from wobj.types import UV, Matrix4, Quaternion, Vector3


def _identity() -> Matrix4:
    return np.eye(4, dtype=np.float64)


class PrimitiveType(IntFlag):
    POINT = 0x1
    LINE = 0x2
    TRIANGLE = 0x4
    POLYGON = 0x8


@dataclass
class VertexWeight:
    vertex_id: int
    weight: float


@dataclass(eq=False)
class MeshBone:
    name: str
    offset_matrix: Matrix4 = field(default_factory=_identity)
    weights: List[VertexWeight] = field(default_factory=list)


@dataclass(eq=False)
class Mesh:
    name: str
    positions: List[Vector3] = field(default_factory=list)
    faces: List[Tuple[int, int, int]] = field(default_factory=list)
    normals: Optional[List[Vector3]] = None
    uvs: Optional[List[UV]] = None
    bones: List[MeshBone] = field(default_factory=list)
    primitive_types: PrimitiveType = PrimitiveType.TRIANGLE

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def has_positions(self) -> bool:
        return bool(self.positions)

    @property
    def has_faces(self) -> bool:
        return bool(self.faces)

    @property
    def has_normals(self) -> bool:
        return bool(self.normals)

    @property
    def has_uvs(self) -> bool:
        return bool(self.uvs)

    @property
    def has_bones(self) -> bool:
        return bool(self.bones)

    @property
    def is_triangle_mesh(self) -> bool:
        # Mixed primitive meshes are rejected as well.
        return self.primitive_types == PrimitiveType.TRIANGLE

    def validate(self) -> None:
        """
        Raise ValueError when a face index or bone weight points outside
        the mesh, or a normal/UV list does not match the positions.
        Meshes without positions are never packed and are not checked.
        """
        count = self.vertex_count
        if count == 0:
            return

        for face in self.faces:
            for index in face:
                if not 0 <= index < count:
                    raise ValueError(
                        f"Mesh '{self.name}': face index {index} outside {count} vertices"
                    )

        for label, values in (("normals", self.normals), ("uvs", self.uvs)):
            if values and len(values) != count:
                raise ValueError(
                    f"Mesh '{self.name}': {len(values)} {label} for {count} vertices"
                )

        for bone in self.bones:
            for vw in bone.weights:
                if not 0 <= vw.vertex_id < count:
                    raise ValueError(
                        f"Mesh '{self.name}': bone '{bone.name}' weights vertex "
                        f"{vw.vertex_id} outside {count} vertices"
                    )


@dataclass(eq=False)
class SceneNode:
    name: str
    transform: Matrix4 = field(default_factory=_identity)
    children: List[SceneNode] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)

    def walk(self) -> Iterator[SceneNode]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class VectorKey:
    time: float
    value: Vector3


@dataclass
class QuatKey:
    time: float
    value: Quaternion


@dataclass
class NodeAnimation:
    node_name: str
    position_keys: List[VectorKey] = field(default_factory=list)
    rotation_keys: List[QuatKey] = field(default_factory=list)
    scaling_keys: List[VectorKey] = field(default_factory=list)


@dataclass
class Animation:
    name: str
    duration: float
    channels: List[NodeAnimation] = field(default_factory=list)


@dataclass(eq=False)
class Scene:
    root: SceneNode
    animations: List[Animation] = field(default_factory=list)

    @property
    def has_animations(self) -> bool:
        return bool(self.animations)
