# wobj/compiler.py
"""
Scene graph -> packed buffers, bones, skeleton and reduced animations.

Two passes over the same pre-order mesh walk: the first sizes the
buffers and decides the vertex layout, the second fills them.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np

from wobj.animation import CompressedAnimation, compress_animation
from wobj.buffers.buffer import IndexBuffer, VertexBuffer
from wobj.buffers.format import IndexFormat, VertexFormat
from wobj.codec.numeric import ElementType
from wobj.math import normal_matrix, transform_normals, transform_points
from wobj.scene.flatten import FlattenedScene, flatten_scene
from wobj.scene.types import Mesh, Scene, SceneNode
from wobj.settings import CompilerSettings
from wobj.skinning import BoneTable, bind_mesh
from wobj.types import BoundingBox3D, Matrix4, Vector3

logger = logging.getLogger(__name__)

POSITION = "position"
NORMAL = "normal"
TEX_COORD = "uv"
BONE_INDICES = "bone_indices"
BONE_WEIGHTS = "bone_weights"


@dataclass
class MeshSubset:
    name: str
    start: int
    end: int  # one past the last index


@dataclass(frozen=True, eq=False)
class MeshInstance:
    node: SceneNode
    mesh: Mesh
    world: Matrix4


def skip_reason(mesh: Mesh) -> Optional[str]:
    if not mesh.is_triangle_mesh:
        return f"primitive types {mesh.primitive_types!r}"
    if not mesh.has_positions:
        return "no positions"
    if not mesh.has_faces:
        return "no faces"
    return None


def iter_mesh_instances(root: SceneNode, root_transform: Matrix4) -> Iterator[MeshInstance]:
    """Accepted meshes in pre-order (a node's meshes, then its children)."""
    stack = [(root, np.asarray(root_transform, dtype=np.float64))]
    while stack:
        node, parent = stack.pop()
        world = parent @ np.asarray(node.transform, dtype=np.float64)
        logger.debug(
            "Node: %s, children: %d, meshes: %d",
            node.name,
            len(node.children),
            len(node.meshes),
        )

        for mesh in node.meshes:
            reason = skip_reason(mesh)
            if reason is not None:
                logger.debug("Skipping mesh %s on %s: %s", mesh.name, node.name, reason)
                continue
            yield MeshInstance(node=node, mesh=mesh, world=world)

        for child in reversed(node.children):
            stack.append((child, world))


def build_vertex_format(instances: List[MeshInstance], skinned: bool) -> VertexFormat:
    fmt = VertexFormat()
    fmt.add_attribute(POSITION, ElementType.FLOAT, 3)
    if any(i.mesh.has_normals for i in instances):
        fmt.add_attribute(NORMAL, ElementType.FLOAT, 3)
    if any(i.mesh.has_uvs for i in instances):
        fmt.add_attribute(TEX_COORD, ElementType.FLOAT, 2)
    if skinned:
        fmt.add_attribute(BONE_INDICES, ElementType.FLOAT, 4)
        fmt.add_attribute(BONE_WEIGHTS, ElementType.FLOAT, 4)
    return fmt


@dataclass(eq=False)
class CompiledScene:
    vertices: VertexBuffer
    indices: IndexBuffer
    bounds: BoundingBox3D
    bones: BoneTable
    settings: CompilerSettings
    subsets: List[MeshSubset] = field(default_factory=list)
    animations: List[CompressedAnimation] = field(default_factory=list)
    skeleton: Optional[FlattenedScene] = None

    @property
    def vertex_count(self) -> int:
        return self.vertices.vertex_count

    @property
    def index_count(self) -> int:
        return self.indices.index_count

    @property
    def vertex_format(self) -> VertexFormat:
        return self.vertices.format


class SceneCompiler:
    """Holds the mutable state of a single compilation."""

    def __init__(self, scene: Scene, settings: Optional[CompilerSettings] = None) -> None:
        self.scene = scene
        self.settings = settings or CompilerSettings()
        self.bones = BoneTable()
        self.bounds = BoundingBox3D()
        self.subsets: List[MeshSubset] = []

    def compile(self) -> CompiledScene:
        skinned = self.scene.has_animations
        instances = list(iter_mesh_instances(self.scene.root, self.settings.root_transform))

        vertex_count = 0
        index_count = 0
        for instance in instances:
            mesh = instance.mesh
            mesh.validate()
            start = index_count
            vertex_count += mesh.vertex_count
            index_count += len(mesh.faces) * 3
            self.subsets.append(MeshSubset(mesh.name, start, index_count))

        vertex_format = build_vertex_format(instances, skinned)
        vertices = VertexBuffer(vertex_format, vertex_count)
        indices = IndexBuffer(IndexFormat(vertex_count), index_count)
        logger.debug(
            "Layout: %s (%d bytes), %d vertices, %d indices of %d byte(s)",
            vertex_format.describe(),
            vertex_format.stride,
            vertex_count,
            index_count,
            indices.format.width,
        )

        vertex_offset = 0
        index_offset = 0
        for instance in instances:
            self._pack_mesh(instance, vertices, indices, vertex_offset, index_offset)
            vertex_offset += instance.mesh.vertex_count
            index_offset += len(instance.mesh.faces) * 3

        low, high = self.bounds.corners()
        logger.info("Bounds: [%g,%g,%g] - [%g,%g,%g]", *low, *high)

        compiled = CompiledScene(
            vertices=vertices,
            indices=indices,
            bounds=self.bounds,
            bones=self.bones,
            settings=self.settings,
            subsets=self.subsets,
        )

        if skinned:
            skeleton = flatten_scene(self.scene.root)
            compiled.skeleton = skeleton
            compiled.animations = [
                compress_animation(
                    animation,
                    skeleton,
                    epsilon=self.settings.key_epsilon,
                    no_scale=self.settings.no_scale,
                )
                for animation in self.scene.animations
            ]

        return compiled

    def _pack_mesh(
        self,
        instance: MeshInstance,
        vertices: VertexBuffer,
        indices: IndexBuffer,
        vertex_offset: int,
        index_offset: int,
    ) -> None:
        mesh = instance.mesh
        fmt = vertices.format

        positions = transform_points(
            instance.world, np.array([tuple(p) for p in mesh.positions], dtype=np.float64)
        )
        self.bounds.include(Vector3(*map(float, positions.min(axis=0))))
        self.bounds.include(Vector3(*map(float, positions.max(axis=0))))

        pos_attr = fmt.index_of(POSITION)
        for i, (x, y, z) in enumerate(positions):
            vertices.set(vertex_offset + i, pos_attr, (x, y, z, 1.0))

        if mesh.has_normals:
            normals = transform_normals(
                normal_matrix(instance.world),
                np.array([tuple(n) for n in mesh.normals], dtype=np.float64),
            )
            normal_attr = fmt.index_of(NORMAL)
            for i, (x, y, z) in enumerate(normals):
                vertices.set(vertex_offset + i, normal_attr, (x, y, z, 1.0))

        if mesh.has_uvs:
            uv_attr = fmt.index_of(TEX_COORD)
            for i, uv in enumerate(mesh.uvs):
                vertices.set(vertex_offset + i, uv_attr, (uv[0], uv[1], 0.0, 1.0))

        for f, face in enumerate(mesh.faces):
            for c in range(3):
                indices.set(index_offset + f * 3 + c, face[c] + vertex_offset)

        if BONE_INDICES in fmt:
            bind_mesh(
                vertices,
                mesh,
                instance.node.name,
                instance.world,
                vertex_offset,
                self.bones,
                fmt.index_of(BONE_INDICES),
                fmt.index_of(BONE_WEIGHTS),
            )


def compile_scene(scene: Scene, settings: Optional[CompilerSettings] = None) -> CompiledScene:
    return SceneCompiler(scene, settings).compile()
