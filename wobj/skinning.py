# wobj/skinning.py
"""
Bone registry and per-vertex influence assignment.

Each vertex carries up to four (bone id, weight) pairs in two float4
attributes. Vertices nothing binds fall back to a synthetic "<node>_auto"
bone standing for the mesh node's own static transform.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import numpy as np

from wobj.buffers.buffer import VertexBuffer
from wobj.math import invert
from wobj.scene.types import Mesh
from wobj.types import Matrix4

logger = logging.getLogger(__name__)

AUTO_BONE_SUFFIX = "_auto"
MAX_INFLUENCES = 4


def auto_bone_name(node_name: str) -> str:
    return node_name + AUTO_BONE_SUFFIX


@dataclass(frozen=True, eq=False)
class Bone:
    id: int
    inverse_bind: Matrix4


class BoneTable:
    """
    Name -> Bone for one compilation. Ids are handed out densely in
    registration order and the first registration of a name wins.
    """

    def __init__(self) -> None:
        self._bones: Dict[str, Bone] = {}

    def resolve(
        self,
        name: str,
        world: Matrix4,
        offset: Optional[Matrix4] = None,
    ) -> int:
        """
        Id of `name`, registering it on first sight. The inverse bind pose
        is seeded from the node's world transform, premultiplied by the
        mesh-space offset for skinned bones.
        """
        bone = self._bones.get(name)
        if bone is not None:
            return bone.id

        inverse_bind = invert(world)
        if offset is not None:
            inverse_bind = np.asarray(offset, dtype=np.float64) @ inverse_bind

        bone = Bone(id=len(self._bones), inverse_bind=inverse_bind)
        self._bones[name] = bone
        logger.info("Bone: %s = %d", name, bone.id)
        return bone.id

    def get(self, name: str) -> Optional[Bone]:
        return self._bones.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._bones

    def __len__(self) -> int:
        return len(self._bones)

    def __iter__(self) -> Iterator[str]:
        return iter(self._bones)


def _bind_to_fallback(
    vertices: VertexBuffer,
    vertex: int,
    bone_id: int,
    index_attr: int,
    weight_attr: int,
) -> None:
    vertices.set(vertex, index_attr, (float(bone_id), 0.0, 0.0, 0.0))
    vertices.set(vertex, weight_attr, (1.0, 0.0, 0.0, 0.0))


def bind_mesh(
    vertices: VertexBuffer,
    mesh: Mesh,
    node_name: str,
    world: Matrix4,
    vertex_offset: int,
    bones: BoneTable,
    index_attr: int,
    weight_attr: int,
) -> int:
    """
    Write bone indices and weights for every vertex of `mesh`, which sits
    at `vertex_offset` in the buffer. Returns the number of influences
    dropped because a vertex already had four.
    """
    if not mesh.has_bones:
        fallback = bones.resolve(auto_bone_name(node_name), world)
        for i in range(mesh.vertex_count):
            _bind_to_fallback(vertices, vertex_offset + i, fallback, index_attr, weight_attr)
        return 0

    dropped = 0
    for mesh_bone in mesh.bones:
        bone_id = bones.resolve(mesh_bone.name, world, mesh_bone.offset_matrix)

        for vw in mesh_bone.weights:
            vertex = vertex_offset + vw.vertex_id
            idx = list(vertices.get(vertex, index_attr))
            wt = list(vertices.get(vertex, weight_attr))

            slot = None
            for c in range(MAX_INFLUENCES):
                if wt[c] == 0 or idx[c] == bone_id:
                    slot = c
                    break

            if slot is None:
                dropped += 1
                logger.debug(
                    "Dropping influence of %s on vertex %d of %s",
                    mesh_bone.name,
                    vw.vertex_id,
                    mesh.name,
                )
                continue

            idx[slot] = float(bone_id)
            wt[slot] = vw.weight
            vertices.set(vertex, index_attr, idx)
            vertices.set(vertex, weight_attr, wt)

    for i in range(mesh.vertex_count):
        vertex = vertex_offset + i
        wt = vertices.get(vertex, weight_attr)
        if wt[0] == 0:
            fallback = bones.resolve(auto_bone_name(node_name), world)
            _bind_to_fallback(vertices, vertex, fallback, index_attr, weight_attr)
        else:
            total = sum(wt)
            vertices.set(vertex, weight_attr, [w / total for w in wt])

    if dropped:
        logger.warning(
            "Mesh %s: dropped %d bone influence(s) beyond %d per vertex",
            mesh.name,
            dropped,
            MAX_INFLUENCES,
        )
    return dropped
