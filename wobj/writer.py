# wobj/writer.py
"""
Binary emitter. Little-endian throughout:

    int32 vertexCount, int32 indexCount, int16 animationCount
    vertex bytes, index bytes
    float32 x6 bounds (min xyz, max xyz)
    [animations, skeleton table]   if animationCount > 0
    [mesh subset table]            if requested

Key blocks are prefixed by their length in float32 values (4 per vector
key, 5 per rotation key). Matrices are 16 row-major float32.
"""

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Sequence, Union

import numpy as np

from wobj.animation import CompressedAnimation
from wobj.compiler import CompiledScene, MeshSubset
from wobj.exceptions import EmitError
from wobj.scene.flatten import FlattenedScene
from wobj.scene.types import QuatKey, VectorKey
from wobj.skinning import BoneTable, auto_bone_name
from wobj.types import Matrix4

logger = logging.getLogger(__name__)

NO_BONE = -1


class WobjWriter:
    _HEADER = struct.Struct("<iih")  # [VertexCount, IndexCount, AnimationCount]
    _BOUNDS = struct.Struct("<6f")
    _BYTE = struct.Struct("<B")
    _SHORT = struct.Struct("<h")
    _USHORT = struct.Struct("<H")
    _INT = struct.Struct("<i")
    _FLOAT = struct.Struct("<f")
    _VECTOR_KEY = struct.Struct("<4f")  # [Time, X, Y, Z]
    _QUAT_KEY = struct.Struct("<5f")  # [Time, W, X, Y, Z]

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def _pack(self, st: struct.Struct, *values) -> None:
        try:
            data = st.pack(*values)
        except struct.error as exc:
            raise EmitError(f"Value out of range for '{st.format}': {values!r}") from exc
        self._stream.write(data)

    def write_byte(self, value: int) -> None:
        self._pack(self._BYTE, value)

    def write_short(self, value: int) -> None:
        self._pack(self._SHORT, value)

    def write_int(self, value: int) -> None:
        self._pack(self._INT, value)

    def write_float(self, value: float) -> None:
        self._pack(self._FLOAT, value)

    def write_utf(self, text: str) -> None:
        encoded = text.encode("utf-8")
        self._pack(self._USHORT, len(encoded))
        self._stream.write(encoded)

    def write_matrix(self, mat: Matrix4) -> None:
        self._stream.write(np.asarray(mat, dtype="<f4").reshape(4, 4).tobytes(order="C"))

    def write_raw(self, data: bytes) -> None:
        self._stream.write(data)

    def write_vector_keys(self, keys: Sequence[VectorKey]) -> None:
        self.write_int(len(keys) * 4)
        for key in keys:
            self._pack(self._VECTOR_KEY, key.time, *key.value)

    def write_rotation_keys(self, keys: Sequence[QuatKey]) -> None:
        self.write_int(len(keys) * 5)
        for key in keys:
            q = key.value
            self._pack(self._QUAT_KEY, key.time, q.w, q.x, q.y, q.z)

    def write_animation(self, animation: CompressedAnimation) -> None:
        self.write_utf(animation.name)
        self.write_float(animation.duration)
        self.write_int(len(animation.channels))
        for channel in animation.channels:
            self.write_short(channel.node_index)
            self.write_vector_keys(channel.position_keys)
            self.write_rotation_keys(channel.rotation_keys)
            self.write_vector_keys(channel.scaling_keys)

    def write_skeleton(
        self,
        skeleton: FlattenedScene,
        bones: BoneTable,
        root_transform: Matrix4,
    ) -> None:
        self.write_short(len(skeleton))
        for flat in skeleton.nodes:
            node = flat.node
            self.write_byte(flat.child_count)
            if flat.child_count > 0:
                self.write_short(flat.first_child)

            local = np.asarray(node.transform, dtype=np.float64)
            if flat.index == 0:
                local = np.asarray(root_transform, dtype=np.float64) @ local
            self.write_matrix(local)

            bone_name = auto_bone_name(node.name) if node.meshes else node.name
            bone = bones.get(bone_name)
            if bone is None:
                self.write_short(NO_BONE)
            else:
                self.write_short(bone.id)
                self.write_matrix(bone.inverse_bind)

    def write_subsets(self, subsets: Sequence[MeshSubset]) -> None:
        self.write_short(len(subsets))
        for subset in subsets:
            self.write_utf(subset.name)
            self.write_int(subset.start)
            self.write_int(subset.end)

    def write_scene(self, compiled: CompiledScene) -> None:
        animation_count = len(compiled.animations)
        self._pack(
            self._HEADER,
            compiled.vertex_count,
            compiled.index_count,
            animation_count,
        )
        self.write_raw(compiled.vertices.to_bytes())
        self.write_raw(compiled.indices.to_bytes())

        low, high = compiled.bounds.corners()
        self._pack(self._BOUNDS, *low, *high)

        if animation_count > 0 and compiled.skeleton is not None:
            for animation in compiled.animations:
                self.write_animation(animation)
            self.write_skeleton(
                compiled.skeleton,
                compiled.bones,
                compiled.settings.root_transform,
            )

        if compiled.settings.write_meshes:
            self.write_subsets(compiled.subsets)


def to_bytes(compiled: CompiledScene) -> bytes:
    buffer = io.BytesIO()
    WobjWriter(buffer).write_scene(compiled)
    return buffer.getvalue()


def write_file(compiled: CompiledScene, path: Union[str, Path]) -> int:
    """
    Serialize fully in memory, then write the file in one go.
    Returns the number of bytes written.
    """
    data = to_bytes(compiled)
    path = Path(path)
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise EmitError(f"Could not write {path}: {exc}") from exc

    logger.info(
        "Wrote %s: %d vertices, %d indices, %d animation(s), %d bytes",
        path,
        compiled.vertex_count,
        compiled.index_count,
        len(compiled.animations),
        len(data),
    )
    return len(data)
