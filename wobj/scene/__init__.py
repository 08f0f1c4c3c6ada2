from wobj.scene.flatten import FlattenedNode, FlattenedScene, flatten_scene
from wobj.scene.types import (
    Animation,
    Mesh,
    MeshBone,
    NodeAnimation,
    PrimitiveType,
    QuatKey,
    Scene,
    SceneNode,
    VectorKey,
    VertexWeight,
)

__all__ = [
    "Animation",
    "Mesh",
    "MeshBone",
    "NodeAnimation",
    "PrimitiveType",
    "QuatKey",
    "Scene",
    "SceneNode",
    "VectorKey",
    "VertexWeight",
    "FlattenedNode",
    "FlattenedScene",
    "flatten_scene",
]
