# wobj/importers/json_scene.py
"""
JSON scene description.

    {
      "root": {
        "name": "Root",
        "transform": [16 floats, row-major],          optional, identity
        "meshes": [{
            "name": "Body",
            "primitive": "triangle",                  optional: point|line|triangle|polygon
            "positions": [[x, y, z], ...],
            "normals": [[x, y, z], ...],              optional
            "uvs": [[u, v], ...],                     optional
            "faces": [[a, b, c], ...],
            "bones": [{                               optional
                "name": "Spine",
                "offset": [16 floats, row-major],     optional, identity
                "weights": [[vertex, weight], ...]
            }]
        }],
        "children": [ ...nodes... ]
      },
      "animations": [{
        "name": "Walk",
        "duration": 30.0,
        "channels": [{
            "node": "Spine",
            "position": [[t, x, y, z], ...],
            "rotation": [[t, w, x, y, z], ...],
            "scale": [[t, x, y, z], ...]
        }]
      }]
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from wobj.exceptions import SceneImportError
from wobj.importers.base import SceneImporter
from wobj.math import IDENTITY, as_matrix4
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
from wobj.types import Quaternion, Vector3

_PRIMITIVES: Dict[str, PrimitiveType] = {
    "point": PrimitiveType.POINT,
    "line": PrimitiveType.LINE,
    "triangle": PrimitiveType.TRIANGLE,
    "polygon": PrimitiveType.POLYGON,
}


def _vec3(values: List[float]) -> Vector3:
    x, y, z = (float(v) for v in values)
    return Vector3(x, y, z)


def _matrix(doc: Dict[str, Any], key: str):
    if key not in doc:
        return IDENTITY.copy()
    return as_matrix4(doc[key])


def _parse_mesh(doc: Dict[str, Any]) -> Mesh:
    primitive = doc.get("primitive", "triangle")
    if primitive not in _PRIMITIVES:
        raise ValueError(f"unknown primitive type '{primitive}'")

    normals = doc.get("normals")
    uvs = doc.get("uvs")
    mesh = Mesh(
        name=doc.get("name", ""),
        positions=[_vec3(p) for p in doc.get("positions", [])],
        faces=[(int(a), int(b), int(c)) for a, b, c in doc.get("faces", [])],
        normals=[_vec3(n) for n in normals] if normals else None,
        uvs=[(float(t[0]), float(t[1])) for t in uvs] if uvs else None,
        bones=[
            MeshBone(
                name=bone["name"],
                offset_matrix=_matrix(bone, "offset"),
                weights=[VertexWeight(int(v), float(w)) for v, w in bone.get("weights", [])],
            )
            for bone in doc.get("bones", [])
        ],
        primitive_types=_PRIMITIVES[primitive],
    )
    mesh.validate()
    return mesh


def _parse_node(doc: Dict[str, Any]) -> SceneNode:
    root = SceneNode(name=doc.get("name", ""))
    stack = [(doc, root)]
    while stack:
        node_doc, node = stack.pop()
        node.transform = _matrix(node_doc, "transform")
        node.meshes = [_parse_mesh(m) for m in node_doc.get("meshes", [])]
        for child_doc in node_doc.get("children", []):
            child = SceneNode(name=child_doc.get("name", ""))
            node.children.append(child)
            stack.append((child_doc, child))
    return root


def _parse_animation(doc: Dict[str, Any]) -> Animation:
    channels = []
    for ch in doc.get("channels", []):
        channels.append(
            NodeAnimation(
                node_name=ch["node"],
                position_keys=[
                    VectorKey(float(t), _vec3((x, y, z))) for t, x, y, z in ch.get("position", [])
                ],
                rotation_keys=[
                    QuatKey(float(t), Quaternion(float(x), float(y), float(z), float(w)))
                    for t, w, x, y, z in ch.get("rotation", [])
                ],
                scaling_keys=[
                    VectorKey(float(t), _vec3((x, y, z))) for t, x, y, z in ch.get("scale", [])
                ],
            )
        )
    return Animation(
        name=doc.get("name", ""),
        duration=float(doc.get("duration", 0.0)),
        channels=channels,
    )


def parse_scene(doc: Dict[str, Any]) -> Scene:
    if "root" not in doc:
        raise ValueError("missing 'root' node")
    return Scene(
        root=_parse_node(doc["root"]),
        animations=[_parse_animation(a) for a in doc.get("animations", [])],
    )


class JsonSceneImporter(SceneImporter):
    def import_file(self, path: Path) -> Scene:
        try:
            with open(path, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except OSError as exc:
            raise SceneImportError(f"Could not read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SceneImportError(f"Invalid JSON in {path}: {exc}") from exc

        try:
            return parse_scene(doc)
        except (KeyError, TypeError, ValueError) as exc:
            raise SceneImportError(f"Malformed scene {path}: {exc}") from exc
