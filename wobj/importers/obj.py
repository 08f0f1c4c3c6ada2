# wobj/importers/obj.py
from pathlib import Path
from typing import List, Optional, Tuple

from wobj.exceptions import SceneImportError
from wobj.importers.base import SceneImporter
from wobj.scene.types import Mesh, Scene, SceneNode
from wobj.types import UV, Vector3


class ObjImporter(SceneImporter):
    """
    Wavefront OBJ -> one node carrying one triangle mesh.

    Supported: v, vn, vt and triangular f. Every face corner becomes its
    own vertex; normals and UVs are kept only if every corner has one.
    """

    def import_file(self, path: Path) -> Scene:
        positions: List[Vector3] = []
        normals: List[Vector3] = []
        uvs: List[UV] = []

        out_positions: List[Vector3] = []
        out_normals: List[Optional[Vector3]] = []
        out_uvs: List[Optional[UV]] = []
        faces: List[Tuple[int, int, int]] = []

        try:
            with open(path, "r") as f:
                for line_no, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue

                    parts = line.split()
                    tag = parts[0]

                    if tag == "v":
                        px, py, pz = map(float, parts[1:4])
                        positions.append(Vector3(px, py, pz))

                    elif tag == "vn":
                        nx, ny, nz = map(float, parts[1:4])
                        normals.append(Vector3(nx, ny, nz))

                    elif tag == "vt":
                        u, v = map(float, parts[1:3])
                        uvs.append((u, v))

                    elif tag == "f":
                        if len(parts) != 4:
                            raise SceneImportError(
                                f"Only triangular faces supported in {path} (line {line_no})"
                            )

                        base = len(out_positions)
                        for vert in parts[1:4]:
                            v_idx, vt_idx, vn_idx = self._parse_face_vertex(vert)
                            out_positions.append(positions[v_idx])
                            out_uvs.append(uvs[vt_idx] if vt_idx is not None else None)
                            out_normals.append(
                                normals[vn_idx] if vn_idx is not None else None
                            )
                        faces.append((base, base + 1, base + 2))
        except OSError as exc:
            raise SceneImportError(f"Could not read {path}: {exc}") from exc
        except (ValueError, IndexError) as exc:
            raise SceneImportError(f"Malformed OBJ {path}: {exc}") from exc

        if not faces:
            raise SceneImportError(f"No geometry found in OBJ: {path}")

        mesh = Mesh(
            name=Path(path).stem,
            positions=out_positions,
            faces=faces,
            normals=out_normals if all(n is not None for n in out_normals) else None,
            uvs=out_uvs if all(t is not None for t in out_uvs) else None,
        )
        return Scene(root=SceneNode(name=Path(path).stem, meshes=[mesh]))

    def _parse_index(self, val: str) -> int | None:
        if not val:
            return None
        idx = int(val)
        return idx - 1 if idx > 0 else idx

    def _parse_face_vertex(
        self, token: str
    ) -> Tuple[int, int | None, int | None]:
        parts = token.split("/")
        v = self._parse_index(parts[0])
        vt = (
            self._parse_index(parts[1]) if len(parts) > 1 and parts[1] else None
        )
        vn = (
            self._parse_index(parts[2]) if len(parts) > 2 and parts[2] else None
        )

        if v is None:
            raise ValueError(f"Invalid vertex index in token: {token}")

        return v, vt, vn
