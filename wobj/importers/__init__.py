# wobj/importers/__init__.py
import logging
from pathlib import Path
from typing import Dict, Union

from wobj.exceptions import UnsupportedImporterError
from wobj.importers.base import SceneImporter
from wobj.importers.json_scene import JsonSceneImporter
from wobj.importers.obj import ObjImporter
from wobj.scene.types import Scene

logger = logging.getLogger(__name__)

IMPORTERS: Dict[str, SceneImporter] = {
    ".obj": ObjImporter(),
    ".json": JsonSceneImporter(),
}


def load_scene(path: Union[str, Path]) -> Scene:
    """Pick an importer by file extension and run it."""
    path = Path(path)
    ext = path.suffix.lower()
    importer = IMPORTERS.get(ext)
    if importer is None:
        raise UnsupportedImporterError(f"No importer for {ext or path.name}")

    logger.debug("Importing %s with %s", path, type(importer).__name__)
    return importer.import_file(path)


__all__ = [
    "SceneImporter",
    "ObjImporter",
    "JsonSceneImporter",
    "IMPORTERS",
    "load_scene",
]
