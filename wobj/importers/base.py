# wobj/importers/base.py
from abc import ABC, abstractmethod
from pathlib import Path

from wobj.scene.types import Scene


class SceneImporter(ABC):
    @abstractmethod
    def import_file(self, path: Path) -> Scene:
        """
        Read a source file and return a fully resolved scene graph.
        Raises SceneImportError when no scene can be produced.
        """
        pass
