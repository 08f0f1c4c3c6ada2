from wobj.compiler import CompiledScene, MeshSubset, SceneCompiler, compile_scene
from wobj.exceptions import (
    EmitError,
    SceneImportError,
    UnsupportedImporterError,
    WobjError,
)
from wobj.importers import load_scene
from wobj.settings import CompilerSettings
from wobj.writer import WobjWriter, to_bytes, write_file

__all__ = [
    "CompiledScene",
    "CompilerSettings",
    "MeshSubset",
    "SceneCompiler",
    "compile_scene",
    "load_scene",
    "WobjWriter",
    "to_bytes",
    "write_file",
    "WobjError",
    "SceneImportError",
    "UnsupportedImporterError",
    "EmitError",
]
