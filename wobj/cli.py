"""Command-line interface for the wobj compiler."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from wobj.compiler import compile_scene
from wobj.exceptions import WobjError
from wobj.importers import IMPORTERS, load_scene
from wobj.math import IDENTITY
from wobj.settings import CompilerSettings
from wobj.writer import write_file

logger = logging.getLogger("wobj")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wobj",
        description="Compile a scene (meshes, bones, animations) into a .wobj binary asset.",
    )
    parser.add_argument(
        "source",
        type=Path,
        help=f"Scene to compile ({', '.join(sorted(IMPORTERS))}).",
    )
    parser.add_argument("output", type=Path, help="Destination .wobj file.")
    parser.add_argument(
        "--no-scale",
        action="store_true",
        help="Replace every scale track with a constant unit scale.",
    )
    parser.add_argument(
        "--write-meshes",
        action="store_true",
        help="Append the mesh subset name table.",
    )
    parser.add_argument(
        "--identity-root",
        action="store_true",
        help="Keep source axes instead of converting Y-up to Z-up.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every node, skipped mesh and layout decision.",
    )
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    settings = CompilerSettings(
        no_scale=args.no_scale,
        write_meshes=args.write_meshes,
    )
    if args.identity_root:
        settings.root_transform = IDENTITY.copy()

    try:
        scene = load_scene(args.source)
        compiled = compile_scene(scene, settings)
        write_file(compiled, args.output)
    except WobjError as exc:
        logger.error("%s", exc)
        return 1

    return 0
