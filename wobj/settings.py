# wobj/settings.py
from dataclasses import dataclass, field

from wobj.math import Y_UP_TO_Z_UP
from wobj.types import Matrix4


def _default_root_transform() -> Matrix4:
    return Y_UP_TO_Z_UP.copy()


@dataclass(slots=True)
class CompilerSettings:
    """
    Knobs for one compilation. Passed explicitly, never read from globals.
    """

    # Replace every scale track with the single key [0, (1, 1, 1)].
    no_scale: bool = False
    # Append the mesh subset name table.
    write_meshes: bool = False
    # Per-component tolerance when dropping interpolable keys.
    key_epsilon: float = 1e-5
    # Premultiplied onto the scene root for baking and the skeleton table.
    root_transform: Matrix4 = field(default_factory=_default_root_transform)
