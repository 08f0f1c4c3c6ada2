# wobj/math.py
import logging
import math
from typing import Sequence, Union

import numpy as np

from wobj.types import Matrix4, Quaternion, Scalar, Vector3

logger = logging.getLogger(__name__)

IDENTITY: Matrix4 = np.eye(4, dtype=np.float64)

# Maps (x, y, z) -> (x, -z, y): a Y-up scene becomes Z-up.
Y_UP_TO_Z_UP: Matrix4 = np.array(
    [
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, -1.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ],
    dtype=np.float64,
)

# Slerp falls back to lerp when the arc is this close to zero.
SLERP_LERP_THRESHOLD = 1e-4


def as_matrix4(values: Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]) -> Matrix4:
    """Accepts a (4, 4) array or 16 row-major values."""
    mat = np.asarray(values, dtype=np.float64)
    if mat.shape == (16,):
        mat = mat.reshape(4, 4)
    if mat.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {mat.shape}")
    return mat


def invert(mat: Matrix4) -> Matrix4:
    try:
        return np.linalg.inv(mat)
    except np.linalg.LinAlgError:
        logger.warning("Singular transform, using pseudo-inverse")
        return np.linalg.pinv(mat)


def transform_points(mat: Matrix4, points: np.ndarray) -> np.ndarray:
    """(N, 3) points through a 4x4 transform, w = 1."""
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    return (homogeneous @ mat.T)[:, :3]


def normal_matrix(mat: Matrix4) -> np.ndarray:
    """Inverse-transpose of the upper 3x3, for transforming normals."""
    upper = mat[:3, :3]
    try:
        return np.linalg.inv(upper).T
    except np.linalg.LinAlgError:
        return np.linalg.pinv(upper).T


def transform_normals(nmat: np.ndarray, normals: np.ndarray) -> np.ndarray:
    """(N, 3) normals through a normal matrix, renormalized. Zero stays zero."""
    out = normals @ nmat.T
    lengths = np.linalg.norm(out, axis=1, keepdims=True)
    return np.divide(out, lengths, out=np.zeros_like(out), where=lengths > 0)


def lerp_vec(a: Vector3, b: Vector3, f: Scalar) -> Vector3:
    return a * (1.0 - f) + b * f


def slerp_quat(a: Quaternion, b: Quaternion, f: Scalar) -> Quaternion:
    """
    Spherical interpolation along the shorter arc, with a plain lerp on
    tiny arcs. The result is not renormalized.
    """
    cosom = a.dot(b)
    end = b
    if cosom < 0.0:
        cosom = -cosom
        end = -b

    if (1.0 - cosom) > SLERP_LERP_THRESHOLD:
        omega = math.acos(min(cosom, 1.0))
        sinom = math.sin(omega)
        sclp = math.sin((1.0 - f) * omega) / sinom
        sclq = math.sin(f * omega) / sinom
    else:
        sclp = 1.0 - f
        sclq = f

    return a * sclp + end * sclq
