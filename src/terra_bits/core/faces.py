"""Selection of the triangle most aligned with a reference direction."""

import logging
from typing import Optional

import numpy as np

from .mesh import TriangleMesh
from .models import FaceSelection
from .transform import WorldTransform

logger = logging.getLogger(__name__)

DOWN = np.array([0.0, -1.0, 0.0])

# Triangles whose edge cross product is shorter than this have no normal
_MIN_CROSS_LENGTH = 1e-12


def _unit(direction) -> np.ndarray:
    d = np.asarray(direction, dtype=np.float64).reshape(3)
    length = np.linalg.norm(d)
    if length < _MIN_CROSS_LENGTH:
        raise ValueError("direction must be a non-zero vector")
    return d / length


def triangle_normals(triangles: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Unit normals of (T, 3, 3) triangles, winding (v1 - v0) x (v2 - v0).

    Returns (normals, valid) where ``valid`` flags triangles with non-zero
    area. Normals of degenerate triangles are left as zero vectors.
    """
    cross = np.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0])
    lengths = np.linalg.norm(cross, axis=1)
    valid = lengths > _MIN_CROSS_LENGTH
    normals = np.zeros_like(cross)
    normals[valid] = cross[valid] / lengths[valid, None]
    return normals, valid


def select_extremal_face(
    mesh: TriangleMesh,
    transform: WorldTransform,
    direction=DOWN,
) -> Optional[FaceSelection]:
    """Find the triangle whose world-space normal best matches ``direction``.

    Every triangle is scored by the dot product of its unit normal with the
    direction; the first triangle reaching the maximum wins, so triangle
    order in the buffers decides ties. The winner's three world-space Y
    coordinates are summed so callers can read the face height.

    Returns None when the mesh has no triangle with a defined normal.
    """
    d = _unit(direction)
    triangles = mesh.world_triangles(transform)
    if len(triangles) == 0:
        return None

    normals, valid = triangle_normals(triangles)
    if not valid.any():
        return None

    scores = np.where(valid, normals @ d, -np.inf)
    best = int(np.argmax(scores))
    selection = FaceSelection(
        index=best,
        normal=normals[best],
        score=float(scores[best]),
        y_sum=float(triangles[best, :, 1].sum()),
        sample_count=3,
    )
    logger.debug(
        "Selected triangle %d of %d: normal=%s score=%.6f",
        best, len(triangles), np.round(selection.normal, 6).tolist(), selection.score,
    )
    return selection
