"""Shortest-arc rotation of a face normal onto a target direction."""

import numpy as np
from scipy.spatial.transform import Rotation

from .transform import WorldTransform

# Dot products this close to +1 or -1 are treated as parallel / antiparallel
PARALLEL_TOLERANCE = 1e-12


def _normalized(v) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64).reshape(3)
    length = np.linalg.norm(v)
    if length == 0.0:
        raise ValueError("cannot align a zero vector")
    return v / length


def _perpendicular_axis(v: np.ndarray) -> np.ndarray:
    """A fixed unit axis perpendicular to ``v``.

    Crosses with +X unless ``v`` is nearly parallel to it, then with +Z.
    """
    helper = np.array([1.0, 0.0, 0.0])
    if abs(v[0]) > 0.9:
        helper = np.array([0.0, 0.0, 1.0])
    axis = np.cross(v, helper)
    return axis / np.linalg.norm(axis)


def shortest_arc_rotation(normal, direction) -> Rotation:
    """Minimal rotation taking ``normal`` onto ``direction``.

    Parallel inputs give the identity. Antiparallel inputs give a half
    turn about a fixed axis perpendicular to ``direction``.
    """
    a = _normalized(normal)
    b = _normalized(direction)
    dot = float(np.clip(a @ b, -1.0, 1.0))

    if dot >= 1.0 - PARALLEL_TOLERANCE:
        return Rotation.identity()
    if dot <= -1.0 + PARALLEL_TOLERANCE:
        return Rotation.from_rotvec(_perpendicular_axis(b) * np.pi)

    axis = np.cross(a, b)
    angle = np.arctan2(np.linalg.norm(axis), dot)
    return Rotation.from_rotvec(axis / np.linalg.norm(axis) * angle)


def align_normal_to_direction(transform: WorldTransform, normal, direction) -> WorldTransform:
    """Return ``transform`` rotated so a world-space ``normal`` points along ``direction``."""
    return transform.rotated(shortest_arc_rotation(normal, direction))
