"""Soil filler generation: inset the floor polygon and extrude it."""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .models import FillerVolume

logger = logging.getLogger(__name__)

SOIL_HEIGHT = 0.12
INSET_FACTOR = 0.996
# Sinks the soil just below the floor so its bottom cap never z-fights
# with the shell's interior face
SINK_OFFSET = 1e-3

_EPS = 1e-12


def polygon_centroid(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Vertex average of a 2D point ring."""
    return np.asarray(points, dtype=np.float64).reshape(-1, 2).mean(axis=0)


def signed_area(points: np.ndarray) -> float:
    """Shoelace area; positive when the ring is counter-clockwise."""
    x, y = points[:, 0], points[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def inset_polygon(points, factor: float, center=None) -> np.ndarray:
    """Scale every point toward ``center`` (default: the centroid) by ``factor``."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    c = polygon_centroid(pts) if center is None else np.asarray(center, dtype=np.float64)
    return c + (pts - c) * factor


def _cross_2d(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def triangulate_polygon(points_2d) -> list[list[int]]:
    """Ear-clipping triangulation of a simple counter-clockwise ring.

    Returns index triplets into ``points_2d``, each wound counter-clockwise.
    Falls back to a fan over the remaining ring if no ear can be found.
    """
    pts = np.asarray(points_2d, dtype=np.float64).reshape(-1, 2)
    n = len(pts)
    if n < 3:
        return []

    ring = list(range(n))
    triangles = []

    def is_ear(pos: int) -> bool:
        m = len(ring)
        a, b, c = pts[ring[pos - 1]], pts[ring[pos]], pts[ring[(pos + 1) % m]]
        if _cross_2d(a, b, c) <= _EPS:
            return False
        for other in ring:
            if other in (ring[pos - 1], ring[pos], ring[(pos + 1) % m]):
                continue
            p = pts[other]
            if (_cross_2d(a, b, p) >= -_EPS and _cross_2d(b, c, p) >= -_EPS
                    and _cross_2d(c, a, p) >= -_EPS):
                return False
        return True

    while len(ring) > 3:
        ear = next((pos for pos in range(len(ring)) if is_ear(pos)), None)
        if ear is None:
            triangles.extend([ring[0], ring[i], ring[i + 1]] for i in range(1, len(ring) - 1))
            return triangles
        m = len(ring)
        triangles.append([ring[ear - 1], ring[ear], ring[(ear + 1) % m]])
        ring.pop(ear)

    triangles.append(ring)
    return triangles


def extrude_polygon(points_2d, thickness: float) -> tuple[list[list[float]], list[list[int]]]:
    """Extrude an (x, z) ring along +Y into a closed prism centred on y=0.

    Caps sit at ``±thickness / 2`` with no bevel. Faces wind
    counter-clockwise seen from outside.

    Returns (vertices, faces).
    """
    ring = np.asarray(points_2d, dtype=np.float64).reshape(-1, 2)
    if signed_area(ring) < 0:
        ring = ring[::-1]
    n = len(ring)
    half = thickness / 2.0

    vertices = [[float(x), half, float(z)] for x, z in ring]
    vertices += [[float(x), -half, float(z)] for x, z in ring]

    # A counter-clockwise (x, z) triangle faces -Y, so the top cap is reversed
    cap = triangulate_polygon(ring)
    faces = [[a, c, b] for a, b, c in cap]
    faces += [[n + a, n + b, n + c] for a, b, c in cap]

    for i in range(n):
        j = (i + 1) % n
        faces.append([i, j, n + i])
        faces.append([j, n + j, n + i])

    return vertices, faces


def build_filler(
    polygon,
    floor_y: float,
    thickness: float = SOIL_HEIGHT,
    inset_factor: float = INSET_FACTOR,
    yaw_offset: float = 0.0,
    sink_offset: float = SINK_OFFSET,
) -> Optional[FillerVolume]:
    """Soil volume resting on the floor polygon.

    The ring is inset toward its centroid by ``inset_factor``, extruded by
    ``thickness`` and placed with its horizontal centre on the polygon
    centroid at ``floor_y + thickness / 2 - sink_offset``, turned by
    ``yaw_offset`` radians about +Y.

    Returns None for polygons with fewer than 3 points.
    """
    if thickness <= 0:
        raise ValueError(f"thickness must be positive, got {thickness}")
    if not 0 < inset_factor <= 1:
        raise ValueError(f"inset_factor must lie in (0, 1], got {inset_factor}")

    pts = np.asarray(polygon, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 3:
        logger.warning("Skipping filler: floor polygon has only %d point(s)", len(pts))
        return None

    center = polygon_centroid(pts)
    outline = inset_polygon(pts - center, inset_factor, center=(0.0, 0.0))
    vertices, faces = extrude_polygon(outline, thickness)

    position = (
        float(center[0]),
        float(floor_y + thickness / 2.0 - sink_offset),
        float(center[1]),
    )
    logger.debug(
        "Filler: %d-gon, thickness=%.4f, position=%s, yaw=%.2f deg",
        len(outline), thickness, position, math.degrees(yaw_offset),
    )
    return FillerVolume(
        vertices=vertices,
        faces=faces,
        outline=[(float(x), float(z)) for x, z in outline],
        position=position,
        yaw=yaw_offset,
    )
