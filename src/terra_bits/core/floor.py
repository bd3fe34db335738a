"""Floor height and boundary polygon of an aligned shell."""

import logging

import numpy as np
from scipy.spatial import cKDTree

from .faces import DOWN, select_extremal_face
from .mesh import TriangleMesh
from .models import FloorProfile
from .transform import WorldTransform

logger = logging.getLogger(__name__)

# Absolute band around the floor height for vertex membership. Independent
# of mesh size; meshes far from unit scale should pass their own value.
HEIGHT_TOLERANCE = 1e-3
# Minimum XZ distance between two distinct boundary corners
DEDUP_EPSILON = 1e-3
# Height reported for meshes without a usable face
FALLBACK_FLOOR_Y = -0.56


def compute_floor_height(
    mesh: TriangleMesh,
    transform: WorldTransform,
    direction=DOWN,
    fallback: float = FALLBACK_FLOOR_Y,
) -> float:
    """Mean world Y of the triangle facing ``direction`` most closely.

    Call with an already aligned transform so that triangle is horizontal.
    """
    selection = select_extremal_face(mesh, transform, direction)
    if selection is None:
        logger.warning(
            "Mesh has no usable triangles (%d vertices); using fallback floor height %.4f",
            mesh.vertex_count, fallback,
        )
        return fallback
    return selection.height


def _dedupe_points(points: np.ndarray, epsilon: float) -> np.ndarray:
    """Keep points in order, dropping any within ``epsilon`` of a kept point.

    A dropped point never shadows later ones, so chains of close points
    are not merged transitively.
    """
    points = points.reshape(-1, 2)
    if len(points) == 0:
        return points
    tree = cKDTree(points)
    eps_sq = epsilon * epsilon
    dropped = np.zeros(len(points), dtype=bool)
    kept = []
    for i, p in enumerate(points):
        if dropped[i]:
            continue
        kept.append(i)
        for j in tree.query_ball_point(p, epsilon):
            if j > i and np.sum((points[j] - p) ** 2) < eps_sq:
                dropped[j] = True
    return points[kept]


def _sort_by_angle(points: np.ndarray) -> np.ndarray:
    """Order points by angle around their centroid, ascending.

    Valid only for points on a convex boundary; a non-convex ring sorted
    this way can self-intersect.
    """
    center = points.mean(axis=0)
    angles = np.arctan2(points[:, 1] - center[1], points[:, 0] - center[0])
    return points[np.argsort(angles, kind="stable")]


def compute_floor_polygon(
    mesh: TriangleMesh,
    transform: WorldTransform,
    floor_y: float,
    epsilon: float = DEDUP_EPSILON,
    height_tolerance: float = HEIGHT_TOLERANCE,
) -> list[tuple[float, float]]:
    """Ordered (x, z) corners of the mesh lying on the floor plane.

    Vertices within ``height_tolerance`` of ``floor_y`` are projected onto
    the horizontal plane and collapsed to one point per physical corner.
    With fewer than 3 corners the unordered survivors are returned so the
    caller can detect the degenerate floor.
    """
    world = mesh.world_positions(transform)
    on_floor = np.abs(world[:, 1] - floor_y) < height_tolerance
    projected = world[on_floor][:, [0, 2]]
    corners = _dedupe_points(projected, epsilon)

    if len(corners) < 3:
        logger.warning(
            "Degenerate floor: only %d distinct corner(s) at y=%.6f", len(corners), floor_y,
        )
        return [(float(x), float(z)) for x, z in corners]

    ordered = _sort_by_angle(corners)
    logger.debug("Floor polygon at y=%.6f has %d corners", floor_y, len(ordered))
    return [(float(x), float(z)) for x, z in ordered]


def profile_floor(
    mesh: TriangleMesh,
    transform: WorldTransform,
    direction=DOWN,
    epsilon: float = DEDUP_EPSILON,
    height_tolerance: float = HEIGHT_TOLERANCE,
    fallback: float = FALLBACK_FLOOR_Y,
) -> FloorProfile:
    """Floor height and boundary polygon in one call."""
    floor_y = compute_floor_height(mesh, transform, direction, fallback=fallback)
    polygon = compute_floor_polygon(
        mesh, transform, floor_y, epsilon=epsilon, height_tolerance=height_tolerance,
    )
    return FloorProfile(floor_y=floor_y, polygon=polygon)
