"""Terrarium shell geometry: a regular dodecahedron and its frame edges."""

import math
from collections import defaultdict

import numpy as np
from scipy.spatial import ConvexHull

from .faces import triangle_normals
from .models import MeshResult
from .mesh import TriangleMesh
from .transform import WorldTransform

PHI = (1 + math.sqrt(5)) / 2
SHELL_RADIUS = 0.8
# Scale applied to frame edges so they draw just outside the glass
FRAME_SCALE = 1.001
# Half-width of the swept frame bars
FRAME_RADIUS = 0.004


def dodecahedron_corners(radius: float = SHELL_RADIUS) -> np.ndarray:
    """The 20 corners of a regular dodecahedron with circumradius ``radius``.

    Corners are (±1, ±1, ±1), (0, ±1/φ, ±φ), (±1/φ, ±φ, 0) and
    (±φ, 0, ±1/φ), all at distance √3 from the origin before scaling.
    """
    r = 1 / PHI
    corners = [
        [x, y, z] for x in (-1, 1) for y in (-1, 1) for z in (-1, 1)
    ]
    corners += [[0, sy * r, sz * PHI] for sy in (-1, 1) for sz in (-1, 1)]
    corners += [[sx * r, sy * PHI, 0] for sx in (-1, 1) for sy in (-1, 1)]
    corners += [[sx * PHI, 0, sz * r] for sx in (-1, 1) for sz in (-1, 1)]
    return np.array(corners, dtype=np.float64) * (radius / math.sqrt(3))


def _pentagon_faces(points: np.ndarray, tol: float = 1e-7) -> list[list[int]]:
    """Group hull facets by plane; return each face's corners CCW from outside."""
    hull = ConvexHull(points)
    faces = []
    planes = []
    for eq in hull.equations:
        normal, offset = eq[:3], eq[3]
        if any(np.allclose(normal, seen, atol=tol) for seen in planes):
            continue
        planes.append(normal)
        members = np.flatnonzero(np.abs(points @ normal + offset) < tol)

        center = points[members].mean(axis=0)
        u = points[members[0]] - center
        u /= np.linalg.norm(u)
        v = np.cross(normal, u)
        rel = points[members] - center
        angles = np.arctan2(rel @ v, rel @ u)
        faces.append(members[np.argsort(angles)].tolist())
    return faces


def generate_dodecahedron(radius: float = SHELL_RADIUS, indexed: bool = False) -> TriangleMesh:
    """Regular dodecahedron shell centred on the origin.

    Each pentagon is fanned into 3 triangles (36 in total) wound CCW from
    outside. The default non-indexed layout repeats shared corners per
    triangle (108 vertices); ``indexed=True`` shares the 20 corners.
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    points = dodecahedron_corners(radius)
    triangles = []
    for face in _pentagon_faces(points):
        for i in range(1, len(face) - 1):
            triangles.append([face[0], face[i], face[i + 1]])
    triangles = np.array(triangles, dtype=np.int64)

    if indexed:
        return TriangleMesh(positions=points, indices=triangles)
    return TriangleMesh(positions=points[triangles.reshape(-1)])


def floor_apothem(radius: float = SHELL_RADIUS) -> float:
    """Distance from the centre of a regular dodecahedron to any face."""
    return radius * math.sqrt((5 + 2 * math.sqrt(5)) / 15)


def feature_edges(
    mesh: TriangleMesh,
    transform: WorldTransform | None = None,
    threshold_degrees: float = 1.0,
    precision: int = 4,
) -> np.ndarray:
    """Edges where the surface creases by more than ``threshold_degrees``.

    Coincident vertices are welded after rounding to ``precision``
    decimals, so non-indexed meshes give the same result as indexed ones.
    Edges used by a single triangle are always kept.

    Returns an (E, 2, 3) array of segment endpoints.
    """
    transform = transform or WorldTransform.identity()
    if mesh.triangle_count == 0:
        return np.zeros((0, 2, 3))

    welded = mesh.welded(precision)
    world = welded.world_positions(transform)
    tris = welded.triangle_indices()
    normals, valid = triangle_normals(world[tris])

    edge_faces: dict[tuple[int, int], list[int]] = defaultdict(list)
    for t, (a, b, c) in enumerate(tris):
        if not valid[t]:
            continue
        for p, q in ((a, b), (b, c), (c, a)):
            edge_faces[tuple(sorted((int(p), int(q))))].append(t)

    cos_threshold = math.cos(math.radians(threshold_degrees))
    segments = []
    for (p, q), owners in edge_faces.items():
        if len(owners) == 1 or float(normals[owners[0]] @ normals[owners[1]]) <= cos_threshold:
            segments.append([world[p], world[q]])
    return np.array(segments, dtype=np.float64).reshape(-1, 2, 3)


def frame_mesh(
    edges: np.ndarray,
    radius: float = FRAME_RADIUS,
    n_sides: int = 4,
    name: str = "Frame",
) -> MeshResult:
    """Sweep each edge segment into a closed prism.

    Every segment gets its own ring of ``n_sides`` vertices at both ends,
    side walls and flat caps, wound counter-clockwise from outside.
    Zero-length segments are skipped.
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    if n_sides < 3:
        raise ValueError(f"n_sides must be at least 3, got {n_sides}")

    up = np.array([0.0, 1.0, 0.0])
    angles = 2.0 * np.pi * np.arange(n_sides) / n_sides
    vertices = []
    faces = []
    for start, end in np.asarray(edges, dtype=np.float64).reshape(-1, 2, 3):
        axis = end - start
        length = np.linalg.norm(axis)
        if length < 1e-12:
            continue
        axis /= length

        # (u, v, axis) is right-handed, so rings run CCW seen from the end
        ref = up if abs(axis @ up) < 0.99 else np.array([1.0, 0.0, 0.0])
        u = np.cross(axis, ref)
        u /= np.linalg.norm(u)
        v = np.cross(axis, u)
        ring = radius * (np.outer(np.cos(angles), u) + np.outer(np.sin(angles), v))

        base = len(vertices)
        vertices.extend((start + ring).tolist())
        vertices.extend((end + ring).tolist())

        for k in range(n_sides):
            k_next = (k + 1) % n_sides
            s0, s1 = base + k, base + k_next
            e0, e1 = base + n_sides + k, base + n_sides + k_next
            faces.append([s0, s1, e1])
            faces.append([s0, e1, e0])
        for k in range(1, n_sides - 1):
            faces.append([base, base + k + 1, base + k])
            end_ring = base + n_sides
            faces.append([end_ring, end_ring + k, end_ring + k + 1])

    return MeshResult(vertices=vertices, faces=faces, name=name, role="frame")


def frame_transform(transform: WorldTransform) -> WorldTransform:
    """Transform for the frame overlay: the shell's, scaled up slightly."""
    return WorldTransform(
        rotation=transform.rotation,
        translation=transform.translation.copy(),
        scale=transform.scale * FRAME_SCALE,
    )
