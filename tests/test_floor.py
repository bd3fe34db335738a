"""Tests for floor height and floor polygon extraction."""

import math

import numpy as np
import pytest

from terra_bits.core.faces import DOWN, select_extremal_face
from terra_bits.core.floor import (
    FALLBACK_FLOOR_Y,
    compute_floor_height,
    compute_floor_polygon,
    profile_floor,
)
from terra_bits.core.mesh import TriangleMesh
from terra_bits.core.orientation import align_normal_to_direction
from terra_bits.core.shell import dodecahedron_corners, floor_apothem, generate_dodecahedron
from terra_bits.core.transform import WorldTransform


def _aligned_dodecahedron(radius=0.8, indexed=False, start=None):
    shell = generate_dodecahedron(radius, indexed=indexed)
    start = start or WorldTransform.identity()
    sel = select_extremal_face(shell, start, DOWN)
    return shell, align_normal_to_direction(start, sel.normal, DOWN)


class TestComputeFloorHeight:
    def test_dodecahedron_matches_apothem(self):
        """Radius 0.8: the lowest face sits one inradius below the centre."""
        shell, aligned = _aligned_dodecahedron(0.8)
        floor_y = compute_floor_height(shell, aligned, DOWN)
        assert floor_y == pytest.approx(-floor_apothem(0.8), abs=1e-3)
        assert floor_y == pytest.approx(-0.635723, abs=1e-5)

    def test_follows_translation(self):
        start = WorldTransform(translation=[0.0, 1.0, 0.0])
        shell, aligned = _aligned_dodecahedron(0.8, start=start)
        assert compute_floor_height(shell, aligned) == pytest.approx(1.0 - floor_apothem(0.8))

    def test_empty_mesh_uses_fallback(self):
        mesh = TriangleMesh(positions=[])
        assert compute_floor_height(mesh, WorldTransform.identity()) == FALLBACK_FLOOR_Y
        assert compute_floor_height(mesh, WorldTransform.identity(), fallback=-1.0) == -1.0


class TestComputeFloorPolygon:
    @pytest.mark.parametrize("indexed", [False, True])
    def test_dodecahedron_floor_is_pentagon(self, indexed):
        shell, aligned = _aligned_dodecahedron(0.8, indexed=indexed)
        floor_y = compute_floor_height(shell, aligned)
        polygon = compute_floor_polygon(shell, aligned, floor_y)
        assert len(polygon) == 5

        world = aligned.apply(dodecahedron_corners(0.8))
        on_floor = world[np.abs(world[:, 1] - floor_y) < 1e-3]
        assert len(on_floor) == 5
        for x, z in polygon:
            assert np.min(np.hypot(on_floor[:, 0] - x, on_floor[:, 2] - z)) < 1e-9

    def test_points_sorted_by_angle(self):
        shell, aligned = _aligned_dodecahedron(0.8)
        polygon = np.array(compute_floor_polygon(shell, aligned, compute_floor_height(shell, aligned)))
        center = polygon.mean(axis=0)
        angles = np.arctan2(polygon[:, 1] - center[1], polygon[:, 0] - center[0])
        steps = np.diff(np.append(angles, angles[0] + 2 * math.pi))
        assert np.all(steps > 0)
        assert steps.sum() == pytest.approx(2 * math.pi)

    def test_regular_pentagon(self):
        radius = 0.8
        shell, aligned = _aligned_dodecahedron(radius)
        polygon = np.array(compute_floor_polygon(shell, aligned, compute_floor_height(shell, aligned)))
        center = polygon.mean(axis=0)
        radii = np.linalg.norm(polygon - center, axis=1)
        sides = np.linalg.norm(polygon - np.roll(polygon, -1, axis=0), axis=1)
        edge = 4 * radius / (math.sqrt(3) * (1 + math.sqrt(5)))
        assert np.allclose(radii, edge / (2 * math.sin(math.pi / 5)))
        assert np.allclose(sides, edge)

    def test_dedup_collapses_shared_corners(self):
        """Corners repeated by every triangle touching them appear once."""
        shell, aligned = _aligned_dodecahedron(0.8, indexed=False)
        assert shell.vertex_count == 108
        floor_y = compute_floor_height(shell, aligned)
        assert len(compute_floor_polygon(shell, aligned, floor_y)) == 5

    def test_near_duplicates_within_epsilon_merge(self):
        positions = [
            [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0],
            [0.0005, 0.0, 0.0], [1.0, 0.0, 0.0004], [0.0, 1.0, 0.0],
        ]
        mesh = TriangleMesh(positions=positions)
        polygon = compute_floor_polygon(mesh, WorldTransform.identity(), 0.0)
        assert len(polygon) == 3

    def test_height_band(self):
        positions = [[0, 0, 0], [1, 0.0009, 0], [0, 0.002, 1]]
        mesh = TriangleMesh(positions=positions)
        polygon = compute_floor_polygon(mesh, WorldTransform.identity(), 0.0)
        assert len(polygon) == 2
        wider = compute_floor_polygon(mesh, WorldTransform.identity(), 0.0, height_tolerance=0.01)
        assert len(wider) == 3

    def test_two_corners_is_degenerate(self):
        positions = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 0, 0], [0, 0, 0], [0, 2, 0]]
        polygon = compute_floor_polygon(TriangleMesh(positions=positions), WorldTransform.identity(), 0.0)
        assert sorted(polygon) == [(0.0, 0.0), (1.0, 0.0)]

    def test_profile_floor(self):
        shell, aligned = _aligned_dodecahedron(0.8)
        profile = profile_floor(shell, aligned)
        assert not profile.is_degenerate
        assert profile.floor_y == pytest.approx(-floor_apothem(0.8))
        assert len(profile.polygon) == 5

    def test_profile_floor_empty_mesh(self):
        profile = profile_floor(TriangleMesh(positions=[]), WorldTransform.identity())
        assert profile.floor_y == FALLBACK_FLOOR_Y
        assert profile.is_degenerate


class TestDedupePoints:
    def test_first_point_wins(self):
        from terra_bits.core.floor import _dedupe_points
        pts = np.array([[0.5, 0.5], [0.0, 0.0], [0.5004, 0.5]])
        out = _dedupe_points(pts, 1e-3)
        np.testing.assert_allclose(out, [[0.5, 0.5], [0.0, 0.0]])

    def test_chain_is_not_merged_transitively(self):
        """A dropped point does not drop its own neighbours."""
        from terra_bits.core.floor import _dedupe_points
        pts = np.array([[0.0, 0.0], [0.0006, 0.0], [0.0012, 0.0]])
        out = _dedupe_points(pts, 1e-3)
        np.testing.assert_allclose(out, [[0.0, 0.0], [0.0012, 0.0]])

    def test_points_exactly_epsilon_apart_both_kept(self):
        from terra_bits.core.floor import _dedupe_points
        pts = np.array([[0.0, 0.0], [0.001, 0.0]])
        assert len(_dedupe_points(pts, 1e-3)) == 2

    def test_empty(self):
        from terra_bits.core.floor import _dedupe_points
        assert _dedupe_points(np.zeros((0, 2)), 1e-3).shape == (0, 2)

    def test_many_coincident_corners(self):
        from terra_bits.core.floor import _dedupe_points
        corners = np.array([[math.cos(a), math.sin(a)] for a in np.linspace(0, 2 * math.pi, 5, endpoint=False)])
        pts = np.repeat(corners, 40, axis=0)
        out = _dedupe_points(pts, 1e-3)
        np.testing.assert_allclose(out, corners)
