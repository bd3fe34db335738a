"""Read-only access to triangle mesh buffers."""

from typing import Iterator, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .models import MeshResult
from .transform import WorldTransform


class TriangleMesh(BaseModel):
    """Vertex positions plus an optional triangle index list.

    Without indices, every consecutive run of three vertices is a triangle.
    The buffers are never modified after construction; placement in the
    scene is carried separately by a ``WorldTransform``.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    positions: np.ndarray
    indices: Optional[np.ndarray] = None

    @field_validator("positions", mode="before")
    @classmethod
    def positions_as_array(cls, v) -> np.ndarray:
        arr = np.asarray(v, dtype=np.float64)
        if arr.size == 0:
            return np.zeros((0, 3))
        if arr.ndim == 1:
            if arr.size % 3 != 0:
                raise ValueError(f"Flat position buffer length {arr.size} is not a multiple of 3")
            arr = arr.reshape(-1, 3)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError(f"Positions must have 3 components each, got shape {arr.shape}")
        return arr

    @field_validator("indices", mode="before")
    @classmethod
    def indices_as_array(cls, v) -> Optional[np.ndarray]:
        if v is None:
            return None
        arr = np.asarray(v)
        if arr.size == 0:
            return np.zeros((0, 3), dtype=np.int64)
        if not np.issubdtype(arr.dtype, np.integer):
            if not np.all(np.equal(np.mod(arr, 1), 0)):
                raise ValueError("Indices must be integers")
        arr = arr.astype(np.int64).reshape(-1)
        if arr.size % 3 != 0:
            raise ValueError(f"Index buffer length {arr.size} is not a multiple of 3")
        return arr.reshape(-1, 3)

    @model_validator(mode="after")
    def buffers_must_describe_triangles(self) -> "TriangleMesh":
        n_verts = len(self.positions)
        if self.indices is None:
            if n_verts % 3 != 0:
                raise ValueError(
                    f"Non-indexed mesh needs a vertex count divisible by 3, got {n_verts}"
                )
        elif self.indices.size:
            lo, hi = int(self.indices.min()), int(self.indices.max())
            if lo < 0 or hi >= n_verts:
                raise ValueError(
                    f"Triangle references vertex {lo if lo < 0 else hi} "
                    f"but only {n_verts} vertices exist"
                )
        return self

    @classmethod
    def from_buffers(cls, positions, indices=None) -> "TriangleMesh":
        """Build a mesh from flat or (N, 3) position and index buffers."""
        return cls(positions=positions, indices=indices)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        if self.indices is None:
            return len(self.positions) // 3
        return len(self.indices)

    @property
    def is_indexed(self) -> bool:
        return self.indices is not None

    def triangle_indices(self) -> np.ndarray:
        """(T, 3) vertex offsets of every triangle, in buffer order."""
        if self.indices is None:
            return np.arange(len(self.positions), dtype=np.int64).reshape(-1, 3)
        return self.indices

    def iter_triangles(self) -> Iterator[tuple[int, int, int]]:
        for a, b, c in self.triangle_indices():
            yield int(a), int(b), int(c)

    def welded(self, precision: int = 6) -> "TriangleMesh":
        """Indexed copy with coincident vertices merged.

        Positions are matched after rounding to ``precision`` decimals; each
        merged group keeps the exact coordinates of one of its members.
        """
        if self.vertex_count == 0:
            return self
        key = np.round(self.positions * 10 ** precision).astype(np.int64)
        _, first, inverse = np.unique(key, axis=0, return_index=True, return_inverse=True)
        inverse = np.asarray(inverse).reshape(-1)
        return TriangleMesh(
            positions=self.positions[first],
            indices=inverse[self.triangle_indices()],
        )

    def world_positions(self, transform: WorldTransform) -> np.ndarray:
        return transform.apply(self.positions)

    def world_triangles(self, transform: WorldTransform) -> np.ndarray:
        """(T, 3, 3) world-space corner positions of every triangle."""
        world = self.world_positions(transform)
        if self.triangle_count == 0:
            return np.zeros((0, 3, 3))
        return world[self.triangle_indices()]

    def to_mesh_result(
        self,
        transform: WorldTransform | None = None,
        name: str = "",
        role: str = "",
    ) -> MeshResult:
        """Export the mesh, optionally in world space, as indexed triangles."""
        verts = self.positions if transform is None else self.world_positions(transform)
        return MeshResult(
            vertices=verts.tolist(),
            faces=self.triangle_indices().tolist(),
            name=name,
            role=role,
        )
