"""Pydantic return models for core computation functions."""

from typing import NamedTuple, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from scipy.spatial.transform import Rotation

from .transform import WorldTransform


class MeshResult(BaseModel):
    """Indexed triangle mesh handed to exporters and the session state."""
    vertices: list[list[float]]
    faces: list[list[int]]
    name: str = ""
    role: str = ""

    @field_validator("vertices")
    @classmethod
    def vertices_must_be_3d(cls, v: list[list[float]]) -> list[list[float]]:
        bad = [i for i, vertex in enumerate(v) if len(vertex) != 3]
        if bad:
            raise ValueError(f"Vertex {bad[0]} must have exactly 3 components, got {len(v[bad[0]])}")
        return v

    @field_validator("faces")
    @classmethod
    def faces_must_be_triangles(cls, v: list[list[int]]) -> list[list[int]]:
        bad = [i for i, face in enumerate(v) if len(face) != 3]
        if bad:
            raise ValueError(f"Face {bad[0]} must have exactly 3 indices, got {len(v[bad[0]])}")
        return v

    @model_validator(mode="after")
    def face_indices_must_be_valid(self) -> "MeshResult":
        if not self.faces:
            return self
        faces = np.asarray(self.faces)
        if faces.min() < 0 or faces.max() >= len(self.vertices):
            raise ValueError(
                f"Face indices must lie in [0, {len(self.vertices)}), "
                f"got range [{faces.min()}, {faces.max()}]"
            )
        return self


class FaceSelection(NamedTuple):
    """Best-aligned triangle found by a face scan."""
    index: int
    normal: np.ndarray
    score: float
    y_sum: float
    sample_count: int

    @property
    def height(self) -> float:
        """Mean world-space Y of the winning triangle's vertices."""
        return self.y_sum / self.sample_count


class FloorProfile(BaseModel):
    """Height and ordered boundary of the lowest face."""
    floor_y: float
    polygon: list[tuple[float, float]]

    @property
    def is_degenerate(self) -> bool:
        return len(self.polygon) < 3


class FillerVolume(BaseModel):
    """Extruded soil mesh in local coordinates plus its placement.

    World position of a local vertex is the vertex rotated by ``yaw`` about
    +Y, then translated by ``position``.
    """
    vertices: list[list[float]]
    faces: list[list[int]]
    outline: list[tuple[float, float]]
    position: tuple[float, float, float]
    yaw: float = 0.0

    @property
    def placement(self) -> WorldTransform:
        return WorldTransform(
            rotation=Rotation.from_euler("y", self.yaw),
            translation=self.position,
        )

    def world_vertices(self) -> np.ndarray:
        return self.placement.apply(self.vertices)

    def to_mesh_result(self, name: str = "Soil") -> MeshResult:
        return MeshResult(
            vertices=self.world_vertices().tolist(),
            faces=self.faces,
            name=name,
            role="soil",
        )


class TerrariumFit(BaseModel):
    """Everything the pipeline hands back to scene assembly."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    transform: WorldTransform
    normal: Optional[tuple[float, float, float]] = None
    score: Optional[float] = None
    floor: FloorProfile
    filler: Optional[FillerVolume] = None
