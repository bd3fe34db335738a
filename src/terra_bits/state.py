"""Session state for the terra-bits MCP server.

Holds everything for the current terrarium: shell parameters, fitting
configuration, colors, and the meshes produced by the last generation.
"""

import math
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator, ConfigDict


class ShellParams(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    radius: float = Field(default=0.8, gt=0)
    rotation_x_deg: float = 0.0
    rotation_y_deg: float = 0.0
    rotation_z_deg: float = 0.0
    indexed: bool = False


class FitParams(BaseModel):
    """Constants consumed by the fitting pipeline."""

    model_config = ConfigDict(validate_assignment=True)

    down: tuple[float, float, float] = (0.0, -1.0, 0.0)
    height_tolerance: float = Field(default=1e-3, gt=0)
    dedup_epsilon: float = Field(default=1e-3, gt=0)
    inset_factor: float = Field(default=0.996, gt=0, le=1)
    thickness: float = Field(default=0.12, gt=0)
    sink_offset: float = Field(default=1e-3, ge=0)
    yaw_offset_deg: float = 0.0
    fallback_floor_y: float = -0.56

    @field_validator("down")
    @classmethod
    def normalize_direction(cls, v: tuple[float, float, float]) -> tuple[float, float, float]:
        length = math.sqrt(sum(c * c for c in v))
        if length < 1e-12:
            raise ValueError("down direction must be a non-zero vector")
        return (v[0] / length, v[1] / length, v[2] / length)

    @property
    def yaw_offset(self) -> float:
        return math.radians(self.yaw_offset_deg)


class Colors(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    glass: str = "#FFFFFF"
    soil: str = "#6D5331"
    frame: str = "#3B2F2F"

    @field_validator("glass", "soil", "frame", mode="before")
    @classmethod
    def validate_and_normalize_hex(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("Color must be a string")
        v = v.strip()
        if not re.match(r'^#[0-9A-Fa-f]{6}$', v):
            raise ValueError(f"Invalid hex color '{v}'. Must be #RRGGBB format.")
        return f"#{v[1:].upper()}"

    def as_dict(self) -> dict[str, str]:
        return {"glass": self.glass, "soil": self.soil, "frame": self.frame}


class MeshData(BaseModel):
    vertices: list[list[float]] = Field(default_factory=list)
    faces: list[list[int]] = Field(default_factory=list)
    name: str = ""
    role: str = ""


class SessionState(BaseModel):
    shell_params: ShellParams = Field(default_factory=ShellParams)
    fit_params: FitParams = Field(default_factory=FitParams)
    colors: Colors = Field(default_factory=Colors)
    shell_mesh: Optional[MeshData] = None
    soil_mesh: Optional[MeshData] = None
    frame_mesh: Optional[MeshData] = None
    floor_y: Optional[float] = None
    floor_polygon: list[tuple[float, float]] = []
    frame_edge_count: int = 0

    def clear_meshes(self) -> None:
        self.shell_mesh = None
        self.soil_mesh = None
        self.frame_mesh = None
        self.floor_y = None
        self.floor_polygon = []
        self.frame_edge_count = 0

    def summary(self) -> dict:
        sp = self.shell_params
        fp = self.fit_params
        return {
            "shell": {
                "radius": sp.radius,
                "rotation_deg": [sp.rotation_x_deg, sp.rotation_y_deg, sp.rotation_z_deg],
                "indexed": sp.indexed,
            },
            "fit": {
                "down": list(fp.down),
                "height_tolerance": fp.height_tolerance,
                "dedup_epsilon": fp.dedup_epsilon,
                "inset_factor": fp.inset_factor,
                "thickness": fp.thickness,
                "sink_offset": fp.sink_offset,
                "yaw_offset_deg": fp.yaw_offset_deg,
            },
            "colors": self.colors.as_dict(),
            "meshes": {
                "shell_generated": self.shell_mesh is not None,
                "soil_generated": self.soil_mesh is not None,
                "frame_generated": self.frame_mesh is not None,
                "frame_edges": self.frame_edge_count,
            },
            "floor": {
                "height": self.floor_y,
                "polygon_points": len(self.floor_polygon),
            } if self.floor_y is not None else None,
        }


# Global session state, one per MCP server process
state = SessionState()
