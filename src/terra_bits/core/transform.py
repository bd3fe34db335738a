"""World transforms mapping local mesh coordinates into scene space."""

import numpy as np
from scipy.spatial.transform import Rotation


class WorldTransform:
    """Rotation, translation and per-axis scale of a mesh.

    Scene coordinate system:
    - X: right
    - Y: up
    - Z: towards the viewer

    A local point ``p`` maps to ``rotation.apply(p * scale) + translation``.
    Instances are treated as values: operations return new transforms.
    """

    def __init__(self, rotation: Rotation | None = None, translation=None, scale=None):
        self.rotation = rotation if rotation is not None else Rotation.identity()
        self.translation = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        if scale is None:
            self.scale = np.ones(3)
        else:
            self.scale = np.broadcast_to(np.asarray(scale, dtype=np.float64), (3,)).copy()
        if self.translation.shape != (3,):
            raise ValueError(f"translation must have 3 components, got shape {self.translation.shape}")

    @classmethod
    def identity(cls) -> "WorldTransform":
        return cls()

    @classmethod
    def from_euler_degrees(cls, x: float, y: float, z: float, translation=None, scale=None) -> "WorldTransform":
        """Build a transform from intrinsic XYZ Euler angles in degrees."""
        rotation = Rotation.from_euler("XYZ", [x, y, z], degrees=True)
        return cls(rotation=rotation, translation=translation, scale=scale)

    def apply(self, points) -> np.ndarray:
        """Transform an (N, 3) array of local points into world space."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(pts) == 0:
            return pts.copy()
        return self.rotation.apply(pts * self.scale) + self.translation

    @property
    def matrix(self) -> np.ndarray:
        """4x4 homogeneous matrix (translation * rotation * scale)."""
        m = np.eye(4)
        m[:3, :3] = self.rotation.as_matrix() * self.scale
        m[:3, 3] = self.translation
        return m

    def rotated(self, rotation: Rotation) -> "WorldTransform":
        """Return a copy rotated rigidly about the mesh's own origin.

        The extra rotation is applied after the current one, so translation
        and scale are unchanged.
        """
        return WorldTransform(
            rotation=rotation * self.rotation,
            translation=self.translation.copy(),
            scale=self.scale.copy(),
        )

    def __repr__(self) -> str:
        quat = np.round(self.rotation.as_quat(), 6).tolist()
        return (
            f"WorldTransform(quat={quat}, translation={self.translation.tolist()}, "
            f"scale={self.scale.tolist()})"
        )
