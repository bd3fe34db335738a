"""Fit a soil floor inside a shell: select, align, profile, fill."""

import logging

from ..state import FitParams
from .faces import select_extremal_face
from .filler import build_filler
from .floor import profile_floor
from .mesh import TriangleMesh
from .models import TerrariumFit
from .orientation import align_normal_to_direction
from .transform import WorldTransform

logger = logging.getLogger(__name__)

# How far the unit down vector may lean off -Y
VERTICAL_TOLERANCE = 1e-9


def fit_shell(
    mesh: TriangleMesh,
    transform: WorldTransform | None = None,
    params: FitParams | None = None,
) -> TerrariumFit:
    """Run the fitting pipeline once for a shell.

    Stages run in a fixed order: the face closest to ``params.down`` is
    selected, the shell is rotated so that face points straight down, the
    floor height and boundary are read from the rotated shell, and the soil
    volume is built on that boundary. An empty mesh keeps its transform and
    gets the fallback floor height; a degenerate floor yields no filler.
    Neither condition raises. A ``down`` direction other than -Y raises
    ValueError, since the floor is profiled on the horizontal plane.
    """
    params = params or FitParams()
    transform = transform or WorldTransform.identity()
    if params.down[1] > -1.0 + VERTICAL_TOLERANCE:
        raise ValueError(
            f"down must point along -Y, got {params.down}; "
            "the floor is profiled on the horizontal XZ plane"
        )

    selection = select_extremal_face(mesh, transform, params.down)
    if selection is None:
        logger.warning("No face to align; keeping the shell's current orientation")
        aligned = transform
    else:
        aligned = align_normal_to_direction(transform, selection.normal, params.down)

    floor = profile_floor(
        mesh, aligned, params.down,
        epsilon=params.dedup_epsilon,
        height_tolerance=params.height_tolerance,
        fallback=params.fallback_floor_y,
    )
    filler = build_filler(
        floor.polygon, floor.floor_y,
        thickness=params.thickness,
        inset_factor=params.inset_factor,
        yaw_offset=params.yaw_offset,
        sink_offset=params.sink_offset,
    )

    return TerrariumFit(
        transform=aligned,
        normal=None if selection is None else tuple(float(c) for c in selection.normal),
        score=None if selection is None else selection.score,
        floor=floor,
        filler=filler,
    )
