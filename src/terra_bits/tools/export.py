"""Export tool: export_3mf."""

import logging
import os
from pathlib import Path
from mcp.server.fastmcp import FastMCP

from ..state import state
from ..core.models import MeshResult
from ..exporters.threemf import export_3mf as do_export_3mf
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def _validate_output_path(output_path: str) -> None:
    """Raise ValueError if output_path resolves outside the user's home directory."""
    resolved = Path(output_path).resolve()
    home = Path.home().resolve()
    try:
        resolved.relative_to(home)
    except ValueError:
        raise ValueError(
            f"Output path {output_path!r} is outside the home directory. "
            "Use a path within your home directory."
        )


def _collect_meshes() -> list[MeshResult]:
    """Generated meshes in export order: glass, soil, then frame."""
    meshes = []
    for data in (state.shell_mesh, state.soil_mesh, state.frame_mesh):
        if data is None:
            continue
        meshes.append(MeshResult(
            vertices=data.vertices, faces=data.faces, name=data.name, role=data.role,
        ))
    return meshes


def register_export_tools(mcp: FastMCP):

    @mcp.tool()
    def export_3mf(output_path: str, unit: str = "meter") -> str:
        """Export the terrarium as a multi-material 3MF file.

        The glass shell, the soil and the frame bars are separate objects,
        each with its own material color.

        Args:
            output_path: Where to save the .3mf file (absolute path)
            unit: 3MF model unit; scene coordinates are written unscaled.
        """
        try:
            require_state(state, shell=True)
            _validate_output_path(output_path)
        except ValueError as e:
            return f"Error: {e}"

        if state.soil_mesh is None:
            logger.warning("Exporting terrarium without soil")

        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        try:
            result = do_export_3mf(
                _collect_meshes(), output_path, colors=state.colors.as_dict(), unit=unit,
            )
        except ValueError as e:
            return f"Error: {e}"
        return f"3MF exported to {output_path} ({result['objects']} objects)"
