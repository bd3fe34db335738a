"""Generation tool: generate_terrarium."""

import logging

from mcp.server.fastmcp import FastMCP, Context

from ..state import state, MeshData
from ..core.pipeline import fit_shell
from ..core.shell import generate_dodecahedron, feature_edges, frame_mesh, frame_transform
from ..core.transform import WorldTransform

logger = logging.getLogger(__name__)

STAGES = 3


def register_generate_tools(mcp: FastMCP):

    @mcp.tool()
    async def generate_terrarium(ctx: Context) -> str:
        """Build the glass shell and fit the soil floor inside it.

        Turns the shell so its lowest face lies flat, finds that face's
        outline, extrudes a soil layer on it and sweeps the shell edges
        into frame bars.
        **Next:** get_status or export_3mf.

        Re-run this after changing shell or fit params to update the meshes.
        """
        sp = state.shell_params
        state.clear_meshes()

        shell = generate_dodecahedron(sp.radius, indexed=sp.indexed)
        start = WorldTransform.from_euler_degrees(
            sp.rotation_x_deg, sp.rotation_y_deg, sp.rotation_z_deg,
        )
        await ctx.report_progress(1, STAGES)

        fit = fit_shell(shell, start, state.fit_params)
        await ctx.report_progress(2, STAGES)

        edges = feature_edges(shell, frame_transform(fit.transform))
        await ctx.report_progress(3, STAGES)

        glass = shell.welded().to_mesh_result(fit.transform, name="Glass", role="glass")
        state.shell_mesh = MeshData(
            vertices=glass.vertices, faces=glass.faces, name=glass.name, role=glass.role,
        )
        if fit.filler is not None:
            soil = fit.filler.to_mesh_result()
            state.soil_mesh = MeshData(
                vertices=soil.vertices, faces=soil.faces, name=soil.name, role=soil.role,
            )
        if len(edges):
            frame = frame_mesh(edges)
            state.frame_mesh = MeshData(
                vertices=frame.vertices, faces=frame.faces, name=frame.name, role=frame.role,
            )
        state.floor_y = fit.floor.floor_y
        state.floor_polygon = fit.floor.polygon
        state.frame_edge_count = len(edges)

        logger.debug("Terrarium generated with transform %r", fit.transform)
        soil_note = (
            f"soil {len(state.soil_mesh.vertices)} vertices"
            if state.soil_mesh else "no soil (degenerate floor)"
        )
        return (
            f"Terrarium generated: shell {shell.triangle_count} triangles, "
            f"floor at y={fit.floor.floor_y:.4f} with {len(fit.floor.polygon)} corners, "
            f"{soil_note}, {len(edges)} frame edges."
        )
