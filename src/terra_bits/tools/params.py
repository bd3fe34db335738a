"""Configuration tools: set_shell_params, set_fit_params, set_colors."""

from mcp.server.fastmcp import FastMCP

from ..state import state


def register_params_tools(mcp: FastMCP):

    @mcp.tool()
    def set_shell_params(
        radius: float | None = None,
        rotation_x_deg: float | None = None,
        rotation_y_deg: float | None = None,
        rotation_z_deg: float | None = None,
        indexed: bool | None = None,
    ) -> str:
        """Set the glass shell geometry.

        Can be called any time before generate_terrarium.
        **Next:** generate_terrarium (re-run after changing params to update meshes).

        Args:
            radius: Circumradius of the dodecahedron shell (default 0.8).
            rotation_x_deg/rotation_y_deg/rotation_z_deg: Initial orientation
                of the shell before fitting, as XYZ Euler angles in degrees.
                The fit always turns a face downward, whatever the start.
            indexed: Share corner vertices through an index buffer instead of
                repeating them per triangle.
        """
        p = state.shell_params
        for name, value in [
            ("radius", radius), ("rotation_x_deg", rotation_x_deg),
            ("rotation_y_deg", rotation_y_deg), ("rotation_z_deg", rotation_z_deg),
            ("indexed", indexed),
        ]:
            if value is not None:
                try:
                    setattr(p, name, value)
                except Exception as e:
                    return f"Error: {e}"

        state.clear_meshes()

        return (
            f"Shell params: radius={p.radius}, rotation=({p.rotation_x_deg}, "
            f"{p.rotation_y_deg}, {p.rotation_z_deg}) deg, indexed={p.indexed}"
        )

    @mcp.tool()
    def set_fit_params(
        thickness: float | None = None,
        inset_factor: float | None = None,
        sink_offset: float | None = None,
        yaw_offset_deg: float | None = None,
        height_tolerance: float | None = None,
        dedup_epsilon: float | None = None,
    ) -> str:
        """Set soil fitting parameters.

        **Next:** generate_terrarium.

        Args:
            thickness: Soil extrusion height (default 0.12).
            inset_factor: Scale of the soil outline toward its centre, in (0, 1]
                (default 0.996).
            sink_offset: How far the soil sits below the floor face (default 0.001).
            yaw_offset_deg: Extra turn of the soil about the vertical axis.
            height_tolerance: Band around the floor height for corner membership.
            dedup_epsilon: Distance under which floor corners are merged.
        """
        p = state.fit_params
        for name, value in [
            ("thickness", thickness), ("inset_factor", inset_factor),
            ("sink_offset", sink_offset), ("yaw_offset_deg", yaw_offset_deg),
            ("height_tolerance", height_tolerance), ("dedup_epsilon", dedup_epsilon),
        ]:
            if value is not None:
                try:
                    setattr(p, name, value)
                except Exception as e:
                    return f"Error: {e}"

        state.clear_meshes()

        return (
            f"Fit params: thickness={p.thickness}, inset={p.inset_factor}, "
            f"sink={p.sink_offset}, yaw={p.yaw_offset_deg} deg"
        )

    @mcp.tool()
    def set_colors(
        glass: str | None = None,
        soil: str | None = None,
        frame: str | None = None,
    ) -> str:
        """Set material colors (hex #RRGGBB).

        Colors are applied at export time.

        Args:
            glass/soil/frame: Hex color strings.
        """
        c = state.colors
        for name, value in [("glass", glass), ("soil", soil), ("frame", frame)]:
            if value is not None:
                try:
                    setattr(c, name, value)
                except Exception as e:
                    return f"Error: {e}"

        return f"Colors: {c.as_dict()}"
