"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, shell: bool = False, soil: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(state, shell=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if shell and not state.shell_mesh:
        raise ValueError(
            "Generate a terrarium first with generate_terrarium."
        )
    if soil and not state.soil_mesh:
        raise ValueError(
            "The last terrarium has no soil; its floor was degenerate. "
            "Adjust shell or fit params and run generate_terrarium again."
        )
