"""MCP server for terra-bits.

Registers all tools and runs via stdio transport.
"""

from mcp.server.fastmcp import FastMCP

from .tools.params import register_params_tools
from .tools.generate import register_generate_tools
from .tools.export import register_export_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "terra-bits",
    instructions="Build a glass dodecahedron terrarium with a soil floor fitted flush to its lowest face",
)

# Register all tool groups
register_params_tools(mcp)
register_generate_tools(mcp)
register_export_tools(mcp)
register_status_tools(mcp)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
