"""3MF multi-material export of the fitted terrarium, as custom XML in a ZIP."""

import logging
import zipfile

from ..core.models import MeshResult

logger = logging.getLogger(__name__)

UNITS = ("micron", "millimeter", "centimeter", "inch", "foot", "meter")
DEFAULT_COLOR = "#808080"


def _escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def export_3mf(
    meshes: list[MeshResult],
    output_path: str,
    colors: dict[str, str] | None = None,
    unit: str = "meter",
) -> dict:
    """Write shell and soil meshes into one 3MF archive.

    Each mesh becomes its own object with a base material colored by its
    ``role`` (looked up in ``colors``). Empty meshes are skipped.

    The archive holds:
    - [Content_Types].xml
    - _rels/.rels
    - 3D/3dmodel.model
    """
    if unit not in UNITS:
        raise ValueError(f"unit must be one of {', '.join(UNITS)}, got {unit!r}")
    colors = colors or {}

    objects = []
    for m in meshes:
        if not m.vertices or not m.faces:
            continue
        color = colors.get(m.role)
        if color is None:
            logger.warning("No color for mesh role %r, using %s", m.role, DEFAULT_COLOR)
            color = DEFAULT_COLOR
        objects.append((m, color.lstrip("#").upper()))

    if not objects:
        raise ValueError("No mesh data to export")

    with zipfile.ZipFile(output_path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", _CONTENT_TYPES)
        zf.writestr("_rels/.rels", _RELS)
        zf.writestr("3D/3dmodel.model", _build_model_xml(objects, unit))

    logger.info("Wrote %d object(s) to %s", len(objects), output_path)
    return {"success": True, "filepath": output_path, "objects": len(objects)}


def _build_model_xml(objects: list[tuple[MeshResult, str]], unit: str) -> str:
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<model unit="{unit}" xml:lang="en-US"',
        '  xmlns="http://schemas.microsoft.com/3dmanufacturing/core/2015/02"',
        '  xmlns:m="http://schemas.microsoft.com/3dmanufacturing/material/2015/02">',
        '  <metadata name="Application">terra-bits</metadata>',
        "  <resources>",
        '    <m:basematerials id="1">',
    ]
    for mesh, color in objects:
        parts.append(f'      <m:base name="{_escape(mesh.name)}" displaycolor="#{color}"/>')
    parts.append("    </m:basematerials>")

    for pindex, (mesh, _) in enumerate(objects):
        parts.append(
            f'    <object id="{pindex + 2}" name="{_escape(mesh.name)}" '
            f'pid="1" pindex="{pindex}" type="model">'
        )
        parts.append("      <mesh>")
        parts.append("        <vertices>")
        # 3MF is Z-up; scene space is Y-up
        parts.extend(
            f'          <vertex x="{x:.6f}" y="{-z:.6f}" z="{y:.6f}"/>'
            for x, y, z in mesh.vertices
        )
        parts.append("        </vertices>")
        parts.append("        <triangles>")
        parts.extend(
            f'          <triangle v1="{a}" v2="{b}" v3="{c}"/>' for a, b, c in mesh.faces
        )
        parts.append("        </triangles>")
        parts.append("      </mesh>")
        parts.append("    </object>")

    parts.append("  </resources>")
    parts.append("  <build>")
    parts.extend(f'    <item objectid="{i + 2}"/>' for i in range(len(objects)))
    parts.append("  </build>")
    parts.append("</model>")
    return "\n".join(parts)


_CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="model" ContentType="application/vnd.ms-package.3dmanufacturing-3dmodel+xml"/>
</Types>"""

_RELS = """<?xml version="1.0" encoding="UTF-8"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Target="/3D/3dmodel.model" Id="rel0" Type="http://schemas.microsoft.com/3dmanufacturing/2013/01/3dmodel"/>
</Relationships>"""
