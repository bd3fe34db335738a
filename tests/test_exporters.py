"""Tests for the 3MF exporter and export tool helpers."""

import os
import zipfile
import pytest


def _minimal_mesh(name="Glass", role="glass"):
    """Return a minimal valid MeshResult (single tetrahedron)."""
    from terra_bits.core.models import MeshResult
    return MeshResult(
        name=name,
        role=role,
        vertices=[
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        faces=[
            [0, 2, 1],
            [0, 1, 3],
            [0, 3, 2],
            [1, 2, 3],
        ],
    )


COLORS = {"glass": "#FFFFFF", "soil": "#6D5331", "frame": "#3B2F2F"}


def _model_xml(path):
    with zipfile.ZipFile(path) as zf:
        return zf.read("3D/3dmodel.model").decode()


class TestExport3MF:
    def test_output_is_valid_zip(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "test.3mf")
        export_3mf([_minimal_mesh()], out, COLORS)
        assert zipfile.is_zipfile(out)

    def test_zip_contains_required_files(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "test.3mf")
        export_3mf([_minimal_mesh()], out, COLORS)
        with zipfile.ZipFile(out) as zf:
            names = zf.namelist()
        assert "[Content_Types].xml" in names
        assert "_rels/.rels" in names
        assert "3D/3dmodel.model" in names

    def test_model_xml_contains_mesh_data(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "test.3mf")
        export_3mf([_minimal_mesh()], out, COLORS)
        xml = _model_xml(out)
        assert "<vertices>" in xml
        assert "<triangles>" in xml
        assert xml.count("<vertex ") == 4
        assert xml.count("<triangle ") == 4

    def test_one_object_per_mesh_colored_by_role(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        meshes = [_minimal_mesh("Glass", "glass"), _minimal_mesh("Soil", "soil")]
        out = str(tmp_path / "multi.3mf")
        result = export_3mf(meshes, out, COLORS)
        assert result["objects"] == 2
        xml = _model_xml(out)
        assert xml.count("<object ") == 2
        assert 'displaycolor="#FFFFFF"' in xml
        assert 'displaycolor="#6D5331"' in xml

    def test_y_up_written_as_z_up(self, tmp_path):
        """Scene (x, y, z) becomes 3MF (x, -z, y)."""
        from terra_bits.core.models import MeshResult
        from terra_bits.exporters.threemf import export_3mf
        mesh = MeshResult(
            vertices=[[1.0, 2.0, 3.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
            faces=[[0, 1, 2]],
            name="Soil",
            role="soil",
        )
        out = str(tmp_path / "axes.3mf")
        export_3mf([mesh], out, COLORS)
        assert '<vertex x="1.000000" y="-3.000000" z="2.000000"/>' in _model_xml(out)

    def test_unit_attribute(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "mm.3mf")
        export_3mf([_minimal_mesh()], out, COLORS, unit="millimeter")
        assert 'unit="millimeter"' in _model_xml(out)

    def test_default_unit_is_meter(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "m.3mf")
        export_3mf([_minimal_mesh()], out, COLORS)
        assert 'unit="meter"' in _model_xml(out)

    def test_invalid_unit(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        with pytest.raises(ValueError, match="unit"):
            export_3mf([_minimal_mesh()], str(tmp_path / "bad.3mf"), COLORS, unit="furlong")

    def test_missing_color_falls_back_with_warning(self, tmp_path, caplog):
        import logging
        from terra_bits.exporters.threemf import DEFAULT_COLOR, export_3mf
        out = str(tmp_path / "fallback.3mf")
        with caplog.at_level(logging.WARNING, logger="terra_bits.exporters.threemf"):
            export_3mf([_minimal_mesh("Moss", "moss")], out, COLORS)
        assert f'displaycolor="{DEFAULT_COLOR}"' in _model_xml(out)
        assert any("moss" in r.message for r in caplog.records)

    def test_entity_escaping_ampersand_lt_quot(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        mesh = _minimal_mesh(name='Rock & Roll <>"')
        out = str(tmp_path / "escape.3mf")
        export_3mf([mesh], out, COLORS)
        xml = _model_xml(out)
        assert "&amp;" in xml
        assert "&lt;" in xml
        assert "&quot;" in xml
        assert ' name="Rock & Roll' not in xml

    def test_gt_entity_escaped_in_name(self, tmp_path):
        """'>' in mesh name should be escaped as '&gt;' in 3MF XML."""
        from terra_bits.exporters.threemf import export_3mf
        mesh = _minimal_mesh(name="Depth > 1cm")
        out = str(tmp_path / "gt_escape.3mf")
        export_3mf([mesh], out, COLORS)
        xml = _model_xml(out)
        assert "&gt;" in xml, "Should escape '>' as '&gt;'"
        assert ' name="Depth > 1cm"' not in xml

    def test_empty_meshes_are_skipped(self, tmp_path):
        from terra_bits.core.models import MeshResult
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "skip.3mf")
        result = export_3mf([_minimal_mesh(), MeshResult(vertices=[], faces=[], role="soil")], out, COLORS)
        assert result["objects"] == 1

    def test_raises_on_empty_mesh_list(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        with pytest.raises(ValueError, match="No mesh data"):
            export_3mf([], str(tmp_path / "empty.3mf"))

    def test_returns_correct_filepath(self, tmp_path):
        from terra_bits.exporters.threemf import export_3mf
        out = str(tmp_path / "check.3mf")
        result = export_3mf([_minimal_mesh()], out, COLORS)
        assert result["filepath"] == out
        assert os.path.exists(out)


def test_validate_output_path_rejects_outside_home():
    """_validate_output_path should raise ValueError for paths outside home directory."""
    from terra_bits.tools.export import _validate_output_path

    # /etc/ is almost certainly outside home directory
    with pytest.raises(ValueError, match="outside"):
        _validate_output_path("/etc/terra_test.3mf")


def test_validate_output_path_accepts_home_subdirectory():
    """_validate_output_path should accept paths inside the home directory."""
    from terra_bits.tools.export import _validate_output_path
    from pathlib import Path

    # Should not raise
    _validate_output_path(str(Path.home() / "terra_test_output.3mf"))


def test_all_mesh_roles_have_colors():
    """Every role produced by generation must have a color in Colors."""
    from terra_bits.state import Colors

    colors_dict = Colors().as_dict()
    for role in ("glass", "soil", "frame"):
        assert role in colors_dict


def test_collect_meshes_orders_glass_soil_frame():
    from terra_bits.state import state, MeshData
    from terra_bits.tools.export import _collect_meshes

    original = state.shell_mesh, state.soil_mesh, state.frame_mesh
    tri = dict(vertices=[[0, 0, 0], [1, 0, 0], [0, 1, 0]], faces=[[0, 1, 2]])
    state.shell_mesh = MeshData(name="Glass", role="glass", **tri)
    state.soil_mesh = MeshData(name="Soil", role="soil", **tri)
    state.frame_mesh = MeshData(name="Frame", role="frame", **tri)
    try:
        meshes = _collect_meshes()
    finally:
        state.shell_mesh, state.soil_mesh, state.frame_mesh = original

    assert [m.role for m in meshes] == ["glass", "soil", "frame"]
