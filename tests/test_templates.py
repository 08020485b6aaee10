"""
DXF template sheet export, read back with ezdxf.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import ezdxf
import numpy as np

from hydrofoil.airfoil import naca4
from hydrofoil.templates import export_profile_dxf, shelf_origins


def test_shelf_origins_place_sections_left_to_right():
    extents = [(-5.0, 5.0, -1.0, 1.0), (0.0, 20.0, -2.0, 2.0)]
    assert shelf_origins(extents, 10.0) == [(5.0, 1.0), (20.0, 2.0)]


def test_sections_get_their_own_layers(tmp_path):
    root = naca4(0.02, 0.4, 0.12).scaled(149.0)
    tip_2d = naca4(0.0, 0.0, 0.10).scaled(50.0)
    tip = np.column_stack([tip_2d, np.full(len(tip_2d), 575.0)])
    output = export_profile_dxf({"root": root, "tip": tip}, tmp_path / "sheet" / "templates.dxf")

    assert output.exists()
    doc = ezdxf.readfile(output)
    for layer in ("SECTION_ROOT", "SECTION_TIP", "SPAN_AXIS", "LABELS"):
        assert layer in doc.layers

    msp = doc.modelspace()
    outlines = list(msp.query("LWPOLYLINE"))
    assert len(outlines) == 2
    assert all(o.closed for o in outlines)
    assert sorted(t.dxf.text for t in msp.query("TEXT")) == ["root", "tip"]


def test_sections_do_not_overlap(tmp_path):
    square = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0]])
    output = export_profile_dxf({"a": square, "b": square}, tmp_path / "t.dxf", spacing=5.0)
    first, second = ezdxf.readfile(output).modelspace().query("LWPOLYLINE")
    first_x = [p[0] for p in first.get_points()]
    second_x = [p[0] for p in second.get_points()]
    assert max(first_x) + 5.0 == min(second_x)
