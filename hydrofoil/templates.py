"""
DXF section templates.

Writes wing sections (root, tip, split boundaries) side by side on one
sheet for printing as paper templates or checking against a printed part.
Each section gets its own layer, a label and a mark on the span axis.
"""

from pathlib import Path
from typing import Dict, List, Tuple

import ezdxf
from ezdxf.enums import TextEntityAlignment
import numpy as np

from .geometry import point_extremes


def shelf_origins(extents: List[Tuple[float, float, float, float]], spacing: float) -> List[Tuple[float, float]]:
    """Left-to-right placement offsets for sections with the given extents."""
    origins = []
    cursor_x = 0.0
    for min_x, max_x, min_y, _ in extents:
        origins.append((cursor_x - min_x, -min_y))
        cursor_x += (max_x - min_x) + spacing
    return origins


def export_profile_dxf(sections: Dict[str, np.ndarray], output_file: Path, spacing: float = 10.0) -> Path:
    """Export named (N, 2) or (N, 3) sections; only x and y are drawn."""
    output_file.parent.mkdir(parents=True, exist_ok=True)
    doc = ezdxf.new()
    msp = doc.modelspace()
    doc.layers.add("SPAN_AXIS")
    doc.layers.add("LABELS")

    names = list(sections)
    outlines = [np.asarray(sections[name])[:, :2] for name in names]
    extents = [point_extremes(outline) for outline in outlines]

    for name, outline, ext, (dx, dy) in zip(names, outlines, extents, shelf_origins(extents, spacing)):
        layer = f"SECTION_{name.upper()}"
        doc.layers.add(layer)
        points = [(float(x) + dx, float(y) + dy) for x, y in outline]
        msp.add_lwpolyline(points, close=True, dxfattribs={"layer": layer})

        # Span axis mark at the section's x = 0
        height = ext[3] - ext[2]
        msp.add_line((dx, dy + ext[2] - 2.0), (dx, dy + ext[3] + 2.0), dxfattribs={"layer": "SPAN_AXIS"})

        label_x = dx + (ext[0] + ext[1]) / 2
        label_y = dy + ext[2] - max(3.0, height * 0.5)
        msp.add_text(
            name,
            height=2.5,
            dxfattribs={"layer": "LABELS"},
        ).set_placement((label_x, label_y), align=TextEntityAlignment.MIDDLE_CENTER)

    doc.saveas(output_file)
    return output_file


__all__ = ["export_profile_dxf", "shelf_origins"]
