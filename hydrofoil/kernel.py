"""
CadQuery geometry backend.

Turns the numpy section stacks into solids and provides the boolean,
extrusion and placement primitives the builders need. Nothing outside this
module (and the component classes) touches CadQuery directly.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
import logging

import cadquery as cq
import numpy as np

from .geometry import ensure_ccw, signed_area, start_at_trailing_edge

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def wire_from_points(points: np.ndarray) -> cq.Wire:
    """Closed spline wire through a (N, 3) section; the closing gap is a straight edge."""
    pts = [cq.Vector(float(x), float(y), float(z)) for x, y, z in points]
    if (pts[0] - pts[-1]).Length < 1e-9:
        pts = pts[:-1]
    spline = cq.Edge.makeSpline(pts)
    closing = cq.Edge.makeLine(pts[-1], pts[0])
    return cq.Wire.assembleEdges([spline, closing])


def loft(profiles: Sequence[np.ndarray], ruled: bool = False) -> cq.Workplane:
    """Loft a solid through sections ordered by ascending span position."""
    if len(profiles) < 2:
        raise ValueError("Need at least 2 sections for lofting")
    wires = [wire_from_points(p) for p in profiles]
    lofted = cq.Solid.makeLoft(wires, ruled)
    return cq.Workplane("XY").add(lofted)


def offset_section(points: np.ndarray, distance: float, n_points: int) -> Optional[np.ndarray]:
    """
    Offset a closed 2D section in its plane; negative ``distance`` moves inward.

    The section is built as a polygon wire and offset with sharp
    (intersection) corners. Of several result loops the largest is kept.
    Returns ``n_points`` samples evenly spaced along the result, or None
    when the offset collapses or the kernel rejects it.
    """
    pts = [cq.Vector(float(x), float(y), 0.0) for x, y in points[:, :2]]
    if (pts[0] - pts[-1]).Length < 1e-9:
        pts = pts[:-1]
    polygon = cq.Wire.makePolygon(pts + [pts[0]])
    try:
        loops = polygon.offset2D(distance, kind="intersection")
    except Exception as exc:
        logger.debug("Section offset by %.3f failed: %s", distance, exc)
        return None

    best = None
    for loop in loops:
        samples = np.array([
            [v.x, v.y] for v in (loop.positionAt(t) for t in np.linspace(0.0, 1.0, n_points, endpoint=False))
        ])
        area = signed_area(ensure_ccw(samples))
        if area > 0 and (best is None or area > best[0]):
            best = (area, samples)
    if best is None:
        return None
    return start_at_trailing_edge(ensure_ccw(best[1]))


def cylinder_z(x: float, y: float, diameter: float, z_start: float, length: float) -> cq.Workplane:
    """Round bar along +z from ``z_start``."""
    return (
        cq.Workplane("XY")
        .workplane(offset=z_start)
        .center(x, y)
        .circle(diameter / 2.0)
        .extrude(length)
    )


def slab(
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    z_range: Tuple[float, float],
) -> cq.Workplane:
    """Axis-aligned box covering the given ranges."""
    (x0, x1), (y0, y1), (z0, z1) = x_range, y_range, z_range
    return (
        cq.Workplane("XY")
        .box(x1 - x0, y1 - y0, z1 - z0, centered=False)
        .translate((x0, y0, z0))
    )


def union(base: cq.Workplane, others: Iterable[cq.Workplane]) -> cq.Workplane:
    for other in others:
        base = base.union(other)
    return base


def difference(base: cq.Workplane, others: Iterable[cq.Workplane]) -> cq.Workplane:
    for other in others:
        base = base.cut(other)
    return base


def intersection(base: cq.Workplane, other: cq.Workplane) -> cq.Workplane:
    return base.intersect(other)


def translate(solid: cq.Workplane, offset: Tuple[float, float, float]) -> cq.Workplane:
    return solid.translate(tuple(float(v) for v in offset))


def bounds(solid: cq.Workplane) -> List[Tuple[float, float]]:
    """[(xmin, xmax), (ymin, ymax), (zmin, zmax)] of a solid."""
    bb = solid.val().BoundingBox()
    return [(bb.xmin, bb.xmax), (bb.ymin, bb.ymax), (bb.zmin, bb.zmax)]


def volume(solid: cq.Workplane) -> float:
    return sum(s.Volume() for s in solid.solids().vals())
