"""
Print-volume splitting.

The span is cut into ``ceil(span / build_z)`` equal slabs. Each internal
cut gets a tapered male stub on the inboard part and a matching female
pocket in the outboard part, both lofted from scaled copies of the wing
section at the cut so the joint follows the wing's own outline.

The split boundary travels as an explicit ``SplitContext``; nothing here
keeps state between segments.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple
import logging

import numpy as np

from config import PrintSplitConfig, WingConfig
from .geometry import point_extremes
from .sections import SliceBuilder
from .transforms import build_profile

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

CUT_MARGIN_MM = 50.0          # Slab oversize around the wing outline
CONNECTOR_OVERLAP_MM = 0.5    # Stub root buried in its own part


@dataclass(frozen=True)
class SplitContext:
    """One segment's place in the split."""

    index: int
    count: int
    z_start: float
    z_end: float

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == self.count - 1

    @property
    def has_male(self) -> bool:
        """Carries a stub on its outboard face."""
        return not self.is_last

    @property
    def has_female(self) -> bool:
        """Carries a pocket in its inboard face."""
        return not self.is_first

    @property
    def length(self) -> float:
        return self.z_end - self.z_start


@dataclass
class PrintSegment:
    """A printable part and where it was moved for layout."""

    solid: Any
    offset: Tuple[float, float, float]
    context: SplitContext


def plan_segments(span_mm: float, split: PrintSplitConfig) -> List[SplitContext]:
    """Slabs that tile [0, span_mm] with no gap or overlap."""
    count = split.split_count(span_mm)
    length = span_mm / count
    contexts = []
    for i in range(count):
        z_end = span_mm if i == count - 1 else (i + 1) * length
        contexts.append(SplitContext(index=i, count=count, z_start=i * length, z_end=z_end))
    return contexts


def connector_profiles(
    boundary: np.ndarray,
    z: float,
    split: PrintSplitConfig,
    female: bool = False,
) -> List[np.ndarray]:
    """
    Sections of a tapered connector standing on the cut plane at ``z``.

    The boundary section is flattened onto the cut plane, scaled about its
    centroid by ``connector_scale`` and shrunk to ``connector_taper`` of
    that at the far end. The female pocket is grown by the clearance and
    runs deeper by the same amount.
    """
    flat = boundary[:, :2]
    centroid = flat.mean(axis=0)
    clearance = split.connector_clearance_mm if female else 0.0
    z_begin = z - clearance - CONNECTOR_OVERLAP_MM
    z_finish = z + split.connector_length_mm + clearance

    span_x = float(np.ptp(flat[:, 0])) or 1.0
    grow = 2.0 * clearance / span_x

    profiles = []
    steps = split.connector_steps
    for k in range(steps):
        t = k / (steps - 1)
        scale = split.connector_scale * (1.0 - t * (1.0 - split.connector_taper)) + grow
        section = centroid + (flat - centroid) * scale
        z_k = z_begin + t * (z_finish - z_begin)
        profiles.append(np.column_stack([section, np.full(len(section), z_k)]))
    return profiles


def layout_offset(
    ctx: SplitContext,
    section_bounds: Tuple[float, float, float, float],
    split: PrintSplitConfig,
) -> Tuple[float, float, float]:
    """Move a segment onto the bed, side by side with its neighbours."""
    min_x, max_x, _, _ = section_bounds
    pitch = (max_x - min_x) + split.spacing_fraction * split.build_volume[0]
    return (ctx.index * pitch, 0.0, -ctx.z_start)


def part_height(ctx: SplitContext, split: PrintSplitConfig) -> float:
    """Printed height of a segment: its slab plus the male stub standing on it."""
    return ctx.length + (split.connector_length_mm if ctx.has_male else 0.0)


def oversized_segments(contexts: List[SplitContext], split: PrintSplitConfig) -> List[SplitContext]:
    """
    Segments taller than the build volume once their stub is added.

    The split count only accounts for the slabs, so a segment close to the
    build height can overshoot by up to one connector length.
    """
    build_z = split.build_volume[2]
    oversized = [ctx for ctx in contexts if part_height(ctx, split) > build_z]
    for ctx in oversized:
        logger.warning(
            "Segment %d/%d is %.1f mm tall with its connector; build height is %.1f mm",
            ctx.index + 1, ctx.count, part_height(ctx, split), build_z,
        )
    return oversized


def split_for_printing(solid, cfg: WingConfig, slices: SliceBuilder) -> List[PrintSegment]:
    """Cut a finished wing into build-volume sized, keyed segments."""
    from . import kernel

    split = cfg.print_split
    contexts = plan_segments(cfg.span_mm, split)
    if len(contexts) == 1:
        logger.info("Wing fits the build volume; no split needed")
    oversized_segments(contexts, split)

    root_bounds = point_extremes(build_profile(0.0, cfg, slices))
    (x0, x1), (y0, y1), _ = kernel.bounds(solid)
    x_range = (x0 - CUT_MARGIN_MM, x1 + CUT_MARGIN_MM)
    y_range = (y0 - CUT_MARGIN_MM, y1 + CUT_MARGIN_MM)

    segments = []
    for ctx in contexts:
        z_lo = ctx.z_start if not ctx.is_first else ctx.z_start - CUT_MARGIN_MM
        z_hi = ctx.z_end if not ctx.is_last else ctx.z_end + CUT_MARGIN_MM
        part = kernel.intersection(solid, kernel.slab(x_range, y_range, (z_lo, z_hi)))

        if ctx.has_male:
            boundary = build_profile(ctx.z_end / cfg.span_mm, cfg, slices)
            male = kernel.loft(connector_profiles(boundary, ctx.z_end, split), ruled=True)
            part = kernel.union(part, [male])
        if ctx.has_female:
            boundary = build_profile(ctx.z_start / cfg.span_mm, cfg, slices)
            pocket = kernel.loft(connector_profiles(boundary, ctx.z_start, split, female=True), ruled=True)
            part = kernel.difference(part, [pocket])

        offset = layout_offset(ctx, root_bounds, split)
        segments.append(PrintSegment(kernel.translate(part, offset), offset, ctx))
        logger.info("Segment %d/%d: z %.1f-%.1f mm", ctx.index + 1, ctx.count, ctx.z_start, ctx.z_end)
    return segments
