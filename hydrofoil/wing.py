"""
Hydrofoil PDE: Wing Assembly
============================

HydrofoilWing: lofts the outer hull from the section stack, hollows it,
adds spar tubes and cuts spar holes.
WingSegment: one print-volume sized piece of a split wing.

All dimensions derive from a validated WingConfig.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import cadquery as cq

from config import WingConfig, config as default_config
from . import kernel
from .airfoil import AirfoilFactory
from .base import WingComponent
from .hollow import HollowShellBuilder
from .sections import AirfoilSchedule, SliceBuilder
from .spars import SparHole, SparPlacer, build_spar_features
from .split import PrintSegment, SplitContext, plan_segments, split_for_printing
from .templates import export_profile_dxf
from .transforms import ProfileStack, build_profile, build_profile_stack

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class HydrofoilWing(WingComponent):
    """
    One hydrofoil wing half, root at z = 0 and tip at z = span.

    Features:
    - Trapezoidal or power-law elliptic chord
    - Root/mid/tip airfoil schedule with optional hull blending
    - Washout and smoothly eased anhedral
    - Spar holes, and tubes when hollow
    - Thin-shell cavity with a solid tip cap
    """

    def __init__(
        self,
        cfg: Optional[WingConfig] = None,
        name: str = "hydrofoil_wing",
        factory: Optional[AirfoilFactory] = None,
        description: str = "",
    ):
        super().__init__(name, description)
        # Fatal configuration errors stop here, before any geometry exists
        self.cfg = (cfg or default_config).ensure_valid()
        self.schedule = AirfoilSchedule.from_config(self.cfg, factory)
        self.slices = SliceBuilder(self.cfg, self.schedule)

        self._stack: Optional[ProfileStack] = None
        self.add_metadata("span_mm", self.cfg.span_mm)
        self.add_metadata("root_chord_mm", self.cfg.chord.root_chord_mm)
        self.add_metadata("wing_shape", self.cfg.chord.mode.value)
        self.add_metadata("planform_area_mm2", self.cfg.chord.area(self.cfg.span_mm))

    @property
    def profile_stack(self) -> ProfileStack:
        """Outer-hull sections, root to tip."""
        if self._stack is None:
            self._stack = build_profile_stack(self.cfg, self.slices)
        return self._stack

    def cavity_stack(self) -> Optional[ProfileStack]:
        if not self.cfg.hollow.enabled:
            return None
        return HollowShellBuilder(self.cfg, self.slices).cavity_stack()

    def spar_holes(self) -> List[SparHole]:
        return SparPlacer(self.cfg, self.schedule).resolve()

    def generate_geometry(self) -> cq.Workplane:
        """
        Build the finished wing solid.

        Returns:
            CadQuery solid: outer hull minus cavity, plus tubes clipped to
            the hull, minus spar holes.
        """
        stack = self.profile_stack
        hull = kernel.loft(stack.profiles)
        logger.info("Lofted outer hull through %d sections", len(stack))

        solid = hull
        cavity = self.cavity_stack()
        if cavity is not None:
            solid = kernel.difference(solid, [kernel.loft(cavity.profiles)])
            logger.info("Hollowed with %d cavity sections", len(cavity))
            self.add_metadata("cavity_sections", len(cavity))

        additive, subtractive = build_spar_features(self.cfg, self.schedule)
        for tube in additive:
            solid = kernel.union(solid, [kernel.intersection(tube, hull)])
        solid = kernel.difference(solid, subtractive)

        self.add_metadata("spar_holes", len(subtractive))
        self._geometry = solid
        return self._geometry

    def split(self) -> List["WingSegment"]:
        """Cut the finished wing into keyed print segments."""
        if self._geometry is None:
            self.generate_geometry()
        return [
            WingSegment(f"{self.name}_seg{seg.context.index + 1}", seg)
            for seg in split_for_printing(self._geometry, self.cfg, self.slices)
        ]

    def export_dxf(self, output_path: Path) -> Path:
        """Root, tip and split-boundary sections as a DXF template sheet."""
        sections = {
            "root": build_profile(0.0, self.cfg, self.slices),
            "tip": build_profile(1.0, self.cfg, self.slices),
        }
        for ctx in _boundaries(self.cfg):
            sections[f"cut_{ctx.index + 1}"] = build_profile(ctx.z_end / self.cfg.span_mm, self.cfg, self.slices)
        return export_profile_dxf(sections, output_path / f"{self.name}_templates.dxf")


def _boundaries(cfg: WingConfig) -> List[SplitContext]:
    return [ctx for ctx in plan_segments(cfg.span_mm, cfg.print_split) if not ctx.is_last]


class WingSegment(WingComponent):
    """A single printable segment produced by the print splitter."""

    def __init__(self, name: str, segment: PrintSegment, description: str = ""):
        super().__init__(name, description or f"Print segment {segment.context.index + 1} of {segment.context.count}")
        self.segment = segment
        self._geometry = segment.solid
        self.add_metadata("z_start_mm", segment.context.z_start)
        self.add_metadata("z_end_mm", segment.context.z_end)
        self.add_metadata("layout_offset", segment.offset)

    def generate_geometry(self) -> cq.Workplane:
        return self._geometry


def build_wing_solid(cfg: Optional[WingConfig] = None, factory: Optional[AirfoilFactory] = None) -> cq.Workplane:
    """Outer hull, hollowed and drilled as configured."""
    return HydrofoilWing(cfg, factory=factory).generate_geometry()


def build_report(wing: HydrofoilWing) -> Dict[str, Any]:
    """Metadata plus the resolved spar table, for printing or JSON output."""
    report = wing.get_metadata()
    report["spars"] = [
        {"x": h.x, "y": h.y, "diameter": h.diameter, "z": [h.z_start, h.z_end], "role": h.role.value}
        for h in wing.spar_holes()
    ]
    report["segments"] = [
        {"z_start": c.z_start, "z_end": c.z_end}
        for c in plan_segments(wing.cfg.span_mm, wing.cfg.print_split)
    ]
    return report
