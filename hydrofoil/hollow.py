"""
Hollow shell cavity sections.

For each span position the scaled, positioned section is offset inward by
the wall thickness in the CAD kernel and sent through the same
washout/anhedral pipeline as the outer hull. Sections too thin for a safe
offset are skipped and that part of the wing stays solid. The cavity ends
one wall thickness short of the tip to leave a solid cap.
"""

from typing import Optional, Sequence
import logging

import numpy as np

from config import WingConfig
from .airfoil import REFERENCE_CHORD
from .sections import SliceBuilder, section_positions
from .transforms import ProfileStack, transform_section

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

THICKNESS_GUARD = 3.0    # Wall multiples the section must exceed


class HollowShellBuilder:
    """Inner cavity loft sections for a thin-shell wing."""

    def __init__(self, cfg: WingConfig, slices: SliceBuilder):
        self.cfg = cfg
        self.slices = slices
        self.wall = cfg.hollow.wall_thickness_mm

    def is_too_thin(self, nz: float) -> bool:
        """True when ``3 * wall`` reaches the section's maximum thickness, or there is no section."""
        chord = self.slices.chord(nz)
        if chord <= 0 or self.wall <= 0:
            return True
        return THICKNESS_GUARD * self.wall >= chord * self.slices.thickness_ratio(nz)

    @property
    def cap_fraction(self) -> float:
        """Span position where the cavity stops."""
        return max(0.0, (self.cfg.span_mm - self.wall) / self.cfg.span_mm)

    def cavity_section(self, nz: float) -> Optional[np.ndarray]:
        """Inward-offset 2D section at ``nz`` before washout, or None if unsafe."""
        if self.is_too_thin(nz):
            return None
        chord = self.slices.chord(nz)
        outer = self.slices.position(
            self.slices.reference_section(nz) * (chord / REFERENCE_CHORD), chord
        )
        from . import kernel

        return kernel.offset_section(outer, -self.wall, self.slices.n_points)

    def cavity_profile(self, nz: float) -> Optional[np.ndarray]:
        """Fully transformed (N, 3) cavity section, or None where the slice stays solid."""
        section = self.cavity_section(nz)
        if section is None:
            logger.debug("Cavity skipped at nz=%.3f (section too thin)", nz)
            return None
        return transform_section(section, nz, self.slices.chord(nz), self.cfg)

    def cavity_positions(self, positions: Optional[Sequence[float]] = None) -> np.ndarray:
        if positions is None:
            positions = section_positions(self.cfg)
        cap = self.cap_fraction
        inner = [float(nz) for nz in positions if nz < cap]
        return np.array(inner + [cap])

    def cavity_stack(self, positions: Optional[Sequence[float]] = None) -> Optional[ProfileStack]:
        """
        Cavity sections over the contiguous run of safe slices from the root.

        Slices outboard of the first unsafe one are dropped so the cavity
        never bridges a solid section. Returns None when fewer than two
        sections survive; the wing is then built solid.
        """
        stack = ProfileStack()
        skipped = 0
        for nz in self.cavity_positions(positions):
            profile = self.cavity_profile(nz)
            if profile is None:
                skipped += 1
                break
            stack.add(float(nz), profile)

        if skipped:
            logger.warning(
                "Hollow cavity ends at %.1f mm span; outboard sections are too thin for a %.2f mm wall",
                stack.positions[-1] * self.cfg.span_mm if stack.positions else 0.0, self.wall,
            )
        if len(stack) < 2:
            logger.warning("Too few cavity sections (%d); building the wing solid", len(stack))
            return None
        return stack.sorted()
