"""
Spar hole and tube placement.

Each spar entry resolves to one or two ``SparHole`` records: an x-position
behind the root leading edge (fixed millimetres or a percentage of the
root chord) and a y-position taken from the root section's top, bottom or
mean-camber samples plus any manual offset. Paired spars share their x and
straddle the thick part of the section.

Placement is a heuristic; nothing here is a structural solve.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from config import (
    FixedPosition, PairedSpar, PercentPosition, SingleSpar, SparConfig,
    SparPosition, SparRole, SurfaceAnchor, WingConfig,
)
from .airfoil import REFERENCE_CHORD, AirfoilPath, surface_y_at
from .sections import AirfoilSchedule

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class SparHole:
    """A resolved rod channel running along the span (z) axis."""

    x: float                   # Wing frame (span axis at x = 0)
    y: float
    rod_diameter: float
    diameter: float            # Rod plus print tolerance
    tube_diameter: float       # Hole plus two tube walls
    z_start: float
    z_end: float
    role: SparRole
    anchor: SurfaceAnchor

    @property
    def length(self) -> float:
        return self.z_end - self.z_start


def resolve_x(position: SparPosition, root_chord: float) -> float:
    """Millimetres behind the root leading edge."""
    if isinstance(position, FixedPosition):
        return position.mm
    if isinstance(position, PercentPosition):
        return position.percent / 100.0 * root_chord
    raise TypeError(f"Unsupported spar position: {position!r}")


def anchor_offset(airfoil: AirfoilPath, anchor: SurfaceAnchor, x_mm: float, root_chord: float) -> float:
    """y of the anchored surface at ``x_mm``, scaled to the root chord."""
    samples = airfoil.surface(anchor.value)
    if samples is None:
        return 0.0
    x_ref = x_mm / root_chord * REFERENCE_CHORD
    return surface_y_at(samples, x_ref) * root_chord / REFERENCE_CHORD


def expand(spar: SparConfig) -> List[SingleSpar]:
    """Flatten a paired spar into its two members at the shared x-position."""
    if isinstance(spar, PairedSpar):
        return [
            replace(spar.top, position=spar.position, role=spar.role),
            replace(spar.bottom, position=spar.position, role=spar.role),
        ]
    return [spar]


class SparPlacer:
    """Resolves the configured spar table against the root section."""

    def __init__(self, cfg: WingConfig, schedule: AirfoilSchedule):
        self.cfg = cfg
        self.root_airfoil = schedule.root
        self.root_chord = cfg.chord.root_chord_mm

    def z_range(self, spar: SingleSpar) -> Tuple[float, float]:
        # Structural rods run through the mirrored half as well
        if spar.role is SparRole.STRUCTURAL:
            return -spar.length_mm / 2.0, spar.length_mm / 2.0
        return 0.0, spar.length_mm

    def place(self, spar: SingleSpar) -> SparHole:
        mfg = self.cfg.manufacturing
        x_mm = resolve_x(spar.position, self.root_chord)
        y = anchor_offset(self.root_airfoil, spar.anchor, x_mm, self.root_chord) + spar.offset_mm
        diameter = spar.diameter_mm + mfg.hole_tolerance_mm
        z_start, z_end = self.z_range(spar)
        hole = SparHole(
            x=x_mm - self.cfg.center_line_fraction * self.root_chord,
            y=y,
            rod_diameter=spar.diameter_mm,
            diameter=diameter,
            tube_diameter=diameter + 2.0 * mfg.tube_wall_mm,
            z_start=z_start,
            z_end=z_end,
            role=spar.role,
            anchor=spar.anchor,
        )
        logger.debug("Spar at %.2f mm (%s) -> hole (%.2f, %.2f) d=%.2f",
                     x_mm, spar.anchor.value, hole.x, hole.y, hole.diameter)
        return hole

    def resolve(self, spars: Optional[Sequence[SparConfig]] = None) -> List[SparHole]:
        spars = self.cfg.spars if spars is None else spars
        return [self.place(single) for spar in spars for single in expand(spar)]


def _rectangle_radius(angles: np.ndarray, half_w: float, half_h: float) -> np.ndarray:
    """Distance from the center to a rectangle's outline along each angle."""
    cos_a = np.abs(np.cos(angles))
    sin_a = np.abs(np.sin(angles))
    with np.errstate(divide="ignore"):
        rx = np.where(cos_a > 1e-12, half_w / cos_a, np.inf)
        ry = np.where(sin_a > 1e-12, half_h / sin_a, np.inf)
    return np.minimum(rx, ry)


def tube_taper_profiles(hole: SparHole, cfg: WingConfig, n_points: int = 48) -> List[np.ndarray]:
    """
    Loft sections for a reinforcing tube around ``hole`` inside one wing half.

    The tube is round up to ``taper_length_mm`` before its outer end, then
    morphs through ``taper_steps`` intermediate sections into the grid-bar
    rectangle.
    """
    mfg = cfg.manufacturing
    z0 = max(hole.z_start, 0.0)
    z1 = hole.z_end
    if z1 <= z0:
        return []

    angles = np.linspace(0.0, 2.0 * math.pi, n_points, endpoint=False)
    circle_r = np.full(n_points, hole.tube_diameter / 2.0)
    rect_r = _rectangle_radius(angles, mfg.grid_bar_width_mm / 2.0, mfg.grid_bar_height_mm / 2.0)

    def section(radius: np.ndarray, z: float) -> np.ndarray:
        return np.column_stack([
            hole.x + radius * np.cos(angles),
            hole.y + radius * np.sin(angles),
            np.full(n_points, z),
        ])

    taper_start = max(z0, z1 - mfg.taper_length_mm)
    profiles = [section(circle_r, z0)]
    if taper_start > z0:
        profiles.append(section(circle_r, taper_start))

    steps = mfg.taper_steps + 1
    for k in range(1, steps + 1):
        t = k / steps
        radius = (1.0 - t) * circle_r + t * rect_r
        profiles.append(section(radius, taper_start + t * (z1 - taper_start)))
    return profiles


def build_spar_features(cfg: WingConfig, schedule: AirfoilSchedule, spars: Optional[Sequence[SparConfig]] = None):
    """
    Solids for the spar table: ``(additive, subtractive)``.

    Holes are always subtractive. Tubes are additive and only produced for
    hollow wings, where the rod would otherwise sit in the cavity.
    """
    from . import kernel

    holes = SparPlacer(cfg, schedule).resolve(spars)
    subtractive = [
        kernel.cylinder_z(h.x, h.y, h.diameter, h.z_start, h.length) for h in holes
    ]
    additive = []
    if cfg.hollow.enabled:
        for hole in holes:
            profiles = tube_taper_profiles(hole, cfg)
            if len(profiles) >= 2:
                additive.append(kernel.loft(profiles))
    logger.info("Spar features: %d holes, %d tubes", len(subtractive), len(additive))
    return additive, subtractive
