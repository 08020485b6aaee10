"""
Span-wise section selection and scaling.

``AirfoilSchedule`` picks the root, mid or tip section for a span position
from an ordered threshold table. ``SliceBuilder`` scales the chosen
section to the local chord and places the configured center-line point on
the span axis.

Sections near a transition can be blended. The blend is the convex hull
of both sections: a smooth envelope, not a true shape interpolation, and
any concave (undercambered) region inside the window is filled in.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np
from scipy.spatial import ConvexHull

from config import SectionSpacing, WingConfig
from .airfoil import REFERENCE_CHORD, AirfoilFactory, AirfoilPath, airfoil_factory
from .geometry import ensure_ccw, resample_closed, start_at_trailing_edge

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Transition:
    """Span position where ``inner`` hands over to ``outer``."""
    fraction: float
    inner: AirfoilPath
    outer: AirfoilPath


class AirfoilSchedule:
    """Ordered (threshold, section) table scanned first-match-wins."""

    def __init__(self, entries: List[Tuple[float, AirfoilPath]]):
        if not entries:
            raise ValueError("An airfoil schedule needs at least one section")
        self.entries = list(entries)

    @classmethod
    def from_config(cls, cfg: WingConfig, factory: Optional[AirfoilFactory] = None) -> "AirfoilSchedule":
        factory = factory or airfoil_factory
        names = cfg.airfoils
        return cls([
            (names.tip_change_fraction, factory.get(names.tip_airfoil)),
            (names.center_change_fraction, factory.get(names.mid_airfoil)),
            (0.0, factory.get(names.root_airfoil)),
        ])

    @classmethod
    def single(cls, airfoil: AirfoilPath) -> "AirfoilSchedule":
        return cls([(0.0, airfoil)])

    def select(self, nz: float) -> AirfoilPath:
        for threshold, airfoil in self.entries:
            if nz >= threshold:
                return airfoil
        return self.entries[-1][1]

    @property
    def root(self) -> AirfoilPath:
        return self.select(0.0)

    def transitions(self) -> List[Transition]:
        """Boundaries where the selected section actually changes."""
        result = []
        for (threshold, outer), (_, inner) in zip(self.entries, self.entries[1:]):
            if outer is not inner and 0.0 < threshold <= 1.0:
                result.append(Transition(threshold, inner, outer))
        return result


def section_positions(cfg: WingConfig) -> np.ndarray:
    """Ascending normalized span positions of the loft sections, root and tip included."""
    u = np.linspace(0.0, 1.0, cfg.section_count + 1)
    if cfg.spacing is SectionSpacing.COSINE:
        # Denser toward the tip where an elliptic chord changes fastest
        return np.sin(u * np.pi / 2.0)
    return u


def hull_blend(first: AirfoilPath, second: AirfoilPath, n_points: int) -> np.ndarray:
    """Convex hull of two reference-chord sections, resampled from the trailing edge."""
    cloud = np.vstack([first.polygon, second.polygon])
    hull = ConvexHull(cloud)
    outline = ensure_ccw(cloud[hull.vertices])
    return start_at_trailing_edge(resample_closed(outline, n_points))


class SliceBuilder:
    """Scaled, center-line positioned 2D sections for any span position."""

    def __init__(self, cfg: WingConfig, schedule: AirfoilSchedule):
        self.cfg = cfg
        self.schedule = schedule
        self.n_points = cfg.manufacturing.profile_points
        self._resampled: Dict[int, np.ndarray] = {}
        self._blends: Dict[Tuple[int, int], np.ndarray] = {}

    @property
    def blend_window(self) -> float:
        """Half-width of the blend region in normalized span."""
        return self.cfg.airfoils.blend_slices / self.cfg.section_count

    def _reference_polygon(self, airfoil: AirfoilPath) -> np.ndarray:
        key = id(airfoil)
        if key not in self._resampled:
            self._resampled[key] = start_at_trailing_edge(resample_closed(airfoil.polygon, self.n_points))
        return self._resampled[key]

    def active_transition(self, nz: float) -> Optional[Transition]:
        """Transition whose blend window contains ``nz``, if blending is on."""
        if self.cfg.airfoils.blend_slices <= 0:
            return None
        window = self.blend_window
        for transition in self.schedule.transitions():
            if abs(nz - transition.fraction) <= window + 1e-12:
                return transition
        return None

    def reference_section(self, nz: float) -> np.ndarray:
        """Section polygon at the 100-unit reference chord."""
        transition = self.active_transition(nz)
        if transition is None:
            return self._reference_polygon(self.schedule.select(nz))

        key = (id(transition.inner), id(transition.outer))
        if key not in self._blends:
            logger.debug("Blending %s -> %s at %.3f span", transition.inner.name,
                         transition.outer.name, transition.fraction)
            self._blends[key] = hull_blend(transition.inner, transition.outer, self.n_points)
        return self._blends[key]

    def thickness_ratio(self, nz: float) -> float:
        """Max thickness ratio at ``nz``; a blend reports its thinner parent."""
        transition = self.active_transition(nz)
        if transition is None:
            return self.schedule.select(nz).max_thickness_ratio
        return min(transition.inner.max_thickness_ratio, transition.outer.max_thickness_ratio)

    def chord(self, nz: float) -> float:
        """True local chord; zero at an elliptic tip."""
        return self.cfg.chord.chord(float(np.clip(nz, 0.0, 1.0)))

    def loft_chord(self, nz: float) -> float:
        """Local chord floored so no loft section degenerates to a point."""
        return max(self.chord(nz), self.cfg.manufacturing.min_loft_chord_mm)

    def position(self, points: np.ndarray, chord: float) -> np.ndarray:
        """Shift so the center-line chord point sits on the span axis."""
        shifted = points.copy()
        shifted[:, 0] -= self.cfg.center_line_fraction * chord
        return shifted

    def build_slice(self, nz: float) -> np.ndarray:
        """Scaled and positioned 2D section at ``nz``."""
        chord = self.loft_chord(nz)
        scaled = self.reference_section(nz) * (chord / REFERENCE_CHORD)
        return self.position(scaled, chord)
