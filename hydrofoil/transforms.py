"""
Slice transform pipeline: washout, lift to 3D, anhedral.

Coordinates: x runs chord-wise (leading edge toward -x of the trailing
edge), y is thickness/vertical, z is span. The order of operations is
fixed:

1. scale the section to the local chord
2. move the center-line point onto the span axis
3. washout (pitch about a chord-relative pivot)
4. lift to z = nz * span
5. anhedral (roll about the local x-axis, then drop in y)

Translating before washout keeps the pivot chord-relative; lifting before
anhedral keeps the droop span-relative.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import math

import numpy as np

from config import AnhedralConfig, WashoutConfig, WingConfig
from .geometry import rotate_about
from .sections import SliceBuilder, section_positions


def progress(nz: float, start_fraction: float) -> float:
    """Fraction of the way from ``start_fraction`` to the tip, clamped to [0, 1]."""
    if start_fraction >= 1.0:
        return 0.0
    return float(np.clip((nz - start_fraction) / (1.0 - start_fraction), 0.0, 1.0))


def washout_pitch(nz: float, washout: WashoutConfig) -> float:
    """Section pitch in degrees; negative is nose-down."""
    if not washout.enabled or nz <= washout.start_fraction:
        return 0.0
    return -progress(nz, washout.start_fraction) * washout.degrees


def apply_washout(points: np.ndarray, nz: float, chord: float, cfg: WingConfig) -> np.ndarray:
    pitch = washout_pitch(nz, cfg.washout)
    if pitch == 0.0:
        return points
    pivot_x = (cfg.washout.pivot_fraction - cfg.center_line_fraction) * chord
    return rotate_about(points, (pivot_x, 0.0), pitch)


def anhedral_angle(nz: float, anhedral: AnhedralConfig) -> float:
    """Local droop angle in degrees: a quadratic ease-in from the start point."""
    if not anhedral.enabled:
        return 0.0
    return progress(nz, anhedral.start_fraction) ** 2 * anhedral.degrees


def anhedral_offset(nz: float, anhedral: AnhedralConfig, span_mm: float) -> float:
    """Vertical drop of the section at ``nz`` (negative = down)."""
    if not anhedral.enabled:
        return 0.0
    t = progress(nz, anhedral.start_fraction)
    span_remaining = (1.0 - anhedral.start_fraction) * span_mm
    smooth = 3.0 * t ** 2 - 2.0 * t ** 3
    return -span_remaining * math.tan(math.radians(anhedral.degrees)) * smooth


def lift_to_3d(points: np.ndarray, z: float) -> np.ndarray:
    return np.column_stack([points[:, 0], points[:, 1], np.full(len(points), float(z))])


def apply_anhedral(points: np.ndarray, nz: float, cfg: WingConfig) -> np.ndarray:
    """Roll a lifted section about its local x-axis, then drop it."""
    if not cfg.anhedral.enabled:
        return points
    theta = math.radians(anhedral_angle(nz, cfg.anhedral))
    z0 = points[:, 2]
    y_local = points[:, 1]
    rolled = np.column_stack([
        points[:, 0],
        y_local * math.cos(theta),
        z0 + y_local * math.sin(theta),
    ])
    rolled[:, 1] += anhedral_offset(nz, cfg.anhedral, cfg.span_mm)
    return rolled


def transform_section(points: np.ndarray, nz: float, chord: float, cfg: WingConfig) -> np.ndarray:
    """Steps 3-5 for a section already scaled and positioned."""
    twisted = apply_washout(points, nz, chord, cfg)
    lifted = lift_to_3d(twisted, nz * cfg.span_mm)
    return apply_anhedral(lifted, nz, cfg)


def build_profile(nz: float, cfg: WingConfig, slices: SliceBuilder) -> np.ndarray:
    """Fully transformed (N, 3) loft section at span position ``nz``."""
    nz = float(np.clip(nz, 0.0, 1.0))
    return transform_section(slices.build_slice(nz), nz, slices.loft_chord(nz), cfg)


@dataclass
class ProfileStack:
    """Loft sections ordered by ascending span position."""

    positions: List[float] = field(default_factory=list)
    profiles: List[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.profiles)

    def add(self, nz: float, profile: np.ndarray) -> None:
        self.positions.append(nz)
        self.profiles.append(profile)

    def sorted(self) -> "ProfileStack":
        order = sorted(range(len(self.positions)), key=lambda i: self.positions[i])
        return ProfileStack([self.positions[i] for i in order], [self.profiles[i] for i in order])


def build_profile_stack(
    cfg: WingConfig,
    slices: SliceBuilder,
    positions: Optional[Sequence[float]] = None,
) -> ProfileStack:
    """Outer-hull loft sections for every configured span position."""
    if positions is None:
        positions = section_positions(cfg)
    stack = ProfileStack()
    for nz in positions:
        stack.add(float(nz), build_profile(nz, cfg, slices))
    return stack.sorted()
