"""
Hydrofoil PDE: Airfoil Sections
===============================

AirfoilFactory: Generates NACA 4-digit sections and ingests Selig/Lednicer
``.dat`` files, smoothing them with cubic splines + Savitzky-Golay filtering.
Every section is normalized to a 100-unit reference chord.

AirfoilPath: the immutable closed polygon plus sorted top, bottom and mean
camber samples shared by every slice of a wing.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import logging

import numpy as np
from scipy.interpolate import CubicSpline
from scipy.signal import savgol_filter

from config import AIRFOIL_DATA_DIR, NACA4_PATTERN
from .geometry import ensure_ccw, start_at_trailing_edge

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

REFERENCE_CHORD = 100.0


@dataclass(frozen=True, eq=False)
class AirfoilPath:
    """Closed airfoil polygon at the 100-unit reference chord."""

    name: str
    polygon: np.ndarray           # (N, 2), counter-clockwise, starts at the trailing edge
    top: np.ndarray               # (M, 2), sorted by x
    bottom: np.ndarray            # (M, 2), sorted by x
    camber: np.ndarray            # (M, 2), sorted by x
    max_thickness_ratio: float

    @classmethod
    def from_surfaces(
        cls,
        name: str,
        x_upper: np.ndarray,
        y_upper: np.ndarray,
        x_lower: np.ndarray,
        y_lower: np.ndarray,
        n_samples: int = 100,
    ) -> "AirfoilPath":
        """Assemble from upper/lower surfaces, each running leading to trailing edge."""
        x_upper, y_upper = _sorted_by_x(x_upper, y_upper)
        x_lower, y_lower = _sorted_by_x(x_lower, y_lower)

        # Selig order: trailing edge -> upper -> leading edge -> lower -> trailing edge
        polygon = np.vstack([
            np.column_stack([x_upper[::-1], y_upper[::-1]]),
            np.column_stack([x_lower[1:], y_lower[1:]]),
        ])
        if np.allclose(polygon[0], polygon[-1]):
            polygon = polygon[:-1]
        polygon = start_at_trailing_edge(ensure_ccw(polygon))

        x_min = max(x_upper[0], x_lower[0])
        x_max = min(x_upper[-1], x_lower[-1])
        beta = np.linspace(0.0, np.pi, n_samples)
        xs = x_min + (x_max - x_min) * 0.5 * (1.0 - np.cos(beta))
        top_y = np.interp(xs, x_upper, y_upper)
        bottom_y = np.interp(xs, x_lower, y_lower)

        thickness = float(np.max(top_y - bottom_y))
        return cls(
            name=name,
            polygon=polygon,
            top=np.column_stack([xs, top_y]),
            bottom=np.column_stack([xs, bottom_y]),
            camber=np.column_stack([xs, 0.5 * (top_y + bottom_y)]),
            max_thickness_ratio=thickness / REFERENCE_CHORD,
        )

    def scaled(self, chord: float) -> np.ndarray:
        """Polygon scaled to ``chord`` (data is authored at 100 units)."""
        return self.polygon * (chord / REFERENCE_CHORD)

    def surface(self, anchor: str) -> Optional[np.ndarray]:
        """Samples for 'top', 'bottom' or 'camber'; None for anything else."""
        return {"top": self.top, "bottom": self.bottom, "camber": self.camber}.get(anchor)


def _sorted_by_x(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    order = np.argsort(x, kind="stable")
    return x[order], y[order]


def surface_y_at(samples: np.ndarray, x: float) -> float:
    """
    y of the first sample at or after ``x`` in an x-sorted point list.

    A linear scan; sample sets are a few hundred points. Past the last
    sample, the last y is returned.
    """
    for px, py in samples:
        if px >= x:
            return float(py)
    return float(samples[-1][1])


class AirfoilFactory:
    """Factory for loading and caching airfoil sections."""

    DATA_DIR = AIRFOIL_DATA_DIR
    NACA4 = NACA4_PATTERN

    def __init__(self, data_dir: Optional[Path] = None, n_points: int = 160, smooth: bool = True):
        self.data_dir = data_dir or self.DATA_DIR
        self.n_points = n_points
        self.smooth = smooth
        self._cache: Dict[str, AirfoilPath] = {}
        self._files: Dict[str, Path] = {}

    def register(self, name: str, filepath: Path) -> None:
        """Make a .dat file available under ``name``."""
        self._files[name.lower()] = Path(filepath)
        self._cache.pop(name.lower(), None)

    def get(self, name: str) -> AirfoilPath:
        """Return the named section, generating or loading it once."""
        key = name.lower()
        if key in self._cache:
            return self._cache[key]

        match = self.NACA4.match(key)
        if match:
            m, p, t = (int(g) for g in match.groups())
            airfoil = naca4(m / 100.0, p / 10.0, t / 100.0, name=key, n_points=self.n_points // 2)
        else:
            if key in self._files:
                filepath = self._files[key]
            elif key.endswith(".dat"):
                filepath = Path(name)
            else:
                filepath = self.data_dir / f"{key}.dat"
            airfoil = self.load_from_file(filepath)

        logger.debug("Loaded airfoil %s (t/c %.3f)", key, airfoil.max_thickness_ratio)
        self._cache[key] = airfoil
        return airfoil

    def load_from_file(self, filepath: Path) -> AirfoilPath:
        """Load an airfoil from an arbitrary .dat file."""
        name, x, y = self._parse_dat_file(Path(filepath))
        x, y = self._process_coordinates(x, y)
        return self._split_surfaces(name, x, y)

    def _process_coordinates(self, x_raw: np.ndarray, y_raw: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Normalize to the reference chord, spline-resample and optionally smooth."""
        x_min, x_max = float(np.min(x_raw)), float(np.max(x_raw))
        scale = REFERENCE_CHORD / (x_max - x_min)
        x_raw = (x_raw - x_min) * scale
        y_raw = y_raw * scale

        ds = np.sqrt(np.diff(x_raw) ** 2 + np.diff(y_raw) ** 2)
        keep = np.concatenate([[True], ds > 1e-12])
        x_raw, y_raw = x_raw[keep], y_raw[keep]

        s = np.concatenate([[0.0], np.cumsum(np.sqrt(np.diff(x_raw) ** 2 + np.diff(y_raw) ** 2))])
        s_norm = s / s[-1]

        cs_x = CubicSpline(s_norm, x_raw)
        cs_y = CubicSpline(s_norm, y_raw)

        # Half-cosine spacing on each surface clusters points at both edges
        u = np.linspace(0.0, 1.0, self.n_points)
        t_new = np.where(
            u <= 0.5,
            0.25 * (1.0 - np.cos(2.0 * np.pi * u)),
            0.5 + 0.25 * (1.0 - np.cos(2.0 * np.pi * (u - 0.5))),
        )
        x_new = cs_x(t_new)
        y_new = cs_y(t_new)

        if self.smooth and self.n_points >= 11:
            window = min(11, self.n_points // 2 * 2 - 1)
            y_new = savgol_filter(y_new, window, 3)

        # Close the trailing edge (upper meets lower)
        if abs(y_new[0] - y_new[-1]) > 1e-6:
            y_te = (y_new[0] + y_new[-1]) / 2
            y_new[0] = y_te
            y_new[-1] = y_te
        return x_new, y_new

    def _split_surfaces(self, name: str, x: np.ndarray, y: np.ndarray) -> AirfoilPath:
        le_idx = int(np.argmin(x))
        first = (x[:le_idx + 1][::-1], y[:le_idx + 1][::-1])
        second = (x[le_idx:], y[le_idx:])
        # Whichever half sits higher at mid-chord is the upper surface
        if np.interp(50.0, *first) >= np.interp(50.0, *second):
            upper, lower = first, second
        else:
            upper, lower = second, first
        return AirfoilPath.from_surfaces(name, upper[0], upper[1], lower[0], lower[1])

    def _parse_dat_file(self, filepath: Path) -> Tuple[str, np.ndarray, np.ndarray]:
        """Parse UIUC-format .dat file (Selig or Lednicer) into one Selig-ordered loop."""
        if not filepath.exists():
            raise FileNotFoundError(f"Airfoil data file not found: {filepath}")

        with open(filepath, "r") as f:
            lines = f.readlines()

        name = lines[0].strip()
        sections: List[List[Tuple[float, float]]] = []
        current: List[Tuple[float, float]] = []

        for line in lines[1:]:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                if current:
                    sections.append(current)
                    current = []
                continue

            parts = stripped.split()
            if len(parts) >= 2:
                try:
                    current.append((float(parts[0]), float(parts[1])))
                except ValueError:
                    continue

        if current:
            sections.append(current)

        if not sections:
            raise ValueError(f"No coordinate data in {filepath}")

        # Lednicer: a point-count header line, then upper and lower runs from the leading edge
        if sections[0][0][0] > 1.5:
            sections[0] = sections[0][1:]
            if not sections[0]:
                sections = sections[1:]
        if len(sections) >= 2:
            upper = np.array(sections[0])
            lower = np.array(sections[1])
            if upper[0, 0] > upper[-1, 0]:
                upper = upper[::-1]
            if lower[0, 0] > lower[-1, 0]:
                lower = lower[::-1]
            loop = np.vstack([upper[::-1], lower[1:]])
        else:
            loop = np.array(sections[0])

        return name, loop[:, 0], loop[:, 1]


def naca4(
    camber: float,
    camber_pos: float,
    thickness: float,
    name: str = "naca",
    n_points: int = 80,
) -> AirfoilPath:
    """Analytic NACA 4-digit section with a closed trailing edge."""
    beta = np.linspace(0.0, np.pi, n_points)
    x = 0.5 * (1.0 - np.cos(beta))
    yt = (thickness / 0.2) * (
        0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x**2
        + 0.2843 * x**3 - 0.1036 * x**4
    )

    if camber > 0 and 0 < camber_pos < 1:
        p = camber_pos
        yc = np.where(
            x < p,
            camber / p**2 * (2 * p * x - x**2),
            camber / (1 - p) ** 2 * ((1 - 2 * p) + 2 * p * x - x**2),
        )
        dyc = np.where(
            x < p,
            2 * camber / p**2 * (p - x),
            2 * camber / (1 - p) ** 2 * (p - x),
        )
        theta = np.arctan(dyc)
    else:
        yc = np.zeros_like(x)
        theta = np.zeros_like(x)

    x_upper = x - yt * np.sin(theta)
    y_upper = yc + yt * np.cos(theta)
    x_lower = x + yt * np.sin(theta)
    y_lower = yc - yt * np.cos(theta)

    return AirfoilPath.from_surfaces(
        name,
        x_upper * REFERENCE_CHORD, y_upper * REFERENCE_CHORD,
        x_lower * REFERENCE_CHORD, y_lower * REFERENCE_CHORD,
    )


airfoil_factory = AirfoilFactory()
