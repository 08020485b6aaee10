"""
Hydrofoil PDE: Single Source of Truth (SSOT)
============================================

This configuration module defines ALL parametric constants for a hydrofoil
wing. Geometry, spar placement, shell construction and print splitting
derive from these records. All dimensions are millimetres unless noted.

Every record is frozen: a WingConfig is built once and read by every
downstream component. Validation failures are fatal and abort generation
before any geometry is produced.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import json
import math
import re

import numpy as np


class ConfigurationError(ValueError):
    """Invalid parameter combination. Generation must not continue."""


class WingShape(Enum):
    """Span-wise chord distribution law."""
    TRAPEZOIDAL = "trapezoidal"
    ELLIPTIC = "elliptic"


class SurfaceAnchor(Enum):
    """Airfoil surface a spar hole is referenced to."""
    TOP = "top"
    BOTTOM = "bottom"
    CAMBER = "camber"
    NONE = "none"


class SparRole(Enum):
    """Structural spars cross both wing halves; secondary spars stay in one."""
    STRUCTURAL = "structural"
    SECONDARY = "secondary"


class SectionSpacing(Enum):
    """Distribution of loft sections along the span."""
    LINEAR = "linear"
    COSINE = "cosine"            # Clusters sections toward the tip


@dataclass(frozen=True)
class ChordProfile:
    """Chord length as a function of normalized span position."""

    mode: WingShape = WingShape.ELLIPTIC
    root_chord_mm: float = 149.0
    tip_chord_mm: float = 50.0         # Ignored by the elliptic law
    elliptic_power: float = 1.5

    def chord(self, nz: float) -> float:
        """Local chord at nz in [0, 1] (callers clamp)."""
        if self.mode is WingShape.TRAPEZOIDAL:
            return self.root_chord_mm - (self.root_chord_mm - self.tip_chord_mm) * nz
        p = self.elliptic_power
        base = max(0.0, 1.0 - nz ** p)
        return self.root_chord_mm * base ** (1.0 / p)

    def area(self, span_mm: float) -> float:
        """Planform area of one wing half in mm²."""
        if self.mode is WingShape.TRAPEZOIDAL:
            return 0.5 * (self.root_chord_mm + self.tip_chord_mm) * span_mm
        nz = np.linspace(0.0, 1.0, 2001)
        chords = np.array([self.chord(v) for v in nz])
        mean_chord = float(np.sum((chords[1:] + chords[:-1]) * np.diff(nz)) / 2.0)
        return mean_chord * span_mm


@dataclass(frozen=True)
class WashoutConfig:
    """Progressive nose-down twist toward the tip."""

    degrees: float = 2.0
    start_fraction: float = 0.3       # Twist begins here
    pivot_fraction: float = 0.25      # Rotation point along the chord

    @property
    def enabled(self) -> bool:
        return self.degrees != 0.0


@dataclass(frozen=True)
class AnhedralConfig:
    """Downward droop of the outer span."""

    degrees: float = 10.0
    start_fraction: float = 0.6

    @property
    def enabled(self) -> bool:
        return self.degrees != 0.0


@dataclass(frozen=True)
class AirfoilTransitionConfig:
    """Root, mid and tip sections and where they take over."""

    root_airfoil: str = "naca2412"
    mid_airfoil: str = "naca2410"
    tip_airfoil: str = "naca0010"
    center_change_fraction: float = 0.4
    tip_change_fraction: float = 0.8
    blend_slices: int = 0             # 0 = hard cut between sections


# Non-NACA airfoil names resolve to <name>.dat here, or are a path to a .dat file
AIRFOIL_DATA_DIR = Path(__file__).parent.parent / "data" / "airfoils"
NACA4_PATTERN = re.compile(r"^naca(\d)(\d)(\d{2})$", re.IGNORECASE)


def airfoil_source_exists(name: str) -> bool:
    """True for NACA 4-digit codes and for names that resolve to a .dat file."""
    if NACA4_PATTERN.match(name):
        return True
    if name.lower().endswith(".dat"):
        return Path(name).is_file()
    return (AIRFOIL_DATA_DIR / f"{name.lower()}.dat").is_file()


@dataclass(frozen=True)
class HollowConfig:
    """Thin-shell construction with an inner cavity."""

    enabled: bool = False
    wall_thickness_mm: float = 1.2


@dataclass(frozen=True)
class FixedPosition:
    """Spar x-position as millimetres behind the root leading edge."""
    mm: float


@dataclass(frozen=True)
class PercentPosition:
    """Spar x-position as a percentage of the root chord."""
    percent: float


SparPosition = Union[FixedPosition, PercentPosition]


def spar_position(fixed_mm: Optional[float] = None, percent: Optional[float] = None) -> SparPosition:
    """Build a spar position from the two persisted fields; exactly one must be set."""
    if fixed_mm is not None and percent is not None:
        raise ConfigurationError(
            f"Spar position over-specified: fixed_mm={fixed_mm} and percent={percent}. "
            "Give exactly one."
        )
    if fixed_mm is None and percent is None:
        raise ConfigurationError("Spar position under-specified: give fixed_mm or percent.")
    if fixed_mm is not None:
        return FixedPosition(float(fixed_mm))
    return PercentPosition(float(percent))


@dataclass(frozen=True)
class SingleSpar:
    """One round rod passed through the wing."""

    position: SparPosition
    diameter_mm: float = 4.0
    length_mm: float = 300.0
    offset_mm: float = 0.0                      # Manual y adjustment
    anchor: SurfaceAnchor = SurfaceAnchor.CAMBER
    role: SparRole = SparRole.STRUCTURAL


@dataclass(frozen=True)
class PairedSpar:
    """Two rods sharing an x-position, usually straddling the thick section."""

    position: SparPosition
    top: SingleSpar
    bottom: SingleSpar
    role: SparRole = SparRole.STRUCTURAL


SparConfig = Union[SingleSpar, PairedSpar]


@dataclass(frozen=True)
class ManufacturingParams:
    """Print calibration and reinforcement detail."""

    hole_tolerance_mm: float = 0.3        # Added to rod diameter
    tube_wall_mm: float = 1.2             # Tube wall around a hole in hollow wings
    grid_bar_width_mm: float = 2.0        # Grid-bar cross-section at the tube end
    grid_bar_height_mm: float = 4.0
    taper_length_mm: float = 10.0         # Tube-to-bar transition length
    taper_steps: int = 4                  # Intermediate loft profiles
    min_loft_chord_mm: float = 0.5        # Floor for a collapsing elliptic tip
    profile_points: int = 120             # Points per resampled cross-section


@dataclass(frozen=True)
class PrintSplitConfig:
    """Build-volume splitting and connector stubs."""

    enabled: bool = True
    build_volume: Tuple[float, float, float] = (220.0, 220.0, 250.0)
    connector_scale: float = 0.5          # Connector footprint vs. boundary section
    connector_taper: float = 0.7          # Far-end shrink factor
    connector_length_mm: float = 8.0
    connector_clearance_mm: float = 0.2   # Extra size of the female cavity
    connector_steps: int = 5
    spacing_fraction: float = 0.05        # Of build width, between laid-out parts

    def split_count(self, span_mm: float) -> int:
        if not self.enabled or span_mm <= 0:
            return 1
        return max(1, math.ceil(span_mm / self.build_volume[2]))

    def segment_length(self, span_mm: float) -> float:
        return span_mm / self.split_count(span_mm)


def _default_spars() -> Tuple[SparConfig, ...]:
    return (
        PairedSpar(
            position=PercentPosition(25.0),
            top=SingleSpar(PercentPosition(25.0), diameter_mm=3.0, length_mm=400.0,
                           offset_mm=-2.5, anchor=SurfaceAnchor.TOP),
            bottom=SingleSpar(PercentPosition(25.0), diameter_mm=3.0, length_mm=400.0,
                              offset_mm=2.5, anchor=SurfaceAnchor.BOTTOM),
        ),
        SingleSpar(PercentPosition(55.0), diameter_mm=2.0, length_mm=200.0,
                   anchor=SurfaceAnchor.CAMBER, role=SparRole.SECONDARY),
    )


@dataclass(frozen=True)
class WingConfig:
    """
    Master configuration for one hydrofoil wing half.

    ALL downstream modules read this. Changes here propagate through:
    - chord distribution and section stack
    - spar hole and tube placement
    - hollow cavity construction
    - print-volume splitting
    """

    section_count: int = 40
    span_mm: float = 575.0
    center_line_fraction: float = 0.25    # Chord point placed on the span axis
    spacing: SectionSpacing = SectionSpacing.LINEAR
    chord: ChordProfile = field(default_factory=ChordProfile)
    washout: WashoutConfig = field(default_factory=WashoutConfig)
    anhedral: AnhedralConfig = field(default_factory=AnhedralConfig)
    airfoils: AirfoilTransitionConfig = field(default_factory=AirfoilTransitionConfig)
    hollow: HollowConfig = field(default_factory=HollowConfig)
    spars: Tuple[SparConfig, ...] = field(default_factory=_default_spars)
    manufacturing: ManufacturingParams = field(default_factory=ManufacturingParams)
    print_split: PrintSplitConfig = field(default_factory=PrintSplitConfig)

    # Project metadata
    project_name: str = "Hydrofoil PDE"
    version: str = "0.1.0"

    def validate(self) -> List[str]:
        """Collect every configuration error; an empty list means valid."""
        errors: List[str] = []

        if self.section_count < 1:
            errors.append(f"section_count must be >= 1 (got {self.section_count})")
        if self.span_mm <= 0:
            errors.append(f"span_mm must be positive (got {self.span_mm})")
        if self.chord.root_chord_mm <= 0:
            errors.append(f"chord.root_chord_mm must be positive (got {self.chord.root_chord_mm})")
        if self.chord.tip_chord_mm < 0:
            errors.append(f"chord.tip_chord_mm must not be negative (got {self.chord.tip_chord_mm})")
        if self.chord.elliptic_power <= 0:
            errors.append(f"chord.elliptic_power must be positive (got {self.chord.elliptic_power})")

        fractions = {
            "center_line_fraction": self.center_line_fraction,
            "washout.start_fraction": self.washout.start_fraction,
            "washout.pivot_fraction": self.washout.pivot_fraction,
            "anhedral.start_fraction": self.anhedral.start_fraction,
            "airfoils.center_change_fraction": self.airfoils.center_change_fraction,
            "airfoils.tip_change_fraction": self.airfoils.tip_change_fraction,
        }
        for name, value in fractions.items():
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be within [0, 1] (got {value})")

        if self.airfoils.blend_slices < 0:
            errors.append(f"airfoils.blend_slices must not be negative (got {self.airfoils.blend_slices})")
        elif self.airfoils.blend_slices > self.section_count:
            errors.append(
                f"airfoils.blend_slices ({self.airfoils.blend_slices}) exceeds "
                f"section_count ({self.section_count})"
            )

        if self.hollow.wall_thickness_mm < 0:
            errors.append(f"hollow.wall_thickness_mm must not be negative (got {self.hollow.wall_thickness_mm})")
        elif self.hollow.enabled and self.hollow.wall_thickness_mm == 0:
            errors.append("hollow.wall_thickness_mm must be positive when hollow.enabled is set (got 0)")

        for name in ("root_airfoil", "mid_airfoil", "tip_airfoil"):
            value = getattr(self.airfoils, name)
            if not airfoil_source_exists(value):
                errors.append(
                    f"airfoils.{name} '{value}' is neither a NACA 4-digit code nor a .dat file "
                    f"(searched {AIRFOIL_DATA_DIR})"
                )

        mfg = self.manufacturing
        if mfg.profile_points < 8:
            errors.append(f"manufacturing.profile_points must be >= 8 (got {mfg.profile_points})")
        if mfg.taper_steps < 0:
            errors.append(f"manufacturing.taper_steps must not be negative (got {mfg.taper_steps})")

        for i, spar in enumerate(self.spars):
            errors.extend(_validate_spar(spar, f"spars[{i}]"))

        split = self.print_split
        if len(split.build_volume) != 3 or any(v <= 0 for v in split.build_volume):
            errors.append(f"print_split.build_volume must be three positive sizes (got {split.build_volume})")
        for name in ("connector_scale", "connector_taper"):
            value = getattr(split, name)
            if not 0.0 < value <= 1.0:
                errors.append(f"print_split.{name} must be within (0, 1] (got {value})")
        if split.connector_steps < 2:
            errors.append(f"print_split.connector_steps must be >= 2 (got {split.connector_steps})")

        return errors

    def ensure_valid(self) -> "WingConfig":
        """Raise ConfigurationError listing every problem, else return self."""
        errors = self.validate()
        if errors:
            raise ConfigurationError("Invalid wing configuration:\n  - " + "\n  - ".join(errors))
        return self

    @property
    def split_count(self) -> int:
        return self.print_split.split_count(self.span_mm)

    @property
    def segment_length(self) -> float:
        return self.print_split.segment_length(self.span_mm)

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        area_cm2 = self.chord.area(self.span_mm) / 100.0
        return f"""
Hydrofoil PDE Configuration Summary
===================================
Version: {self.version}

PLANFORM
--------
Shape: {self.chord.mode.value}
Span: {self.span_mm:.1f} mm
Root Chord: {self.chord.root_chord_mm:.1f} mm
Tip Chord: {self.chord.chord(1.0):.1f} mm
Half-Wing Area: {area_cm2:.1f} cm²
Sections: {self.section_count} ({self.spacing.value})

TRANSFORMS
----------
Washout: {self.washout.degrees}° from {self.washout.start_fraction:.0%} span
Anhedral: {self.anhedral.degrees}° from {self.anhedral.start_fraction:.0%} span

AIRFOILS
--------
Root: {self.airfoils.root_airfoil}
Mid: {self.airfoils.mid_airfoil} (from {self.airfoils.center_change_fraction:.0%})
Tip: {self.airfoils.tip_airfoil} (from {self.airfoils.tip_change_fraction:.0%})

CONSTRUCTION
------------
Hollow: {'yes, ' + str(self.hollow.wall_thickness_mm) + ' mm wall' if self.hollow.enabled else 'no'}
Spars: {len(self.spars)}
Print Segments: {self.split_count} x {self.segment_length:.1f} mm
"""


def _validate_spar(spar: SparConfig, label: str) -> List[str]:
    errors: List[str] = []
    if isinstance(spar, PairedSpar):
        errors.extend(_validate_position(spar.position, f"{label}.position"))
        for name, member in (("top", spar.top), ("bottom", spar.bottom)):
            if member.position != spar.position:
                errors.append(
                    f"{label}.{name}.position ({member.position}) differs from the paired position "
                    f"({spar.position})"
                )
        errors.extend(_validate_spar(spar.top, f"{label}.top"))
        errors.extend(_validate_spar(spar.bottom, f"{label}.bottom"))
        return errors

    errors.extend(_validate_position(spar.position, f"{label}.position"))
    if spar.diameter_mm <= 0:
        errors.append(f"{label}.diameter_mm must be positive (got {spar.diameter_mm})")
    if spar.length_mm <= 0:
        errors.append(f"{label}.length_mm must be positive (got {spar.length_mm})")
    return errors


def _validate_position(position: Any, label: str) -> List[str]:
    if isinstance(position, PercentPosition):
        if not 0.0 <= position.percent <= 100.0:
            return [f"{label}.percent must be within [0, 100] (got {position.percent})"]
        return []
    if isinstance(position, FixedPosition):
        return []
    return [f"{label} must be a fixed or percentage position (got {position!r})"]


# === PERSISTED CONFIGURATION ===

_ENUM_FIELDS = {
    "mode": WingShape,
    "anchor": SurfaceAnchor,
    "role": SparRole,
    "spacing": SectionSpacing,
}


def _build_record(cls, data: Dict[str, Any], label: str):
    """Instantiate a flat dataclass from a dict, converting enum values."""
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in {label}: {', '.join(unknown)}")

    kwargs = {}
    for key, value in data.items():
        enum_cls = _ENUM_FIELDS.get(key)
        if enum_cls is not None:
            try:
                value = enum_cls(value)
            except ValueError:
                choices = ", ".join(e.value for e in enum_cls)
                raise ConfigurationError(f"{label}.{key} must be one of {choices} (got {value!r})") from None
        kwargs[key] = value
    return cls(**kwargs)


def _position_from_dict(data: Dict[str, Any], label: str) -> Tuple[SparPosition, Dict[str, Any]]:
    rest = dict(data)
    fixed_mm = rest.pop("fixed_mm", None)
    percent = rest.pop("percent", None)
    try:
        return spar_position(fixed_mm, percent), rest
    except ConfigurationError as exc:
        raise ConfigurationError(f"{label}: {exc}") from None


def spar_from_dict(data: Dict[str, Any], label: str = "spar") -> SparConfig:
    """Parse one entry of the persisted spar table."""
    if "top" in data or "bottom" in data:
        rest = dict(data)
        top = rest.pop("top", None)
        bottom = rest.pop("bottom", None)
        if top is None or bottom is None:
            raise ConfigurationError(f"{label}: a paired spar needs both 'top' and 'bottom'")
        position, rest = _position_from_dict(rest, label)
        role = _build_record(_RoleField, {"role": rest.pop("role", SparRole.STRUCTURAL.value)}, label).role
        if rest:
            raise ConfigurationError(f"Unknown keys in {label}: {', '.join(sorted(rest))}")

        def member(entry: Dict[str, Any], name: str, anchor: SurfaceAnchor) -> SingleSpar:
            own = sorted(k for k in ("fixed_mm", "percent") if k in entry)
            if own:
                raise ConfigurationError(
                    f"{label}.{name}: a paired member takes the pair's position; remove {', '.join(own)}"
                )
            entry = {"anchor": anchor.value, **entry, "role": role.value, **_position_fields(position)}
            return spar_from_dict(entry, f"{label}.{name}")

        return PairedSpar(
            position=position,
            top=member(top, "top", SurfaceAnchor.TOP),
            bottom=member(bottom, "bottom", SurfaceAnchor.BOTTOM),
            role=role,
        )

    position, rest = _position_from_dict(data, label)
    spar = _build_record(_SingleSparFields, rest, label)
    return SingleSpar(position=position, **{f.name: getattr(spar, f.name) for f in fields(spar)})


def _position_fields(position: SparPosition) -> Dict[str, float]:
    if isinstance(position, FixedPosition):
        return {"fixed_mm": position.mm}
    return {"percent": position.percent}


@dataclass(frozen=True)
class _RoleField:
    role: SparRole = SparRole.STRUCTURAL


@dataclass(frozen=True)
class _SingleSparFields:
    diameter_mm: float = 4.0
    length_mm: float = 300.0
    offset_mm: float = 0.0
    anchor: SurfaceAnchor = SurfaceAnchor.CAMBER
    role: SparRole = SparRole.STRUCTURAL


_SECTIONS = {
    "chord": ChordProfile,
    "washout": WashoutConfig,
    "anhedral": AnhedralConfig,
    "airfoils": AirfoilTransitionConfig,
    "hollow": HollowConfig,
    "manufacturing": ManufacturingParams,
    "print_split": PrintSplitConfig,
}


def config_from_dict(data: Dict[str, Any]) -> WingConfig:
    """Build a WingConfig from plain structured data (e.g. parsed JSON)."""
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _SECTIONS:
            if not isinstance(value, dict):
                raise ConfigurationError(f"Section '{key}' must be a mapping")
            if key == "print_split" and "build_volume" in value:
                value = {**value, "build_volume": tuple(float(v) for v in value["build_volume"])}
            kwargs[key] = _build_record(_SECTIONS[key], value, key)
        elif key == "spars":
            kwargs[key] = tuple(spar_from_dict(entry, f"spars[{i}]") for i, entry in enumerate(value))
        else:
            kwargs[key] = value
    return _build_record(WingConfig, kwargs, "wing")


def config_to_dict(cfg: Any) -> Any:
    """Inverse of config_from_dict for dataclass trees."""
    if isinstance(cfg, (FixedPosition, PercentPosition)):
        return _position_fields(cfg)
    if isinstance(cfg, SingleSpar):
        out = {k: config_to_dict(getattr(cfg, k)) for k in
               ("diameter_mm", "length_mm", "offset_mm", "anchor", "role")}
        out.update(_position_fields(cfg.position))
        return out
    if isinstance(cfg, PairedSpar):
        out = {"top": _member_to_dict(cfg.top), "bottom": _member_to_dict(cfg.bottom),
               "role": cfg.role.value}
        out.update(_position_fields(cfg.position))
        return out
    if is_dataclass(cfg):
        return {f.name: config_to_dict(getattr(cfg, f.name)) for f in fields(cfg)}
    if isinstance(cfg, Enum):
        return cfg.value
    if isinstance(cfg, tuple):
        return [config_to_dict(v) for v in cfg]
    return cfg


def _member_to_dict(spar: SingleSpar) -> Dict[str, Any]:
    out = config_to_dict(spar)
    for key in ("fixed_mm", "percent", "role"):
        out.pop(key, None)
    return out


def load_config(path: Path) -> WingConfig:
    """Load and validate a JSON configuration file."""
    with open(path, "r") as f:
        data = json.load(f)
    return config_from_dict(data).ensure_valid()


# Default instance - import this throughout the project
config = WingConfig()

# Validate on import
_errors = config.validate()
if _errors:
    import warnings
    for err in _errors:
        warnings.warn(err, UserWarning)
