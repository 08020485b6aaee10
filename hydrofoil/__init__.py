# Hydrofoil PDE Core Module
#
# Section math only; the CadQuery-backed parts (kernel, base, wing) are
# imported from their own modules so the math runs without a CAD kernel.
from .airfoil import AirfoilFactory, AirfoilPath, airfoil_factory, naca4
from .sections import AirfoilSchedule, SliceBuilder, section_positions
from .transforms import ProfileStack, build_profile, build_profile_stack
from .spars import SparHole, SparPlacer
from .hollow import HollowShellBuilder
from .split import SplitContext, plan_segments

__all__ = [
    "AirfoilFactory",
    "AirfoilPath",
    "airfoil_factory",
    "naca4",
    "AirfoilSchedule",
    "SliceBuilder",
    "section_positions",
    "ProfileStack",
    "build_profile",
    "build_profile_stack",
    "SparHole",
    "SparPlacer",
    "HollowShellBuilder",
    "SplitContext",
    "plan_segments",
]
