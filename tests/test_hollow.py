"""
Hollow shell cavity: thin-section guard, inward offset and tip cap.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from dataclasses import replace

import numpy as np
import pytest

from config import ChordProfile, HollowConfig, WingConfig, WingShape
from hydrofoil.airfoil import naca4
from hydrofoil.geometry import point_extremes, signed_area
from hydrofoil.hollow import THICKNESS_GUARD, HollowShellBuilder
from hydrofoil.sections import AirfoilSchedule, SliceBuilder

WALL = 1.2


def _builder(chord_mode=WingShape.ELLIPTIC, root=149.0, tip=50.0, wall=WALL, airfoil=None):
    cfg = WingConfig(
        chord=ChordProfile(chord_mode, root_chord_mm=root, tip_chord_mm=tip),
        hollow=HollowConfig(enabled=True, wall_thickness_mm=wall),
    )
    schedule = AirfoilSchedule.single(airfoil) if airfoil else AirfoilSchedule.from_config(cfg)
    return HollowShellBuilder(cfg, SliceBuilder(cfg, schedule))


@pytest.fixture
def kernel():
    pytest.importorskip("cadquery")
    from hydrofoil import kernel

    return kernel


@pytest.fixture
def naca0012():
    return naca4(0.0, 0.0, 0.12, name="naca0012")


@pytest.mark.parametrize("factor, too_thin", [(0.95, True), (1.0, True), (1.1, False)])
def test_thin_section_guard(naca0012, factor, too_thin):
    critical = THICKNESS_GUARD * WALL / naca0012.max_thickness_ratio
    chord = critical * factor
    builder = _builder(WingShape.TRAPEZOIDAL, chord, chord, airfoil=naca0012)
    assert builder.is_too_thin(0.5) is too_thin


def test_too_thin_section_has_no_cavity(naca0012):
    chord = 0.95 * THICKNESS_GUARD * WALL / naca0012.max_thickness_ratio
    builder = _builder(WingShape.TRAPEZOIDAL, chord, chord, airfoil=naca0012)
    assert builder.cavity_section(0.5) is None


def test_elliptic_tip_is_always_solid():
    builder = _builder()
    assert builder.slices.chord(1.0) == 0.0
    assert builder.is_too_thin(1.0)
    assert builder.cavity_profile(1.0) is None


def test_zero_wall_never_yields_a_cavity():
    # Rejected by validation; the builder still refuses to hollow
    builder = _builder(WingShape.TRAPEZOIDAL, wall=0.0)
    assert builder.cap_fraction == 1.0
    assert builder.is_too_thin(0.0)
    assert builder.cavity_stack() is None


def test_cavity_lies_inside_outer_section(kernel):
    builder = _builder()
    outer = builder.slices.build_slice(0.0)
    cavity = builder.cavity_section(0.0)
    assert cavity is not None
    assert cavity.shape == (builder.slices.n_points, 2)

    o_min_x, o_max_x, o_min_y, o_max_y = point_extremes(outer)
    c_min_x, c_max_x, c_min_y, c_max_y = point_extremes(cavity)
    assert c_min_x >= o_min_x + 0.9 * WALL
    assert c_max_x <= o_max_x - 0.9 * WALL
    assert c_min_y >= o_min_y + 0.9 * WALL
    assert c_max_y <= o_max_y - 0.9 * WALL
    assert 0 < signed_area(cavity) < signed_area(outer)


def test_cavity_profile_is_lifted(kernel):
    profile = _builder().cavity_profile(0.0)
    assert profile.shape[1] == 3
    assert np.allclose(profile[:, 2], 0.0)


def test_cap_stops_cavity_one_wall_short_of_tip():
    builder = _builder()
    positions = builder.cavity_positions()
    cap = (575.0 - WALL) / 575.0
    assert builder.cap_fraction == pytest.approx(cap)
    assert positions[-1] == pytest.approx(cap)
    assert np.all(np.diff(positions) > 0)


def test_elliptic_cavity_ends_before_tip(kernel):
    stack = _builder().cavity_stack()
    assert stack is not None
    assert len(stack) >= 2
    assert stack.positions == sorted(stack.positions)
    assert stack.positions[-1] < 1.0


def test_thick_wall_leaves_wing_solid():
    assert _builder(wall=10.0).cavity_stack() is None


def test_cavity_follows_washout_and_anhedral(kernel):
    builder = _builder(WingShape.TRAPEZOIDAL)
    cfg = builder.cfg
    flat = HollowShellBuilder(
        replace(cfg, anhedral=replace(cfg.anhedral, degrees=0.0)), builder.slices
    ).cavity_profile(0.95)
    drooped = builder.cavity_profile(0.95)
    assert drooped[:, 1].mean() < flat[:, 1].mean()
