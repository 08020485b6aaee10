"""
Washout and anhedral transforms, and the assembled profile stack.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from dataclasses import replace
import math

import numpy as np
import pytest

from config import AnhedralConfig, ChordProfile, WashoutConfig, WingConfig, WingShape
from hydrofoil.sections import AirfoilSchedule, SliceBuilder
from hydrofoil.transforms import (
    anhedral_angle, anhedral_offset, apply_anhedral, apply_washout, build_profile,
    build_profile_stack, lift_to_3d, progress, washout_pitch,
)


@pytest.fixture
def cfg():
    return WingConfig(chord=ChordProfile(WingShape.TRAPEZOIDAL))


def test_progress_clamps():
    assert progress(0.1, 0.3) == 0.0
    assert progress(1.0, 0.3) == 1.0
    assert progress(0.5, 1.0) == 0.0


def test_no_washout_inboard_of_start():
    washout = WashoutConfig(degrees=2.0, start_fraction=0.3)
    assert washout_pitch(0.0, washout) == 0.0
    assert washout_pitch(0.3, washout) == 0.0


def test_washout_grows_to_full_nose_down():
    washout = WashoutConfig(degrees=2.0, start_fraction=0.3)
    pitches = [washout_pitch(nz, washout) for nz in np.linspace(0.3, 1.0, 15)]
    assert np.all(np.diff(pitches) <= 0)
    assert washout_pitch(0.65, washout) == pytest.approx(-1.0)
    assert washout_pitch(1.0, washout) == pytest.approx(-2.0)


def test_washout_drops_leading_edge_about_pivot(cfg):
    # Quarter-chord pivot on the span axis for a 40 mm chord
    points = np.array([[-10.0, 0.0], [0.0, 0.0], [30.0, 0.0]])
    twisted = apply_washout(points, 1.0, 40.0, cfg)
    assert twisted[0, 1] < 0 < twisted[2, 1]
    assert np.allclose(twisted[1], [0.0, 0.0])


def test_washout_pivot_is_chord_relative(cfg):
    cfg = replace(cfg, washout=WashoutConfig(degrees=3.0, start_fraction=0.0, pivot_fraction=0.5))
    pivot = np.array([[0.25 * 40.0, 0.0]])
    assert np.allclose(apply_washout(pivot, 1.0, 40.0, cfg), pivot)


def test_anhedral_angle_is_quadratic():
    anhedral = AnhedralConfig(degrees=10.0, start_fraction=0.6)
    assert anhedral_angle(0.5, anhedral) == 0.0
    assert anhedral_angle(0.8, anhedral) == pytest.approx(2.5)
    assert anhedral_angle(1.0, anhedral) == pytest.approx(10.0)


def test_anhedral_offset_eases_to_full_drop():
    anhedral = AnhedralConfig(degrees=10.0, start_fraction=0.6)
    span = 575.0
    full = -0.4 * span * math.tan(math.radians(10.0))
    assert anhedral_offset(0.6, anhedral, span) == 0.0
    assert anhedral_offset(0.8, anhedral, span) == pytest.approx(full / 2.0)
    assert anhedral_offset(1.0, anhedral, span) == pytest.approx(full)


def test_anhedral_rolls_about_local_x_then_drops(cfg):
    lifted = lift_to_3d(np.array([[5.0, 1.0]]), 575.0)
    rolled = apply_anhedral(lifted, 1.0, cfg)
    theta = math.radians(10.0)
    drop = anhedral_offset(1.0, cfg.anhedral, cfg.span_mm)
    assert rolled[0, 0] == 5.0
    assert rolled[0, 1] == pytest.approx(math.cos(theta) + drop)
    assert rolled[0, 2] == pytest.approx(575.0 + math.sin(theta))


def test_flat_stack_sits_at_span_positions(cfg):
    cfg = replace(cfg, anhedral=AnhedralConfig(degrees=0.0), section_count=8)
    slices = SliceBuilder(cfg, AirfoilSchedule.from_config(cfg))
    stack = build_profile_stack(cfg, slices)
    assert len(stack) == 9
    assert stack.positions == sorted(stack.positions)
    for nz, profile in zip(stack.positions, stack.profiles):
        assert profile.shape[1] == 3
        assert np.allclose(profile[:, 2], nz * cfg.span_mm)


def test_stack_is_sorted_for_any_input_order(cfg):
    slices = SliceBuilder(cfg, AirfoilSchedule.from_config(cfg))
    stack = build_profile_stack(cfg, slices, positions=[1.0, 0.0, 0.5])
    assert stack.positions == [0.0, 0.5, 1.0]


def test_tip_droops_below_root(cfg):
    slices = SliceBuilder(cfg, AirfoilSchedule.from_config(cfg))
    root = build_profile(0.0, cfg, slices)
    tip = build_profile(1.0, cfg, slices)
    assert tip[:, 1].mean() < root[:, 1].mean() - 30.0
