"""
Configuration validation and persisted-data loading.

Invalid parameter combinations are fatal and must name the offending
parameter; spar positions need exactly one of fixed or percentage.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import json
from dataclasses import replace

import pytest

from config import (
    AirfoilTransitionConfig, ConfigurationError, FixedPosition, HollowConfig, PairedSpar,
    PercentPosition, SingleSpar, SparRole, SurfaceAnchor, WingConfig,
    config_from_dict, config_to_dict, load_config, spar_from_dict, spar_position,
)


def test_default_config_is_valid():
    assert WingConfig().validate() == []


def test_spar_position_requires_exactly_one_field():
    assert spar_position(fixed_mm=30.0) == FixedPosition(30.0)
    assert spar_position(percent=15.0) == PercentPosition(15.0)
    with pytest.raises(ConfigurationError, match="over-specified"):
        spar_position(fixed_mm=30.0, percent=15.0)
    with pytest.raises(ConfigurationError, match="under-specified"):
        spar_position()


def test_spar_table_entry_with_both_positions_is_fatal():
    with pytest.raises(ConfigurationError, match=r"spars\[0\]"):
        config_from_dict({"spars": [{"fixed_mm": 20.0, "percent": 10.0}]})


def test_percentage_outside_range_is_reported():
    cfg = WingConfig(spars=(SingleSpar(PercentPosition(120.0)),))
    errors = cfg.validate()
    assert any("spars[0].position.percent" in e for e in errors)


def test_blend_window_larger_than_section_count():
    cfg = WingConfig(section_count=10, airfoils=AirfoilTransitionConfig(blend_slices=11))
    with pytest.raises(ConfigurationError, match="blend_slices"):
        cfg.ensure_valid()


def test_all_errors_are_collected():
    cfg = WingConfig(span_mm=-1.0, center_line_fraction=1.5)
    errors = cfg.validate()
    assert any("span_mm" in e for e in errors)
    assert any("center_line_fraction" in e for e in errors)


def test_split_count_is_ceiling_of_span_over_build_height():
    cfg = WingConfig(span_mm=575.0)
    assert cfg.split_count == 3
    assert cfg.segment_length == pytest.approx(575.0 / 3)


def test_paired_spar_members_inherit_position_and_anchor():
    spar = spar_from_dict({
        "percent": 30.0,
        "role": "secondary",
        "top": {"diameter_mm": 3.0, "offset_mm": -2.0},
        "bottom": {"diameter_mm": 2.0},
    })
    assert isinstance(spar, PairedSpar)
    assert spar.position == PercentPosition(30.0)
    assert spar.top.anchor is SurfaceAnchor.TOP
    assert spar.bottom.anchor is SurfaceAnchor.BOTTOM
    assert spar.top.position == PercentPosition(30.0)
    assert spar.bottom.role is SparRole.SECONDARY


def test_paired_member_with_own_position_is_fatal():
    with pytest.raises(ConfigurationError, match=r"spar\.top: .*percent"):
        spar_from_dict({
            "percent": 25.0,
            "top": {"percent": 40.0},
            "bottom": {"diameter_mm": 2.0},
        })
    with pytest.raises(ConfigurationError, match=r"spar\.bottom: .*fixed_mm"):
        spar_from_dict({
            "percent": 25.0,
            "top": {"diameter_mm": 2.0},
            "bottom": {"fixed_mm": 10.0},
        })


def test_paired_member_position_mismatch_is_reported():
    paired = PairedSpar(
        position=PercentPosition(25.0),
        top=SingleSpar(PercentPosition(40.0), anchor=SurfaceAnchor.TOP),
        bottom=SingleSpar(PercentPosition(25.0), anchor=SurfaceAnchor.BOTTOM),
    )
    errors = WingConfig(spars=(paired,)).validate()
    assert any("spars[0].top.position" in e for e in errors)
    assert not any("spars[0].bottom.position" in e for e in errors)


def test_hollow_wing_needs_a_wall():
    cfg = WingConfig(hollow=HollowConfig(enabled=True, wall_thickness_mm=0.0))
    errors = cfg.validate()
    assert any("hollow.wall_thickness_mm" in e for e in errors)
    assert WingConfig(hollow=HollowConfig(enabled=False, wall_thickness_mm=0.0)).validate() == []


def test_unknown_airfoil_names_the_field():
    cfg = WingConfig(airfoils=AirfoilTransitionConfig(tip_airfoil="mystery"))
    errors = cfg.validate()
    assert len(errors) == 1
    assert "airfoils.tip_airfoil" in errors[0]
    assert "mystery" in errors[0]


def test_airfoil_dat_path_is_accepted(tmp_path):
    dat = tmp_path / "custom.dat"
    dat.write_text("custom\n1.0 0.0\n0.0 0.0\n1.0 0.0\n")
    cfg = WingConfig(airfoils=AirfoilTransitionConfig(mid_airfoil=str(dat)))
    assert cfg.validate() == []
    missing = WingConfig(airfoils=AirfoilTransitionConfig(mid_airfoil=str(tmp_path / "gone.dat")))
    assert any("airfoils.mid_airfoil" in e for e in missing.validate())


def test_unknown_keys_are_rejected():
    with pytest.raises(ConfigurationError, match="washout"):
        config_from_dict({"washout": {"degree": 2.0}})


def test_bad_enum_value_names_the_field():
    with pytest.raises(ConfigurationError, match="chord.mode"):
        config_from_dict({"chord": {"mode": "delta"}})


def test_dict_round_trip_preserves_config():
    cfg = replace(WingConfig(), span_mm=420.0, section_count=24)
    assert config_from_dict(json.loads(json.dumps(config_to_dict(cfg)))) == cfg


def test_load_config_validates(tmp_path):
    path = tmp_path / "wing.json"
    path.write_text(json.dumps({"span_mm": 400.0, "section_count": 0}))
    with pytest.raises(ConfigurationError, match="section_count"):
        load_config(path)

    path.write_text(json.dumps({"span_mm": 400.0, "chord": {"mode": "trapezoidal", "tip_chord_mm": 60.0}}))
    cfg = load_config(path)
    assert cfg.span_mm == 400.0
    assert cfg.chord.chord(1.0) == 60.0


def test_summary_mentions_segments():
    assert "Print Segments: 3" in WingConfig().summary()
