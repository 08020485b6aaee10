"""
Airfoil sections: NACA generation, .dat ingestion and surface lookup.
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import pytest

from hydrofoil.airfoil import AirfoilFactory, AirfoilPath, naca4, surface_y_at
from hydrofoil.geometry import signed_area


def test_naca0012_thickness_and_orientation():
    airfoil = AirfoilFactory().get("naca0012")
    assert airfoil.max_thickness_ratio == pytest.approx(0.12, abs=2e-3)
    assert signed_area(airfoil.polygon) > 0, "polygon must be counter-clockwise"
    assert airfoil.polygon[:, 0].max() == pytest.approx(100.0)
    assert airfoil.polygon[:, 0].min() == pytest.approx(0.0, abs=1e-9)


def test_symmetric_section_surfaces_reflect():
    airfoil = naca4(0.0, 0.0, 0.10, name="naca0010")
    assert np.allclose(airfoil.top[:, 0], airfoil.bottom[:, 0])
    assert np.allclose(airfoil.top[:, 1], -airfoil.bottom[:, 1])
    assert np.allclose(airfoil.camber[:, 1], 0.0, atol=1e-12)


def test_cambered_section_has_positive_camber():
    airfoil = naca4(0.04, 0.4, 0.12, name="naca4412")
    mid = surface_y_at(airfoil.camber, 40.0)
    assert mid == pytest.approx(4.0, abs=0.2)


def test_surface_lookup_takes_first_sample_at_or_after_x():
    samples = np.array([[0.0, 0.0], [10.0, 1.0], [20.0, 2.0], [30.0, 3.0]])
    assert surface_y_at(samples, 10.0) == 1.0
    assert surface_y_at(samples, 10.5) == 2.0
    assert surface_y_at(samples, -5.0) == 0.0
    assert surface_y_at(samples, 99.0) == 3.0, "past the end returns the last sample"


def test_factory_caches_sections():
    factory = AirfoilFactory()
    assert factory.get("NACA2412") is factory.get("naca2412")


def _write_selig(path, airfoil: AirfoilPath):
    with open(path, "w") as f:
        f.write("TEST SECTION\n")
        for x, y in np.vstack([airfoil.polygon, airfoil.polygon[:1]]) / 100.0:
            f.write(f"{x:.6f} {y:.6f}\n")


def test_selig_file_round_trips_thickness(tmp_path):
    source = naca4(0.02, 0.4, 0.12, name="naca2412")
    dat = tmp_path / "test.dat"
    _write_selig(dat, source)

    loaded = AirfoilFactory(data_dir=tmp_path, smooth=False).get("test")
    assert loaded.name == "TEST SECTION"
    assert loaded.max_thickness_ratio == pytest.approx(source.max_thickness_ratio, abs=3e-3)
    assert surface_y_at(loaded.top, 30.0) > surface_y_at(loaded.bottom, 30.0)


def test_dat_path_name_is_loaded_directly(tmp_path):
    source = naca4(0.0, 0.0, 0.10, name="naca0010")
    dat = tmp_path / "elsewhere.dat"
    _write_selig(dat, source)

    loaded = AirfoilFactory(data_dir=tmp_path / "unused", smooth=False).get(str(dat))
    assert loaded.max_thickness_ratio == pytest.approx(0.10, abs=3e-3)


def test_lednicer_file_is_parsed(tmp_path):
    x = 0.5 * (1 - np.cos(np.linspace(0, np.pi, 30)))
    yt = 0.6 * (0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x**2 + 0.2843 * x**3 - 0.1036 * x**4)
    lines = ["LEDNICER TEST", "", "30. 30.", ""]
    lines += [f"{a:.6f} {b:.6f}" for a, b in zip(x, yt)]
    lines += [""]
    lines += [f"{a:.6f} {-b:.6f}" for a, b in zip(x, yt)]
    dat = tmp_path / "led.dat"
    dat.write_text("\n".join(lines) + "\n")

    factory = AirfoilFactory(smooth=False)
    factory.register("led", dat)
    loaded = factory.get("led")
    assert loaded.max_thickness_ratio == pytest.approx(0.12, abs=3e-3)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AirfoilFactory(data_dir=tmp_path).get("nope")
