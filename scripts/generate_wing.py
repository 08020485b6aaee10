#!/usr/bin/env python3
# ruff: noqa: E402

"""
Hydrofoil PDE: Print Segment Generator
======================================

This script builds the configured hydrofoil wing half and writes one STL
per print segment, laid out for the build plate.

Usage:
    python scripts/generate_wing.py [config.json]

Outputs:
    - output/STEP/hydrofoil_wing.step          (CAD exchange format)
    - output/STL/hydrofoil_wing_segN.stl       (one per print segment)
    - output/DXF/hydrofoil_wing_templates.dxf  (root, tip and cut sections)
"""

import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import ConfigurationError, config, load_config
from hydrofoil.wing import HydrofoilWing


def main():
    """Generate the wing and export print segments."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Hydrofoil PDE: Print Segment Generator")
    print("=" * 60)
    print()

    try:
        cfg = load_config(Path(sys.argv[1])) if len(sys.argv) > 1 else config.ensure_valid()
    except ConfigurationError as e:
        print(f"CONFIGURATION ERROR: {e}")
        return 1

    print(cfg.summary())

    step_dir = project_root / "output" / "STEP"
    stl_dir = project_root / "output" / "STL"
    dxf_dir = project_root / "output" / "DXF"
    for d in [step_dir, stl_dir, dxf_dir]:
        d.mkdir(parents=True, exist_ok=True)

    print("\n[1/3] Lofting wing...")
    wing = HydrofoilWing(cfg)
    wing.generate_geometry()
    print(f"      Sections: {len(wing.profile_stack)}")
    print(f"      STEP: {wing.export_step(step_dir)}")

    print("\n[2/3] Splitting for the build volume...")
    for segment in wing.split():
        stl_file = segment.export_stl(stl_dir)
        meta = segment.get_metadata()
        print(f"      {stl_file.name}: z {meta['z_start_mm']:.1f}-{meta['z_end_mm']:.1f} mm")

    print("\n[3/3] Exporting section templates...")
    print(f"      DXF: {wing.export_dxf(dxf_dir)}")

    print("\n" + "=" * 60)
    print("GENERATION COMPLETE")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
