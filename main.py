#!/usr/bin/env python3
"""
Hydrofoil PDE: Main Entry Point
===============================

Usage:
    python main.py --generate               Build the wing (STEP, STL, DXF templates)
    python main.py --generate --split       ...and cut it into print segments
    python main.py --summary                Show configuration summary
    python main.py --validate               Validate configuration only
    python main.py --config wing.json ...   Use a persisted configuration

"""

import argparse
import json
import logging
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config import ConfigurationError, WingConfig, config, load_config  # noqa: E402


def select_config(path) -> WingConfig:
    if path is None:
        return config
    return load_config(Path(path))


def validate_config(cfg: WingConfig) -> bool:
    """Validate wing configuration."""
    print("Validating configuration...")
    errors = cfg.validate()

    if errors:
        print("\nCONFIGURATION ERRORS:")
        for err in errors:
            print(f"  [!] {err}")
        return False

    print("  Configuration valid.")
    return True


def generate_wing(cfg: WingConfig, output_dir: Path, split: bool) -> int:
    """Generate the wing solid and its manufacturing artifacts."""
    from hydrofoil.wing import HydrofoilWing, build_report

    print("\n--- Generating Wing ---")
    step_dir = output_dir / "STEP"
    stl_dir = output_dir / "STL"
    dxf_dir = output_dir / "DXF"
    for d in [step_dir, stl_dir, dxf_dir]:
        d.mkdir(parents=True, exist_ok=True)

    wing = HydrofoilWing(cfg, description="Hydrofoil wing half")
    print(f"  Sections: {len(wing.profile_stack)}")

    wing.generate_geometry()
    print(f"  STEP: {wing.export_step(step_dir)}")
    print(f"  STL:  {wing.export_stl(stl_dir)}")
    print(f"  DXF:  {wing.export_dxf(dxf_dir)}")

    if split:
        segments = wing.split()
        for segment in segments:
            segment.export_stl(stl_dir)
        print(f"  Wing split into {len(segments)} print segments ({cfg.segment_length:.1f} mm each)")

    report_file = output_dir / f"{wing.name}_report.json"
    with open(report_file, "w") as f:
        json.dump(build_report(wing), f, indent=2, default=str)
    print(f"  Report written to: {report_file}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Hydrofoil PDE Environment")
    parser.add_argument("--config", default=None, help="JSON configuration file")
    parser.add_argument("--generate", action="store_true", help="Generate the wing solid")
    parser.add_argument("--split", action="store_true", help="Split into print-volume segments")
    parser.add_argument("--output", default=str(project_root / "output"), help="Output directory")
    parser.add_argument(
        "--validate", action="store_true", help="Validate configuration only"
    )
    parser.add_argument(
        "--summary", action="store_true", help="Show configuration summary"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = select_config(args.config)
    except ConfigurationError as e:
        print(f"\nCONFIGURATION ERROR: {e}")
        return 1

    print(f"{cfg.project_name} v{cfg.version}")

    if args.summary:
        print(cfg.summary())
        return 0

    if args.validate:
        return 0 if validate_config(cfg) else 1

    # Validate before generating
    if not validate_config(cfg):
        print("\nAborting due to configuration errors.")
        return 1

    if args.generate or args.split:
        result = generate_wing(cfg, Path(args.output), split=args.split)
        if result:
            return result

    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
