# Hydrofoil PDE Configuration Module
from .wing_config import (
    WingConfig, config, ConfigurationError, WingShape, SurfaceAnchor,
    SparRole, SectionSpacing, ChordProfile, WashoutConfig, AnhedralConfig,
    AirfoilTransitionConfig, HollowConfig, FixedPosition, PercentPosition,
    SingleSpar, PairedSpar, SparConfig, SparPosition, ManufacturingParams, PrintSplitConfig,
    spar_position, spar_from_dict, config_from_dict, config_to_dict,
    load_config, airfoil_source_exists, AIRFOIL_DATA_DIR, NACA4_PATTERN,
)

__all__ = [
    "WingConfig", "config", "ConfigurationError", "WingShape", "SurfaceAnchor",
    "SparRole", "SectionSpacing", "ChordProfile", "WashoutConfig", "AnhedralConfig",
    "AirfoilTransitionConfig", "HollowConfig", "FixedPosition", "PercentPosition",
    "SingleSpar", "PairedSpar", "SparConfig", "SparPosition", "ManufacturingParams", "PrintSplitConfig",
    "spar_position", "spar_from_dict", "config_from_dict", "config_to_dict",
    "load_config", "airfoil_source_exists", "AIRFOIL_DATA_DIR", "NACA4_PATTERN",
]
