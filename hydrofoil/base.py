"""
Hydrofoil PDE: Printable Part Base
==================================

WingComponent wraps one CadQuery solid that ends up on a print bed: the
whole wing half, or one of the segments it is split into. The solid is
built lazily and exported as STEP for CAD checks or STL for slicing.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Dict, Any
import cadquery as cq


class WingComponent(ABC):
    """
    A named part with a lazily built solid and a build-report dictionary.

    Subclasses build their solid in generate_geometry() and keep it in
    self._geometry; the export methods build it on first use.
    """

    def __init__(self, name: str, description: str = ""):
        """
        Args:
            name: File stem for exports (e.g. "hydrofoil_wing", "hydrofoil_wing_seg2")
            description: One line for reports
        """
        self.name = name
        self.description = description
        self._geometry: Optional[cq.Workplane] = None
        self._metadata: Dict[str, Any] = {}

    @property
    def geometry(self) -> cq.Workplane:
        if self._geometry is None:
            raise ValueError(f"{self.name} has no solid yet; call generate_geometry() first.")
        return self._geometry

    @abstractmethod
    def generate_geometry(self) -> cq.Workplane:
        """Build the solid from the wing configuration, store it and return it."""

    def export_step(self, output_path: Path) -> Path:
        """Write ``<name>.step`` into ``output_path``."""
        if self._geometry is None:
            self.generate_geometry()

        step_file = output_path / f"{self.name}.step"
        cq.exporters.export(self._geometry, str(step_file))
        return step_file

    def export_stl(self, output_path: Path, tolerance: float = 0.05) -> Path:
        """
        Write ``<name>.stl`` into ``output_path`` for the slicer.

        Args:
            output_path: Output directory
            tolerance: Chordal deviation of the mesh in mm; 0.05 mm is below
                a typical 0.4 mm nozzle's resolution

        Returns:
            Path to the STL file
        """
        if self._geometry is None:
            self.generate_geometry()

        stl_file = output_path / f"{self.name}.stl"
        cq.exporters.export(
            self._geometry,
            str(stl_file),
            exportType="STL",
            tolerance=tolerance,
        )
        return stl_file

    def add_metadata(self, key: str, value: Any) -> None:
        """Record a value (dimensions, counts, z-range) for the build report."""
        self._metadata[key] = value

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            **self._metadata,
        }

    def __repr__(self) -> str:
        status = "built" if self._geometry is not None else "not built"
        return f"<{self.__class__.__name__}('{self.name}') [{status}]>"
