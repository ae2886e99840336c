"""
Configuration management for meshkernel.

Every operator takes an explicit options model: all fields are defaulted at
construction, validated by pydantic, and unknown fields are rejected so that
partial option bags are never merged at call time. ``ConfigManager`` loads
kernel-wide defaults and named profiles from YAML files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from meshkernel.core.exceptions import ConfigurationError


class OperatorOptions(BaseModel):
    """Base for operator option models (immutable, no unknown keys)."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ExtrudeOptions(OperatorOptions):
    """Options for face extrusion."""

    distance: float = 1.0
    scale: float = Field(default=1.0, gt=0.0)
    keep_original: bool = False
    material_index: Optional[int] = Field(default=None, ge=0)


class DirectedExtrudeOptions(OperatorOptions):
    """
    Distance and optional fixed direction for edge and vertex extrusion.

    Without ``direction`` each operator derives one from the surrounding
    faces; a given direction is normalized before use.
    """

    distance: float = 1.0
    direction: Optional[tuple[float, float, float]] = None

    @field_validator("direction")
    @classmethod
    def _direction_not_zero(cls, value: Optional[tuple[float, float, float]]):
        if value is not None and not any(value):
            raise ValueError("direction must be a non-zero vector")
        return value


class EdgeExtrudeOptions(DirectedExtrudeOptions):
    """Options for edge extrusion."""

    material_index: Optional[int] = Field(default=None, ge=0)


class VertexExtrudeOptions(DirectedExtrudeOptions):
    """Options for vertex extrusion."""


class LoopCutOptions(OperatorOptions):
    """Options for loop cuts: ``cuts`` evenly spaced cuts per edge ring."""

    cuts: int = Field(default=1, ge=1)


class InsetOptions(OperatorOptions):
    """Options for face inset. ``factor`` is a fraction toward the centroid."""

    factor: float = Field(default=0.2, gt=0.0, lt=1.0)
    material_index: Optional[int] = Field(default=None, ge=0)


class BevelOptions(OperatorOptions):
    """Options shared by edge, vertex and face bevels."""

    distance: float = Field(default=0.1, gt=0.0)
    segments: int = Field(default=1, ge=1)
    material_index: Optional[int] = Field(default=None, ge=0)


class BridgeOptions(OperatorOptions):
    """Options for bridging two edge loops."""

    segments: int = Field(default=1, ge=1)
    material_index: Optional[int] = Field(default=None, ge=0)
    mismatch_policy: Literal["fan", "error"] = "fan"


class SmoothingOptions(OperatorOptions):
    """Options for uniform and Laplacian smoothing."""

    iterations: int = Field(default=1, ge=0)
    factor: float = Field(default=0.5, ge=0.0, le=1.0)
    laplacian_lambda: float = Field(default=0.5, gt=0.0, le=1.0)
    preserve_boundaries: bool = False


class SubdivisionOptions(OperatorOptions):
    """Options for surface subdivision followed by optional smoothing."""

    levels: int = Field(default=1, ge=0)
    scheme: Literal["catmull_clark", "loop"] = "catmull_clark"
    iterations: int = Field(default=0, ge=0)
    factor: float = Field(default=0.5, ge=0.0, le=1.0)
    preserve_boundaries: bool = False


class MergeOptions(OperatorOptions):
    """Options for welding coincident vertices."""

    threshold: float = Field(default=1e-6, ge=0.0)


class CSGOptions(OperatorOptions):
    """Options for the boolean engine."""

    tolerance: float = Field(default=1e-6, gt=0.0)
    merge_vertices: bool = True
    validate_result: bool = False
    include_cutter_faces: bool = False


class ValidationOptions(OperatorOptions):
    """Thresholds used by the validation passes."""

    position_precision: int = Field(default=6, ge=0)
    area_epsilon: float = Field(default=1e-10, ge=0.0)
    normal_epsilon: float = Field(default=1e-6, ge=0.0)
    warn_missing_attributes: bool = True


class RepairOptions(OperatorOptions):
    """Options for the best-effort repair pass."""

    weld_tolerance: float = Field(default=1e-6, ge=0.0)
    remove_zero_area: bool = True
    area_epsilon: float = Field(default=1e-12, ge=0.0)
    remove_orphans: bool = True


class HistoryOptions(OperatorOptions):
    """Options for the boolean history ledger."""

    max_entries: int = Field(default=50, ge=1)


class KernelConfig(BaseModel):
    """Kernel-wide defaults for every operator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    extrude: ExtrudeOptions = Field(default_factory=ExtrudeOptions)
    extrude_edge: EdgeExtrudeOptions = Field(default_factory=EdgeExtrudeOptions)
    extrude_vertex: VertexExtrudeOptions = Field(default_factory=VertexExtrudeOptions)
    loop_cut: LoopCutOptions = Field(default_factory=LoopCutOptions)
    inset: InsetOptions = Field(default_factory=InsetOptions)
    bevel: BevelOptions = Field(default_factory=BevelOptions)
    bridge: BridgeOptions = Field(default_factory=BridgeOptions)
    smoothing: SmoothingOptions = Field(default_factory=SmoothingOptions)
    subdivision: SubdivisionOptions = Field(default_factory=SubdivisionOptions)
    merge: MergeOptions = Field(default_factory=MergeOptions)
    csg: CSGOptions = Field(default_factory=CSGOptions)
    validation: ValidationOptions = Field(default_factory=ValidationOptions)
    repair: RepairOptions = Field(default_factory=RepairOptions)
    history: HistoryOptions = Field(default_factory=HistoryOptions)


@dataclass
class ConfigManager:
    """
    Loads kernel configuration from a directory of YAML files.

    Layout::

        config/
          kernel.yaml          # defaults, keyed by operator section
          profiles/
            precise.yaml       # named overrides, same layout

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> csg = config.get_config().csg
        >>> fine = config.get_config("precise")
    """

    config_dir: Path
    _base: dict[str, Any] = field(default_factory=dict, init=False)
    _profiles: dict[str, dict[str, Any]] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load defaults and all profiles from disk."""
        kernel_file = self.config_dir / "kernel.yaml"
        self._base = self._read(kernel_file) if kernel_file.exists() else {}

        self._profiles = {}
        profiles_dir = self.config_dir / "profiles"
        if profiles_dir.exists():
            for config_file in sorted(profiles_dir.glob("*.yaml")):
                self._profiles[config_file.stem] = self._read(config_file)
        self._loaded = True

    def _read(self, config_file: Path) -> dict[str, Any]:
        try:
            with open(config_file) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse config: {config_file}",
                details={"error": str(e)},
            )
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping: {config_file}",
                details={"type": type(data).__name__},
            )
        # Validate eagerly so a bad file is reported with its own path
        try:
            KernelConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid kernel config: {config_file}",
                details={"error": str(e)},
            )
        return data

    def get_config(self, profile: str | None = None) -> KernelConfig:
        """
        Build the kernel configuration, optionally overlaid by a profile.

        Profile sections replace matching keys of the defaults section by
        section; the overlay happens here, once, never inside an operator.

        Raises:
            ConfigurationError: If the profile does not exist.
        """
        if not self._loaded:
            self.load()

        data = {section: dict(values) for section, values in self._base.items()}
        if profile is not None:
            if profile not in self._profiles:
                raise ConfigurationError(
                    f"Profile not found: {profile}",
                    details={"available": list(self._profiles.keys())},
                )
            for section, values in self._profiles[profile].items():
                data.setdefault(section, {}).update(values)

        try:
            return KernelConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration for profile: {profile}",
                details={"error": str(e)},
            )

    def list_profiles(self) -> list[str]:
        """List available profile names."""
        if not self._loaded:
            self.load()
        return list(self._profiles.keys())
