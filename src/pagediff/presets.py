"""Comparison parameters, presets and environment overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Mapping, Optional

DEFAULT_DPI = 300
DEFAULT_SENSITIVITY = 0.12
DEFAULT_TOLERANCE = 10
DEFAULT_OUTPUT_DIR = "output"


@dataclass(frozen=True)
class DiffParams:
    """Parameters driving rendering, cropping and diff annotation."""

    dpi: float = DEFAULT_DPI
    sensitivity: float = DEFAULT_SENSITIVITY
    background_tolerance: int = DEFAULT_TOLERANCE
    output_dir: str = DEFAULT_OUTPUT_DIR
    min_box_area_px: int = 16
    merge_gap_px: int = 8

    def to_dict(self) -> Dict[str, object]:
        return {
            "dpi": self.dpi,
            "sensitivity": self.sensitivity,
            "background_tolerance": self.background_tolerance,
            "output_dir": self.output_dir,
            "min_box_area_px": self.min_box_area_px,
            "merge_gap_px": self.merge_gap_px,
        }

    def copy(self, **overrides: object) -> "DiffParams":
        return replace(self, **overrides)

    def validate(self) -> "DiffParams":
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got {self.dpi}")
        if not 0.0 <= self.sensitivity <= 1.0:
            raise ValueError(f"sensitivity must be within 0.0-1.0, got {self.sensitivity}")
        if not 0 <= self.background_tolerance <= 255:
            raise ValueError(
                f"background tolerance must be within 0-255, got {self.background_tolerance}"
            )
        if self.min_box_area_px < 0 or self.merge_gap_px < 0:
            raise ValueError("box filtering parameters must not be negative")
        return self


@dataclass(frozen=True)
class Preset:
    """Named bundle of parameters."""

    name: str
    description: str
    params: DiffParams

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "params": self.params.to_dict(),
        }


PRESETS: Mapping[str, Preset] = {
    "strict": Preset(
        name="strict",
        description="Only pronounced changes are highlighted; small noise is ignored.",
        params=DiffParams(sensitivity=0.2, min_box_area_px=64, merge_gap_px=6),
    ),
    "balanced": Preset(
        name="balanced",
        description="Default mix of sensitivity and noise rejection.",
        params=DiffParams(),
    ),
    "loose": Preset(
        name="loose",
        description="Maximum sensitivity; faint and tiny changes are highlighted.",
        params=DiffParams(sensitivity=0.05, min_box_area_px=4, merge_gap_px=12),
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()


# environment variable -> (field name, parser)
ENV_OVERRIDES: Mapping[str, tuple[str, Callable[[str], object]]] = {
    "PAGEDIFF_DPI": ("dpi", float),
    "PAGEDIFF_SENSITIVITY": ("sensitivity", float),
    "PAGEDIFF_TOLERANCE": ("background_tolerance", int),
    "PAGEDIFF_OUTPUT_DIR": ("output_dir", str),
}


def params_from_env(
    base: Optional[DiffParams] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DiffParams:
    """Return ``base`` with any ``PAGEDIFF_*`` variables from ``environ`` applied."""

    params = base or DiffParams()
    env = os.environ if environ is None else environ
    overrides: Dict[str, object] = {}
    for variable, (field_name, parse) in ENV_OVERRIDES.items():
        raw = env.get(variable)
        if raw is None or not raw.strip():
            continue
        try:
            overrides[field_name] = parse(raw.strip())
        except ValueError as exc:
            raise ValueError(f"Invalid value for {variable}: {raw!r}") from exc
    return params.copy(**overrides) if overrides else params
