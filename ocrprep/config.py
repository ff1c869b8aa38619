"""Configuration helpers for the OCR preprocessing tool."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import logging

import yaml

from .preprocessing.grid import NEAR_BLACK, WHITE, Color, ColorMatchPolicy, DistanceMetric

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class InputConfig:
    path: Path


@dataclass(slots=True)
class OutputConfig:
    base_path: Path
    summary_json: Path


@dataclass(slots=True)
class PreprocessingConfig:
    marker_color: Color = WHITE
    marker_tolerance: float = 10
    marker_metric: DistanceMetric = DistanceMetric.CHEBYSHEV
    background_color: Color = NEAR_BLACK
    background_tolerance: float = 10
    background_metric: DistanceMetric = DistanceMetric.CHEBYSHEV
    left_padding: int = 20
    box_padding_h: int = 30
    box_padding_v: int = 10
    recenter: bool = False
    isolate_color_enabled: bool = False
    isolate_color: Color = Color(191, 189, 199)
    isolate_tolerance: float = 0
    blacken_foreground: bool = False
    save_intermediates: bool = False

    def __post_init__(self) -> None:
        for name in ("left_padding", "box_padding_h", "box_padding_v"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("marker_tolerance", "background_tolerance", "isolate_tolerance"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

    @property
    def marker_policy(self) -> ColorMatchPolicy:
        return ColorMatchPolicy(self.marker_color, self.marker_tolerance, self.marker_metric)

    @property
    def background_policy(self) -> ColorMatchPolicy:
        return ColorMatchPolicy(self.background_color, self.background_tolerance, self.background_metric)

    @property
    def isolate_policy(self) -> ColorMatchPolicy:
        return ColorMatchPolicy(self.isolate_color, self.isolate_tolerance, DistanceMetric.CHEBYSHEV)


@dataclass(slots=True)
class AppConfig:
    input: InputConfig
    output: OutputConfig
    preprocessing: PreprocessingConfig = field(default_factory=PreprocessingConfig)


def _validate_dict(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    if key not in raw:
        raise KeyError(f"Missing '{key}' section in config.yaml")
    if not isinstance(raw[key], dict):
        raise TypeError(f"Section '{key}' must be a mapping")
    return raw[key]


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"'{key}' must be a boolean, got {value!r}")


def parse_preprocessing_config(raw: Dict[str, Any] | None) -> PreprocessingConfig:
    """Build a PreprocessingConfig from a plain mapping, applying defaults."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise TypeError("Section 'preprocessing' must be a mapping")
    defaults = PreprocessingConfig()
    return PreprocessingConfig(
        marker_color=Color.parse(raw.get("marker_color", defaults.marker_color)),
        marker_tolerance=float(raw.get("marker_tolerance", defaults.marker_tolerance)),
        marker_metric=DistanceMetric.parse(raw.get("marker_metric", defaults.marker_metric)),
        background_color=Color.parse(raw.get("background_color", defaults.background_color)),
        background_tolerance=float(raw.get("background_tolerance", defaults.background_tolerance)),
        background_metric=DistanceMetric.parse(raw.get("background_metric", defaults.background_metric)),
        left_padding=int(raw.get("left_padding", defaults.left_padding)),
        box_padding_h=int(raw.get("box_padding_h", defaults.box_padding_h)),
        box_padding_v=int(raw.get("box_padding_v", defaults.box_padding_v)),
        recenter=_parse_bool(raw.get("recenter", defaults.recenter), "recenter"),
        isolate_color_enabled=_parse_bool(raw.get("isolate_color_enabled", defaults.isolate_color_enabled), "isolate_color_enabled"),
        isolate_color=Color.parse(raw.get("isolate_color", defaults.isolate_color)),
        isolate_tolerance=float(raw.get("isolate_tolerance", defaults.isolate_tolerance)),
        blacken_foreground=_parse_bool(raw.get("blacken_foreground", defaults.blacken_foreground), "blacken_foreground"),
        save_intermediates=_parse_bool(raw.get("save_intermediates", defaults.save_intermediates), "save_intermediates"),
    )


def load_config(path: Path) -> AppConfig:
    """Load and validate configuration from the YAML file."""
    raw_config = _load_yaml_file(path)

    input_cfg = _validate_dict(raw_config, "input")
    output_cfg = _validate_dict(raw_config, "output")

    base_path = Path(output_cfg.get("path", "output"))
    config = AppConfig(
        input=InputConfig(path=Path(input_cfg.get("path", "input"))),
        output=OutputConfig(
            base_path=base_path,
            summary_json=Path(output_cfg.get("summary", base_path / "summary.json")),
        ),
        preprocessing=parse_preprocessing_config(raw_config.get("preprocessing")),
    )

    LOGGER.debug("Loaded configuration: %s", config)
    return config


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    LOGGER.debug("Using PyYAML to parse %s", path)
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        raise TypeError(f"Top level of {path} must be a mapping")
    return loaded
