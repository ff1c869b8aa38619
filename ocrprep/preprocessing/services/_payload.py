"""Shared payload handling for the standalone step runners."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict


@dataclass(slots=True)
class StepPayload:
    image_path: Path
    output_dir: Path
    params: Dict[str, Any]

    def output_path(self, step: str) -> Path:
        return self.output_dir / f"{self.image_path.stem}__{step}.png"


def parse_payload(payload: Dict[str, object]) -> StepPayload:
    image_path_raw = payload.get("image_path")
    if not image_path_raw:
        raise ValueError("payload must include 'image_path'")
    params = payload.get("params") or {}
    if not isinstance(params, dict):
        raise TypeError("payload 'params' must be a mapping")
    image_path = Path(str(image_path_raw))
    output_dir = Path(str(payload.get("output_dir") or image_path.parent))
    output_dir.mkdir(parents=True, exist_ok=True)
    return StepPayload(image_path=image_path, output_dir=output_dir, params=params)
