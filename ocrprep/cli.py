"""Batch CLI entry point for the OCR preprocessing tool."""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import argparse
import json
import logging
import sys

from .config import AppConfig, InputConfig, OutputConfig, PreprocessingConfig, load_config
from .preprocessing.errors import PreprocessingError
from .preprocessing.pipeline import PreprocessingPipeline

LOGGER = logging.getLogger(__name__)


def _iter_documents(input_path: Path) -> Iterable[Path]:
    if input_path.is_file():
        yield input_path
        return
    if not input_path.exists():
        raise FileNotFoundError(f"Input path not found: {input_path}")
    for path in sorted(p for p in input_path.rglob("*.png") if p.is_file()):
        yield path


def run_pipeline(config: AppConfig) -> List[Dict[str, object]]:
    """Preprocess every document under the input path; return one summary row each."""
    config.output.base_path.mkdir(parents=True, exist_ok=True)
    pipeline = PreprocessingPipeline(
        config.preprocessing,
        snapshot_dir=config.output.base_path / "intermediate",
    )

    summary_rows: List[Dict[str, object]] = []
    for document in _iter_documents(config.input.path):
        LOGGER.info("Processing document: %s", document)
        row: Dict[str, object] = {"file_name": document.name}
        try:
            result = pipeline.run(document.read_bytes(), name=document.stem)
        except PreprocessingError as exc:
            LOGGER.error("Preprocessing failed for %s: %s", document.name, exc)
            row.update({"ok": False, "error": type(exc).__name__, "message": str(exc)})
            summary_rows.append(row)
            continue

        target = config.output.base_path / f"{document.stem}_preprocessed.png"
        target.write_bytes(result.data)
        row.update({"ok": True, "output_path": str(target), **result.to_payload()})
        summary_rows.append(row)

    _write_summary_json(config.output.summary_json, summary_rows)
    return summary_rows


def _write_summary_json(path: Path, rows: List[Dict[str, object]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        LOGGER.warning("No documents processed; summary file will be empty")
    path.write_text(json.dumps(rows, indent=2), encoding="utf-8")
    LOGGER.info("Summary JSON written to %s", path)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _build_config(args: argparse.Namespace) -> AppConfig:
    if args.config is not None:
        LOGGER.info("Loading config from %s", args.config)
        config = load_config(args.config)
    else:
        config = AppConfig(
            input=InputConfig(path=Path("input")),
            output=OutputConfig(base_path=Path("output"), summary_json=Path("output/summary.json")),
            preprocessing=PreprocessingConfig(),
        )
    if args.input is not None:
        config.input = InputConfig(path=args.input)
    if args.output is not None:
        config.output = OutputConfig(base_path=args.output, summary_json=args.output / "summary.json")
    if args.recenter:
        config.preprocessing = replace(config.preprocessing, recenter=True)
    if args.save_intermediates:
        config.preprocessing = replace(config.preprocessing, save_intermediates=True)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Normalise digit-strip PNGs ahead of OCR")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--input", type=Path, default=None, help="PNG file or directory (overrides config)")
    parser.add_argument("--output", type=Path, default=None, help="Output directory (overrides config)")
    parser.add_argument("--recenter", action="store_true", help="Trim and re-pad columns around content")
    parser.add_argument(
        "--save-intermediates", action="store_true", help="Write a PNG after every pipeline stage"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)
    config = _build_config(args)
    rows = run_pipeline(config)
    failed = [row for row in rows if not row.get("ok")]
    if failed:
        LOGGER.warning("%s of %s documents failed", len(failed), len(rows))
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
