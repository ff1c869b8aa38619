"""Image normalisation ahead of digit OCR."""

from .preprocessing.pipeline import PreprocessingPipeline, PreprocessingResult, preprocess_image

__all__ = ["PreprocessingPipeline", "PreprocessingResult", "preprocess_image"]
