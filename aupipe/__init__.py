"""
aupipe - 1フレーム顔 Action Unit (AU) 推論パイプライン

カラー画像1枚からランドマーク検出・顔の整列・外観特徴量抽出・AU強度推定を行い、
AU名 -> 強度 の辞書を返す。

Example:
    >>> from aupipe import create_pipeline
    >>> import cv2
    >>>
    >>> with create_pipeline("models") as pipeline:
    ...     aus = pipeline.infer(cv2.imread("face.jpg"))
    >>> print(aus["AU12"])
"""

__version__ = "0.1.0"

from .core import (
    PipelineState,
    DetectorType,
    AUPipelineError,
    InvalidShapeError,
    EmptyFrameError,
    ModelLoadError,
    NoModelsLoadedError,
    PipelineClosedError,
    AUResult,
    Frame,
    GrayFrame,
    LandmarkSet,
    FeatureDescriptor,
    to_frame,
    to_gray,
)
from .config import AU_DEFINITIONS, PipelineConfig
from .detectors import TrackingSession, AnalysisSession
from .pipeline import Pipeline, AUs, create_pipeline

__all__ = [
    # Version
    "__version__",
    # Main API
    "create_pipeline",
    "Pipeline",
    "AUs",
    "PipelineConfig",
    "PipelineState",
    "DetectorType",
    # Sessions
    "TrackingSession",
    "AnalysisSession",
    # Data models
    "AUResult",
    "Frame",
    "GrayFrame",
    "LandmarkSet",
    "FeatureDescriptor",
    "to_frame",
    "to_gray",
    # Errors
    "AUPipelineError",
    "InvalidShapeError",
    "EmptyFrameError",
    "ModelLoadError",
    "NoModelsLoadedError",
    "PipelineClosedError",
    # Config
    "AU_DEFINITIONS",
]
