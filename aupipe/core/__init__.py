"""コアモジュール"""
from .enums import PipelineState, DetectorType
from .errors import (
    AUPipelineError,
    InvalidShapeError,
    EmptyFrameError,
    ModelLoadError,
    NoModelsLoadedError,
    PipelineClosedError,
)
from .models import (
    AUResult,
    ActionUnitDefinition,
    AUModel,
    Frame,
    GrayFrame,
    LandmarkSet,
    FeatureDescriptor,
    FramePrediction,
)
from .interfaces import (
    ILandmarkDetector,
    IAUDetectionStrategy,
    ITrackingSession,
    IAnalysisSession,
)
from .image import to_frame, to_gray

__all__ = [
    "PipelineState", "DetectorType",
    "AUPipelineError", "InvalidShapeError", "EmptyFrameError",
    "ModelLoadError", "NoModelsLoadedError", "PipelineClosedError",
    "AUResult", "ActionUnitDefinition", "AUModel",
    "Frame", "GrayFrame", "LandmarkSet", "FeatureDescriptor", "FramePrediction",
    "ILandmarkDetector", "IAUDetectionStrategy", "ITrackingSession", "IAnalysisSession",
    "to_frame", "to_gray",
]
