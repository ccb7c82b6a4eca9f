from .landmark_detector import (
    LandmarkDetectorFactory,
    MediaPipeLandmarkDetector,
    DlibLandmarkDetector,
    BaseLandmarkDetector
)
from .face_aligner import FaceAligner, FaceAlignment
from .feature_extractor import FeatureExtractor, HOGExtractor
from .au_detector import AUDetector, load_au_models
from .tracking_session import TrackingSession
from .analysis_session import AnalysisSession, TemporalFilter

__all__ = [
    'LandmarkDetectorFactory', 'MediaPipeLandmarkDetector', 'DlibLandmarkDetector',
    'BaseLandmarkDetector', 'FaceAligner', 'FaceAlignment',
    'FeatureExtractor', 'HOGExtractor', 'AUDetector', 'load_au_models',
    'TrackingSession', 'AnalysisSession', 'TemporalFilter',
]
