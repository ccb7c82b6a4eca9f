from .au_definitions import AU_DEFINITIONS, AU_BY_KEY
from .settings import (
    PipelineConfig,
    MEDIAPIPE_MODEL_FILENAME,
    DLIB_MODEL_FILENAME,
    AU_PREDICTORS_DIRNAME,
    MODELS_PATH_ENV,
    landmark_model_path,
    default_models_path,
)

__all__ = [
    "AU_DEFINITIONS", "AU_BY_KEY", "PipelineConfig",
    "MEDIAPIPE_MODEL_FILENAME", "DLIB_MODEL_FILENAME", "AU_PREDICTORS_DIRNAME",
    "MODELS_PATH_ENV", "landmark_model_path", "default_models_path",
]
