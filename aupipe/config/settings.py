"""
パイプライン設定
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..core.enums import DetectorType

# モデルディレクトリ内のファイル配置
MEDIAPIPE_MODEL_FILENAME = "face_landmarker.task"
DLIB_MODEL_FILENAME = "shape_predictor_68_face_landmarks.dat"
AU_PREDICTORS_DIRNAME = "AU_predictors"

# CLIのデフォルトモデルパス
MODELS_PATH_ENV = "AUPIPE_MODELS_PATH"


@dataclass
class PipelineConfig:
    """検出・追跡・解析の設定（OpenFace の静止画AUモードに相当する既定値）"""
    detector_type: DetectorType = DetectorType.MEDIAPIPE
    detection_confidence: float = 0.5

    # 追跡
    tracking_smoothing: float = 0.5     # 前フレームとの指数平滑化係数（0で無効）
    tracking_roi_padding: float = 0.25  # 前フレームの顔矩形に対する探索範囲の余白

    # 整列・特徴量
    aligned_face_size: int = 112
    hog_cell_size: int = 8

    # 時系列平滑化（動画モードのみ）
    temporal_window: int = 3


def landmark_model_path(models_path: Union[str, Path], detector_type: DetectorType) -> Path:
    """検出器の種類に対応するモデルファイルのパス"""
    filename = DLIB_MODEL_FILENAME if detector_type == DetectorType.DLIB else MEDIAPIPE_MODEL_FILENAME
    return Path(models_path) / filename


def default_models_path() -> Optional[str]:
    return os.environ.get(MODELS_PATH_ENV)
