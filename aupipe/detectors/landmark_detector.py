"""
68点ランドマーク検出器（MediaPipe Tasks API / dlib）
モデルファイルは models_path から読み込み、見つからなければ ModelLoadError
"""
import logging
from abc import ABC
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import cv2

from ..core.interfaces import ILandmarkDetector
from ..core.enums import DetectorType
from ..core.errors import ModelLoadError
from ..core.models import NUM_LANDMARKS
from ..config import PipelineConfig, landmark_model_path

logger = logging.getLogger(__name__)


class BaseLandmarkDetector(ILandmarkDetector, ABC):
    """ランドマーク検出器の基底クラス"""

    @staticmethod
    def get_mediapipe_to_68_mapping() -> List[int]:
        """
        MediaPipe Face Mesh (478点) から dlib形式 (68点) へのマッピング

        dlib 68点の順序:
        - 0-16: 顔の輪郭
        - 17-21: 右眉 / 22-26: 左眉
        - 27-30: 鼻筋 / 31-35: 鼻の下部
        - 36-41: 右目 / 42-47: 左目
        - 48-59: 外側の唇 / 60-67: 内側の唇
        """
        return [
            # 顔の輪郭 (0-16)
            162, 234, 93, 58, 172, 136, 149, 148, 152,
            377, 378, 365, 397, 288, 323, 454, 389,
            # 右眉 (17-21)
            71, 63, 105, 66, 107,
            # 左眉 (22-26)
            336, 296, 334, 293, 301,
            # 鼻筋 (27-30)
            168, 197, 5, 4,
            # 鼻の下部 (31-35)
            75, 97, 2, 326, 305,
            # 右目 (36-41)
            33, 160, 158, 133, 153, 144,
            # 左目 (42-47)
            362, 385, 387, 263, 373, 380,
            # 外側唇 (48-59)
            61, 39, 37, 0, 267, 269, 291, 405, 314, 17, 84, 181,
            # 内側唇 (60-67)
            78, 82, 13, 312, 308, 317, 14, 87,
        ]

    @staticmethod
    def _crop(image: np.ndarray, face_rect: Tuple[int, int, int, int]) -> Tuple[np.ndarray, Tuple[int, int]]:
        """矩形を画像内にクリップして切り出す。(切り出し画像, (x0, y0))"""
        h, w = image.shape[:2]
        x, y, rw, rh = face_rect
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(w, x + rw), min(h, y + rh)
        return image[y0:y1, x0:x1], (x0, y0)


class MediaPipeLandmarkDetector(BaseLandmarkDetector):
    """MediaPipe Tasks API (FaceLandmarker) による検出"""

    def __init__(self, model_path: Union[str, Path], min_confidence: float = 0.5):
        self._mapping = self.get_mediapipe_to_68_mapping()
        self._face_landmarker = None

        model_path = Path(model_path)
        if not model_path.is_file():
            raise ModelLoadError(f"ランドマーク検出モデルが見つかりません: {model_path}")

        try:
            import mediapipe as mp
            from mediapipe.tasks import python as mp_tasks
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise ModelLoadError(f"MediaPipeがインストールされていません: {e}") from e

        self._mp = mp
        try:
            options = vision.FaceLandmarkerOptions(
                base_options=mp_tasks.BaseOptions(model_asset_path=str(model_path)),
                running_mode=vision.RunningMode.IMAGE,
                num_faces=1,
                min_face_detection_confidence=min_confidence,
                min_face_presence_confidence=min_confidence,
                min_tracking_confidence=min_confidence,
                output_face_blendshapes=False,
                output_facial_transformation_matrixes=False,
            )
            self._face_landmarker = vision.FaceLandmarker.create_from_options(options)
        except Exception as e:
            raise ModelLoadError(f"ランドマーク検出モデルを読み込めません: {model_path}: {e}") from e

        logger.info("MediaPipe v%s FaceLandmarker loaded: %s",
                    getattr(mp, "__version__", "unknown"), model_path)

    def detect_landmarks(self, image: np.ndarray, gray: Optional[np.ndarray] = None,
                         face_rect: Optional[Tuple[int, int, int, int]] = None) -> Optional[np.ndarray]:
        offset = (0, 0)
        if face_rect is not None:
            image, offset = self._crop(image, face_rect)
            if image.size == 0:
                return None

        landmarks_list = self._get_raw_landmarks(image)
        if not landmarks_list:
            return None

        landmarks_68 = landmarks_list[0][self._mapping].astype(np.float64)
        landmarks_68 += np.array(offset, dtype=np.float64)
        return landmarks_68

    def _get_raw_landmarks(self, image: np.ndarray) -> List[np.ndarray]:
        """生のランドマーク（画素座標、顔ごとに (478, 2)）"""
        image_rgb = cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_BGR2RGB)
        h, w = image.shape[:2]

        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=image_rgb)
        result = self._face_landmarker.detect(mp_image)
        if not result.face_landmarks:
            return []

        return [np.array([(lm.x * w, lm.y * h) for lm in face], dtype=np.float64)
                for face in result.face_landmarks]

    def close(self) -> None:
        if self._face_landmarker is not None:
            self._face_landmarker.close()
            self._face_landmarker = None


class DlibLandmarkDetector(BaseLandmarkDetector):
    """dlibを使用したランドマーク検出器"""

    def __init__(self, predictor_path: Union[str, Path]):
        predictor_path = Path(predictor_path)
        if not predictor_path.is_file():
            raise ModelLoadError(f"ランドマーク検出モデルが見つかりません: {predictor_path}")

        try:
            import dlib
        except ImportError as e:
            raise ModelLoadError(f"dlibがインストールされていません: {e}") from e

        self._dlib = dlib
        try:
            self._detector = dlib.get_frontal_face_detector()
            self._predictor = dlib.shape_predictor(str(predictor_path))
        except RuntimeError as e:
            raise ModelLoadError(f"ランドマーク検出モデルを読み込めません: {predictor_path}: {e}") from e

        logger.info("dlib shape predictor loaded: %s", predictor_path)

    @staticmethod
    def _to_gray(image: np.ndarray, gray: Optional[np.ndarray]) -> np.ndarray:
        if gray is not None:
            return gray
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if image.ndim == 3 else image

    def detect_landmarks(self, image: np.ndarray, gray: Optional[np.ndarray] = None,
                         face_rect: Optional[Tuple[int, int, int, int]] = None) -> Optional[np.ndarray]:
        gray = self._to_gray(image, gray)

        if face_rect is None:
            faces = self._detector(gray, 1)
            if not faces:
                return None
            rect = faces[0]
        else:
            roi, (x0, y0) = self._crop(gray, face_rect)
            if roi.size == 0:
                return None
            faces = self._detector(roi, 0)
            if not faces:
                return None
            f = faces[0]
            rect = self._dlib.rectangle(f.left() + x0, f.top() + y0, f.right() + x0, f.bottom() + y0)

        shape = self._predictor(gray, rect)
        return np.array([[shape.part(i).x, shape.part(i).y] for i in range(NUM_LANDMARKS)],
                        dtype=np.float64)


class LandmarkDetectorFactory:
    """ランドマーク検出器のファクトリ"""

    @staticmethod
    def create(models_path: Union[str, Path],
               config: Optional[PipelineConfig] = None) -> ILandmarkDetector:
        config = config or PipelineConfig()
        model_path = landmark_model_path(models_path, config.detector_type)

        if config.detector_type == DetectorType.MEDIAPIPE:
            return MediaPipeLandmarkDetector(model_path, config.detection_confidence)
        elif config.detector_type == DetectorType.DLIB:
            return DlibLandmarkDetector(model_path)
        raise ValueError(f"未対応の検出器タイプ: {config.detector_type}")
