"""
ランドマーク追跡セッション
前フレームのランドマークがあれば周辺領域で追跡し、なければ全体検出する
"""
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from ..core.interfaces import ILandmarkDetector, ITrackingSession
from ..core.models import Frame, GrayFrame, LandmarkSet
from ..config import PipelineConfig
from .landmark_detector import LandmarkDetectorFactory

logger = logging.getLogger(__name__)


class TrackingSession(ITrackingSession):
    """検出/追跡の状態を保持するセッション"""

    def __init__(self, models_path: Union[str, Path], config: Optional[PipelineConfig] = None,
                 detector: Optional[ILandmarkDetector] = None):
        self._config = config or PipelineConfig()
        self._detector = detector or LandmarkDetectorFactory.create(models_path, self._config)
        self._prior: Optional[np.ndarray] = None

    @property
    def is_tracking(self) -> bool:
        return self._prior is not None

    def detect_or_track(self, frame: Frame, gray_frame: GrayFrame) -> Tuple[LandmarkSet, bool]:
        points = None
        if self._prior is not None:
            points = self._detector.detect_landmarks(frame.pixels, gray_frame.pixels,
                                                     face_rect=self._search_region(frame))
            if points is None:
                logger.debug("tracking lost, falling back to full detection")

        if points is None:
            points = self._detector.detect_landmarks(frame.pixels, gray_frame.pixels)

        if points is None:
            # 検出失敗は品質シグナルとして返す（前フレームの推定値を流用）
            stale = self._prior.copy() if self._prior is not None else LandmarkSet.empty().points
            return LandmarkSet(points=stale, success=False, confidence=0.0), False

        if self._prior is not None and self._config.tracking_smoothing > 0:
            alpha = self._config.tracking_smoothing
            points = alpha * self._prior + (1 - alpha) * points

        self._prior = points.copy()
        return LandmarkSet(points=points, success=True, confidence=1.0), True

    def _search_region(self, frame: Frame) -> Tuple[int, int, int, int]:
        """前フレームの顔矩形に余白を付けた探索範囲"""
        x, y, w, h = LandmarkSet(points=self._prior).bounding_box()
        pad_x = int(w * self._config.tracking_roi_padding)
        pad_y = int(h * self._config.tracking_roi_padding)
        x0, y0 = max(0, x - pad_x), max(0, y - pad_y)
        x1 = min(frame.width, x + w + pad_x)
        y1 = min(frame.height, y + h + pad_y)
        return x0, y0, max(0, x1 - x0), max(0, y1 - y0)

    def reset(self) -> None:
        self._prior = None

    def close(self) -> None:
        if self._detector is not None:
            self._detector.close()
            self._detector = None
        self._prior = None
