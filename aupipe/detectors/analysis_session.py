"""
顔外観・AU解析セッション
整列・HOG特徴量・AU強度をフレームごとに蓄積する
"""
import logging
from collections import deque
from pathlib import Path
from typing import Deque, Dict, List, Optional, Union

import numpy as np

from ..core.interfaces import IAnalysisSession
from ..core.models import AUResult, FeatureDescriptor, Frame, FramePrediction, LandmarkSet
from ..config import PipelineConfig
from .au_detector import AUDetector
from .face_aligner import FaceAligner
from .feature_extractor import FeatureExtractor, HOGExtractor

logger = logging.getLogger(__name__)


class TemporalFilter:
    """時系列フィルタ（動画モード用）"""

    def __init__(self, window_size: int = 3):
        self._window_size = max(1, window_size)

    def apply(self, history: List[FramePrediction]) -> Dict[str, float]:
        """直近の検出成功フレームで平均化（最新フレームが非検出なら全AU 0.0）"""
        latest = history[-1]
        if not latest.success:
            return dict(latest.scores)
        window = [h for h in history[-self._window_size:] if h.success]
        if len(window) < 2:
            return dict(latest.scores)

        return {name: float(np.mean([h.scores[name] for h in window])) for name in latest.scores}


class AnalysisSession(IAnalysisSession):
    """AU出力モードの解析セッション"""

    def __init__(self, models_path: Union[str, Path], config: Optional[PipelineConfig] = None,
                 au_detector: Optional[AUDetector] = None):
        self._config = config or PipelineConfig()
        # AUモデルが0件なら NoModelsLoadedError
        self._au_detector = au_detector or AUDetector.from_models_path(models_path)

        self._aligner = FaceAligner(output_size=self._config.aligned_face_size)
        self._extractor = FeatureExtractor(self._aligner)
        self._hog = HOGExtractor(self._config.aligned_face_size, self._config.hog_cell_size)
        self._temporal_filter = TemporalFilter(self._config.temporal_window)

        self._history: Deque[FramePrediction] = deque(maxlen=max(1, self._config.temporal_window))
        self._aligned_face: Optional[np.ndarray] = None
        self._descriptor: Optional[FeatureDescriptor] = None
        self._is_static = True

    @property
    def au_names(self) -> List[str]:
        return self._au_detector.class_names

    @property
    def frames_ingested(self) -> int:
        return len(self._history)

    def ingest(self, frame: Frame, landmarks: LandmarkSet, success: bool,
               timestamp: float, is_static_image: bool) -> None:
        if self._history and timestamp < self._history[-1].timestamp:
            raise ValueError(f"timestamp は単調増加である必要があります: {timestamp} < {self._history[-1].timestamp}")

        self._aligned_face, _ = self._aligner.align_image(frame.pixels, landmarks.points)
        self._descriptor = self._hog.compute(self._aligned_face)

        if success:
            distances = self._extractor.compute_distances(landmarks.points)
            angles = self._extractor.compute_angles(landmarks.points)
            scores = self._au_detector.predict(landmarks.points, distances, angles)
        else:
            scores = self._au_detector.zeros()

        self._history.append(FramePrediction(timestamp=timestamp, success=success, scores=scores))
        self._is_static = is_static_image
        logger.debug("ingested frame t=%s success=%s", timestamp, success)

    def get_aligned_face(self) -> np.ndarray:
        if self._aligned_face is None:
            return np.zeros((0, 0, 3), dtype=np.uint8)
        return self._aligned_face

    def get_descriptor(self) -> FeatureDescriptor:
        if self._descriptor is None:
            return FeatureDescriptor()
        return self._descriptor

    def finalize_predictions(self) -> AUResult:
        """
        蓄積済みフレームの後処理結果（最新フレームの値）を返す

        状態はリセットしないため、ingest を挟まずに繰り返し呼ぶと同じ値が返る。
        一度も ingest されていなければ全AUが 0.0。
        """
        if not self._history:
            return self._au_detector.zeros()

        history = list(self._history)
        # 全フレームのタイムスタンプが同一（静止画扱い）なら平滑化しない
        if self._is_static or history[0].timestamp == history[-1].timestamp:
            return dict(history[-1].scores)
        return self._temporal_filter.apply(history)

    def reset(self) -> None:
        self._history.clear()
        self._aligned_face = None
        self._descriptor = None
        self._is_static = True

    def close(self) -> None:
        self.reset()
