from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import numpy as np

from .models import AUResult, FeatureDescriptor, Frame, GrayFrame, LandmarkSet


class ILandmarkDetector(ABC):
    """ランドマーク検出器のインターフェース"""

    @abstractmethod
    def detect_landmarks(self, image: np.ndarray, gray: Optional[np.ndarray] = None,
                         face_rect: Optional[Tuple[int, int, int, int]] = None) -> Optional[np.ndarray]:
        """68点ランドマークを検出"""
        pass

    def close(self) -> None:
        """検出器のリソースを解放"""
        pass


class IAUDetectionStrategy(ABC):
    """AU検出戦略のインターフェース（Strategy Pattern）"""

    @property
    @abstractmethod
    def au_number(self) -> int:
        """対象のAU番号"""
        pass

    @abstractmethod
    def detect(self, landmarks: np.ndarray, distances: Dict[str, float],
               angles: Dict[str, float], eye_dist: float) -> Tuple[float, float]:
        """AU検出を実行。(スコア, 非対称度)を返す"""
        pass


class ITrackingSession(ABC):
    """ランドマーク追跡セッションのインターフェース"""

    @abstractmethod
    def detect_or_track(self, frame: Frame, gray_frame: GrayFrame) -> Tuple[LandmarkSet, bool]:
        """前フレームの状態があれば追跡、なければ全体検出"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """追跡状態を初期化（いつ呼んでも安全）"""
        pass

    def close(self) -> None:
        pass


class IAnalysisSession(ABC):
    """顔外観・AU解析セッションのインターフェース"""

    @property
    @abstractmethod
    def au_names(self) -> List[str]:
        """出力するAU名（固定順）"""
        pass

    @abstractmethod
    def ingest(self, frame: Frame, landmarks: LandmarkSet, success: bool,
               timestamp: float, is_static_image: bool) -> None:
        """1フレーム分の外観を蓄積"""
        pass

    @abstractmethod
    def get_aligned_face(self) -> np.ndarray:
        """最新の整列済み顔画像"""
        pass

    @abstractmethod
    def get_descriptor(self) -> FeatureDescriptor:
        """最新の外観特徴量"""
        pass

    @abstractmethod
    def finalize_predictions(self) -> AUResult:
        """蓄積状態からAU予測を生成（状態はリセットしない）"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """蓄積状態を初期化"""
        pass

    def close(self) -> None:
        pass
