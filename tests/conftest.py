"""pytest共通設定とフィクスチャ"""
import json

import pytest
import numpy as np

from aupipe.core.interfaces import ILandmarkDetector, ITrackingSession, IAnalysisSession
from aupipe.core.models import FeatureDescriptor, LandmarkSet
from aupipe.config import AU_PREDICTORS_DIRNAME

AU_NUMBERS = [1, 2, 4, 5, 6, 7, 9, 10, 12, 14, 15, 17, 20, 23, 25, 26, 45]


def make_landmarks() -> np.ndarray:
    """基本的な顔の形状を模した68点ランドマーク"""
    landmarks = np.zeros((68, 2), dtype=np.float64)

    # 顔の輪郭 (0-16)
    for i in range(17):
        angle = np.pi * (i / 16)
        landmarks[i] = [320 + 100 * np.cos(angle), 240 + 130 * np.sin(angle)]

    # 右眉 (17-21)
    for i in range(5):
        landmarks[17 + i] = [250 + i * 15, 180]

    # 左眉 (22-26)
    for i in range(5):
        landmarks[22 + i] = [340 + i * 15, 180]

    # 鼻 (27-35)
    for i in range(9):
        landmarks[27 + i] = [320, 200 + i * 10]

    # 右目 (36-41)
    for i in range(6):
        angle = 2 * np.pi * i / 6
        landmarks[36 + i] = [280 + 15 * np.cos(angle), 200 + 8 * np.sin(angle)]

    # 左目 (42-47)
    for i in range(6):
        angle = 2 * np.pi * i / 6
        landmarks[42 + i] = [360 + 15 * np.cos(angle), 200 + 8 * np.sin(angle)]

    # 外側唇 (48-59)
    for i in range(12):
        angle = 2 * np.pi * i / 12
        landmarks[48 + i] = [320 + 40 * np.cos(angle), 300 + 15 * np.sin(angle)]

    # 内側唇 (60-67)
    for i in range(8):
        angle = 2 * np.pi * i / 8
        landmarks[60 + i] = [320 + 25 * np.cos(angle), 300 + 8 * np.sin(angle)]

    return landmarks


class FakeLandmarkDetector(ILandmarkDetector):
    """指定したランドマークを返す検出器（None なら検出失敗）"""

    def __init__(self, landmarks=None):
        self.landmarks = landmarks
        self.calls = []
        self.closed = 0

    def detect_landmarks(self, image, gray=None, face_rect=None):
        self.calls.append(face_rect)
        return None if self.landmarks is None else self.landmarks.copy()

    def close(self):
        self.closed += 1


class FakeTrackingSession(ITrackingSession):
    """呼び出し順を記録する追跡セッション"""

    def __init__(self, log, success=True):
        self.log = log
        self.success = success
        self.closed = 0

    def detect_or_track(self, frame, gray_frame):
        self.log.append("detect_or_track")
        return LandmarkSet(points=make_landmarks(), success=self.success), self.success

    def reset(self):
        self.log.append("tracker.reset")

    def close(self):
        self.closed += 1


class FakeAnalysisSession(IAnalysisSession):
    """呼び出し順を記録する解析セッション。ingest ごとに値が変わる"""

    NAMES = ["AU01", "AU12", "AU25"]

    def __init__(self, log):
        self.log = log
        self.ingested = []
        self.closed = 0

    @property
    def au_names(self):
        return list(self.NAMES)

    def ingest(self, frame, landmarks, success, timestamp, is_static_image):
        self.log.append("ingest")
        self.ingested.append((frame, landmarks, success, timestamp, is_static_image))

    def get_aligned_face(self):
        self.log.append("get_aligned_face")
        return np.zeros((112, 112, 3), dtype=np.uint8)

    def get_descriptor(self):
        self.log.append("get_descriptor")
        return FeatureDescriptor(values=np.ones((1, 4)), num_rows=2, num_cols=2)

    def finalize_predictions(self):
        self.log.append("finalize_predictions")
        if not self.ingested:
            return {name: 0.0 for name in self.NAMES}
        base = float(len(self.ingested)) if self.ingested[-1][2] else 0.0
        return {name: base for name in self.NAMES}

    def reset(self):
        self.log.append("analyzer.reset")
        self.ingested.clear()

    def close(self):
        self.closed += 1


def write_au_models(directory, au_numbers=AU_NUMBERS):
    """AU_predictors/*.json を作成"""
    predictors = directory / AU_PREDICTORS_DIRNAME
    predictors.mkdir(parents=True, exist_ok=True)
    for au in au_numbers:
        (predictors / f"AU{au:02d}.json").write_text(json.dumps({"au": f"AU{au:02d}"}), encoding="utf-8")
    return directory


@pytest.fixture
def dummy_image():
    """ダミー画像（黒画像）"""
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def gray_image():
    """一様な灰色画像（顔なし）"""
    return np.full((100, 100, 3), 128, dtype=np.uint8)


@pytest.fixture
def dummy_landmarks():
    return make_landmarks()


@pytest.fixture
def models_dir(tmp_path):
    """全AUモデルを含むモデルディレクトリ"""
    return write_au_models(tmp_path)


@pytest.fixture
def empty_models_dir(tmp_path):
    """AUモデルを含まないモデルディレクトリ"""
    (tmp_path / AU_PREDICTORS_DIRNAME).mkdir()
    return tmp_path


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def fake_tracker(call_log):
    return FakeTrackingSession(call_log)


@pytest.fixture
def fake_analyzer(call_log):
    return FakeAnalysisSession(call_log)
