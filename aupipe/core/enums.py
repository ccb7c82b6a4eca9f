from enum import Enum, auto


class PipelineState(Enum):
    """オーケストレータの状態"""
    IDLE = auto()           # フレーム未投入
    FRAME_STAGED = auto()   # Frame / GrayFrame 計算済み、推論前
    INFERRED = auto()       # AUResult 取得可能


class DetectorType(Enum):
    """ランドマーク検出器の種類"""
    DLIB = auto()
    MEDIAPIPE = auto()
