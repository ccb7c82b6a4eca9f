"""
1フレームAU推論パイプライン

画像投入 -> ランドマーク検出/追跡 -> 整列・特徴量 -> AU強度 の順に実行し、
結果取得時に両セッションをリセットする（呼び出しごとに独立した推論として扱う）。
"""
import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .core.enums import PipelineState
from .core.errors import EmptyFrameError, ModelLoadError, PipelineClosedError
from .core.image import to_frame, to_gray
from .core.interfaces import IAnalysisSession, ITrackingSession
from .core.models import AUResult, FeatureDescriptor, Frame, GrayFrame
from .config import PipelineConfig
from .detectors import AnalysisSession, TrackingSession

logger = logging.getLogger(__name__)


class Pipeline:
    """
    追跡セッションと解析セッションを所有するオーケストレータ

    状態遷移: IDLE -> FRAME_STAGED -> INFERRED -> IDLE
    公開メソッドはすべて同一ロック下で実行されるため、同一インスタンスへの
    同時呼び出しは直列化される。
    """

    def __init__(self, tracker: ITrackingSession, analyzer: IAnalysisSession):
        self._tracker = tracker
        self._analyzer = analyzer
        self._lock = threading.RLock()
        self._closed = False

        self._state = PipelineState.IDLE
        self._frame: Optional[Frame] = None
        self._gray: Optional[GrayFrame] = None
        self._result: AUResult = {}
        self._aligned_face: Optional[np.ndarray] = None
        self._descriptor: Optional[FeatureDescriptor] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def au_names(self) -> List[str]:
        """出力されるAU名（構築時に固定）"""
        self._check_open()
        return list(self._analyzer.au_names)

    @property
    def last_aligned_face(self) -> Optional[np.ndarray]:
        """現在のリクエストで計算された整列済み顔画像（take_result で破棄）"""
        return self._aligned_face

    @property
    def last_descriptor(self) -> Optional[FeatureDescriptor]:
        """現在のリクエストで計算された HOG 特徴量（take_result で破棄）"""
        return self._descriptor

    def _check_open(self) -> None:
        if self._closed:
            raise PipelineClosedError("close() 済みのパイプラインは使用できません")

    def stage_frame(self, raw_buffer) -> None:
        """
        フレームを投入する

        形状エラー (InvalidShapeError) の場合は状態を変更せずに送出する。
        サイズ0のフレームは推論対象にならず、IDLE に戻る。
        """
        with self._lock:
            self._check_open()
            frame = to_frame(raw_buffer)

            try:
                gray = to_gray(frame)
            except EmptyFrameError:
                logger.warning("empty frame (%dx%d) staged, inference will be skipped",
                               frame.height, frame.width)
                self._clear_request()
                self._state = PipelineState.IDLE
                return

            self._frame, self._gray = frame, gray
            self._result = {}
            self._state = PipelineState.FRAME_STAGED
            logger.debug("frame staged: %dx%d", frame.width, frame.height)

    def run_inference(self) -> None:
        """投入済みフレームで推論する。フレームがなければ何もしない"""
        with self._lock:
            self._check_open()
            if self._state != PipelineState.FRAME_STAGED or self._frame is None:
                logger.debug("no frame staged, skipping inference")
                return

            landmarks, success = self._tracker.detect_or_track(self._frame, self._gray)
            if not success:
                logger.debug("no face detected, AU values fall back to baseline")

            self._analyzer.ingest(self._frame, landmarks, success, 0, True)
            # last_aligned_face / last_descriptor として take_result まで参照できるよう保持する
            self._aligned_face = self._analyzer.get_aligned_face()
            self._descriptor = self._analyzer.get_descriptor()

            self._result = dict(self._analyzer.finalize_predictions())
            self._frame, self._gray = None, None
            self._state = PipelineState.INFERRED

    def take_result(self) -> AUResult:
        """
        推論結果を返し、両セッションをリセットして IDLE に戻る

        推論前 (IDLE / FRAME_STAGED) に呼ばれた場合は空の辞書を返す。
        """
        with self._lock:
            self._check_open()
            result = self._result if self._state == PipelineState.INFERRED else {}

            self._analyzer.reset()
            self._tracker.reset()
            self._clear_request()
            self._state = PipelineState.IDLE
            return result

    def infer(self, raw_buffer) -> AUResult:
        """stage_frame + run_inference + take_result"""
        with self._lock:
            self.stage_frame(raw_buffer)
            self.run_inference()
            return self.take_result()

    def _clear_request(self) -> None:
        self._frame = None
        self._gray = None
        self._result = {}
        self._aligned_face = None
        self._descriptor = None

    def close(self) -> None:
        """両セッションを解放する（2回目以降は何もしない）"""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._clear_request()
            self._state = PipelineState.IDLE
            try:
                self._tracker.close()
            finally:
                self._analyzer.close()

    def __enter__(self) -> "Pipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_pipeline(models_path: Union[str, Path], config: Optional[PipelineConfig] = None) -> Pipeline:
    """
    モデルを読み込んでパイプラインを構築する

    Raises:
        ModelLoadError: モデルディレクトリ・ランドマーク検出モデルが読み込めない
        NoModelsLoadedError: AUモデルが1つもない
    """
    models_path = Path(models_path).expanduser()
    if not models_path.is_dir():
        raise ModelLoadError(f"モデルディレクトリが見つかりません: {models_path}")

    config = config or PipelineConfig()
    tracker = TrackingSession(models_path, config)
    try:
        analyzer = AnalysisSession(models_path, config)
    except BaseException:
        tracker.close()
        raise

    logger.info("pipeline ready: %d AU classes", len(analyzer.au_names))
    return Pipeline(tracker, analyzer)


class AUs:
    """
    旧バインディング互換API (add_frame / predict_aus / get_last_predictions / predict)
    """

    def __init__(self, models_path: Union[str, Path], config: Optional[PipelineConfig] = None):
        self._pipeline = create_pipeline(models_path, config)

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    def add_frame(self, image) -> None:
        self._pipeline.stage_frame(image)

    def predict_aus(self) -> None:
        self._pipeline.run_inference()

    def get_last_predictions(self) -> AUResult:
        return self._pipeline.take_result()

    def predict(self, image) -> AUResult:
        return self._pipeline.infer(image)

    def close(self) -> None:
        self._pipeline.close()
