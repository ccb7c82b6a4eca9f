"""追跡セッション・解析セッションのテスト"""
import pytest
import numpy as np

from aupipe import PipelineConfig
from aupipe.core import to_frame, to_gray
from aupipe.core.models import LandmarkSet
from aupipe.detectors import TrackingSession, AnalysisSession

from conftest import FakeLandmarkDetector, AU_NUMBERS


@pytest.fixture
def frame(dummy_image):
    return to_frame(dummy_image)


@pytest.fixture
def gray(frame):
    return to_gray(frame)


class TestTrackingSession:
    """追跡セッションのテスト"""

    def test_full_detection_without_prior(self, frame, gray, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", detector=detector)

        landmarks, success = session.detect_or_track(frame, gray)
        assert success
        assert landmarks.success
        assert np.allclose(landmarks.points, dummy_landmarks)
        assert detector.calls == [None]
        assert session.is_tracking

    def test_tracks_around_prior(self, frame, gray, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", detector=detector)

        session.detect_or_track(frame, gray)
        session.detect_or_track(frame, gray)
        assert detector.calls[0] is None
        x, y, w, h = detector.calls[1]
        assert w > 0 and h > 0

    def test_smoothing(self, frame, gray, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", PipelineConfig(tracking_smoothing=0.5), detector=detector)

        session.detect_or_track(frame, gray)
        detector.landmarks = dummy_landmarks + 10.0
        landmarks, _ = session.detect_or_track(frame, gray)
        assert np.allclose(landmarks.points, dummy_landmarks + 5.0)

    def test_miss_without_prior(self, frame, gray):
        session = TrackingSession("unused", detector=FakeLandmarkDetector(None))

        landmarks, success = session.detect_or_track(frame, gray)
        assert not success
        assert not landmarks.success
        assert landmarks.points.shape == (68, 2)
        assert landmarks.is_degenerate

    def test_miss_returns_stale_prior(self, frame, gray, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", detector=detector)
        session.detect_or_track(frame, gray)

        detector.landmarks = None
        landmarks, success = session.detect_or_track(frame, gray)
        assert not success
        assert np.allclose(landmarks.points, dummy_landmarks)
        # 追跡失敗後は全体検出にフォールバックする
        assert detector.calls[-2] is not None
        assert detector.calls[-1] is None

    def test_reset(self, frame, gray, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", detector=detector)
        session.reset()  # 初回前でも安全

        session.detect_or_track(frame, gray)
        session.reset()
        assert not session.is_tracking
        session.detect_or_track(frame, gray)
        assert detector.calls == [None, None]

    def test_close_idempotent(self, dummy_landmarks):
        detector = FakeLandmarkDetector(dummy_landmarks)
        session = TrackingSession("unused", detector=detector)
        session.close()
        session.close()
        assert detector.closed == 1


class TestAnalysisSession:
    """解析セッションのテスト"""

    @pytest.fixture
    def session(self, models_dir):
        return AnalysisSession(models_dir)

    @pytest.fixture
    def face(self, dummy_landmarks):
        return LandmarkSet(points=dummy_landmarks, success=True, confidence=1.0)

    def test_au_names(self, session):
        assert session.au_names == [f"AU{n:02d}" for n in AU_NUMBERS]

    def test_accessors_before_ingest(self, session):
        assert session.get_aligned_face().size == 0
        assert session.get_descriptor().is_empty

    def test_finalize_without_ingest(self, session):
        result = session.finalize_predictions()
        assert set(result) == set(session.au_names)
        assert set(result.values()) == {0.0}

    def test_ingest(self, session, frame, face):
        session.ingest(frame, face, True, 0, True)
        assert session.get_aligned_face().shape == (112, 112, 3)
        descriptor = session.get_descriptor()
        assert descriptor.num_rows == 13
        assert not descriptor.is_empty

        result = session.finalize_predictions()
        assert list(result) == session.au_names
        assert all(np.isfinite(v) and 0.0 <= v <= 5.0 for v in result.values())

    def test_does_not_mutate_landmarks(self, session, frame, face, dummy_landmarks):
        session.ingest(frame, face, True, 0, True)
        assert np.array_equal(face.points, dummy_landmarks)

    def test_miss_gives_baseline(self, session, frame):
        session.ingest(frame, LandmarkSet.empty(), False, 0, True)
        result = session.finalize_predictions()
        assert set(result) == set(session.au_names)
        assert set(result.values()) == {0.0}

    def test_finalize_is_repeatable(self, session, frame, face):
        session.ingest(frame, face, True, 0, True)
        assert session.finalize_predictions() == session.finalize_predictions()

    def test_reset(self, session, frame, face):
        session.ingest(frame, face, True, 0, True)
        session.reset()
        assert session.frames_ingested == 0
        assert session.get_aligned_face().size == 0
        assert set(session.finalize_predictions().values()) == {0.0}

    def test_temporal_smoothing(self, models_dir, frame, face):
        session = AnalysisSession(models_dir, PipelineConfig(temporal_window=2))
        closed = LandmarkSet(points=face.points.copy(), success=True)
        closed.points[60:68, 1] = 300.0  # 唇を閉じる

        session.ingest(frame, closed, True, 0.0, False)
        assert session.finalize_predictions()["AU25"] == 0.0
        session.ingest(frame, face, True, 0.1, False)
        smoothed = session.finalize_predictions()

        single = AnalysisSession(models_dir)
        single.ingest(frame, face, True, 0, True)
        opened = single.finalize_predictions()["AU25"]

        assert opened > 0.0
        assert smoothed["AU25"] == pytest.approx(opened / 2)

    def test_miss_after_hits_in_sequence(self, models_dir, frame, face):
        """動画モードでも非検出フレームは過去の検出結果で埋めない"""
        session = AnalysisSession(models_dir, PipelineConfig(temporal_window=3))
        session.ingest(frame, face, True, 0.0, False)
        session.ingest(frame, face, True, 0.1, False)
        assert any(v > 0.0 for v in session.finalize_predictions().values())

        session.ingest(frame, LandmarkSet.empty(), False, 0.2, False)
        assert set(session.finalize_predictions().values()) == {0.0}

    def test_timestamp_must_be_monotonic(self, session, frame, face):
        session.ingest(frame, face, True, 1.0, False)
        with pytest.raises(ValueError):
            session.ingest(frame, face, True, 0.5, False)
