"""実モデルを使った結合テスト（$AUPIPE_MODELS_PATH が必要）"""
import os
from pathlib import Path

import pytest
import numpy as np

from aupipe import create_pipeline, ModelLoadError
from aupipe.config import MODELS_PATH_ENV, MEDIAPIPE_MODEL_FILENAME


@pytest.fixture(scope="module")
def pipeline():
    models_path = os.environ.get(MODELS_PATH_ENV)
    if not models_path or not (Path(models_path) / MEDIAPIPE_MODEL_FILENAME).exists():
        pytest.skip(f"{MODELS_PATH_ENV} に {MEDIAPIPE_MODEL_FILENAME} がありません")
    try:
        p = create_pipeline(models_path)
    except ModelLoadError as e:
        pytest.skip(f"パイプラインを初期化できません: {e}")
    yield p
    p.close()


class TestRealModels:
    """実際のランドマーク検出器でのテスト"""

    def test_uniform_gray_image(self, pipeline):
        result = pipeline.infer(np.full((100, 100, 3), 128, dtype=np.uint8))
        assert set(result) == set(pipeline.au_names)
        assert set(result.values()) == {0.0}

    def test_repeated_calls(self, pipeline):
        image = np.random.default_rng(0).integers(0, 256, (240, 320, 3), dtype=np.uint8)
        first = pipeline.infer(image)
        second = pipeline.infer(image)
        assert set(first) == set(second)
        assert all(np.isfinite(v) for v in second.values())
