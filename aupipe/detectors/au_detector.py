"""
AUモデルの読み込みと強度推定
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Union

import numpy as np

from ..core.interfaces import IAUDetectionStrategy
from ..core.models import AUModel
from ..core.errors import ModelLoadError, NoModelsLoadedError
from ..config import AU_DEFINITIONS, AU_PREDICTORS_DIRNAME
from .strategies import get_all_strategies

logger = logging.getLogger(__name__)


def _parse_au_number(value) -> int:
    """"AU12" / "12" / 12 をAU番号に変換"""
    if isinstance(value, str):
        value = value.strip().upper()
        if value.startswith("AU"):
            value = value[2:]
    return int(value)


def load_au_models(models_path: Union[str, Path]) -> List[AUModel]:
    """
    <models_path>/AU_predictors/*.json からAUモデルを読み込む

    Args:
        models_path: モデルディレクトリ

    Returns:
        AU番号順のモデル一覧（検出戦略のないAUは除外）
    """
    predictors_dir = Path(models_path) / AU_PREDICTORS_DIRNAME
    if not predictors_dir.is_dir():
        return []

    known = {s.au_number for s in get_all_strategies()}
    models: Dict[int, AUModel] = {}

    for path in sorted(predictors_dir.glob("*.json")):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            model = AUModel(
                au_number=_parse_au_number(data["au"]),
                threshold=float(data.get("threshold", 0.15)),
                scale=float(data.get("scale", 5.0)),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ModelLoadError(f"AUモデルを読み込めません: {path}: {e}") from e

        if model.au_number not in known or model.au_number not in AU_DEFINITIONS:
            logger.warning("skipping %s: no classifier for AU%02d", path.name, model.au_number)
            continue
        models[model.au_number] = model

    return [models[k] for k in sorted(models)]


class AUDetector:
    """Action Unit強度推定器"""

    def __init__(self, models: List[AUModel]):
        if not models:
            raise NoModelsLoadedError("Action Unit モデルが見つかりません")

        self._models: Dict[int, AUModel] = {m.au_number: m for m in models}
        self._strategies: Dict[int, IAUDetectionStrategy] = {}
        for strategy in get_all_strategies():
            self.register_strategy(strategy)

        missing = [k for k in self._models if k not in self._strategies]
        if missing:
            raise ModelLoadError(f"検出戦略のないAUモデルがあります: {missing}")

    @classmethod
    def from_models_path(cls, models_path: Union[str, Path]) -> "AUDetector":
        models = load_au_models(models_path)
        logger.info("loaded %d AU models from %s", len(models), models_path)
        return cls(models)

    @property
    def class_names(self) -> List[str]:
        """出力キー (AU番号順)"""
        return [self._models[k].key for k in sorted(self._models)]

    def register_strategy(self, strategy: IAUDetectionStrategy) -> None:
        self._strategies[strategy.au_number] = strategy

    def predict(self, landmarks: np.ndarray, distances: Dict[str, float],
                angles: Dict[str, float]) -> Dict[str, float]:
        """全AUの強度 (0-5) を推定"""
        eye_dist = max(distances.get("eye_distance", 1.0), 1e-6)

        results = {}
        for au_num in sorted(self._models):
            model = self._models[au_num]
            raw_score, _ = self._strategies[au_num].detect(landmarks, distances, angles, eye_dist)
            raw_score = float(np.clip(raw_score, 0.0, 1.0))
            results[model.key] = raw_score * model.scale if raw_score >= model.threshold else 0.0
        return results

    def zeros(self) -> Dict[str, float]:
        """非検出フレーム用のベースライン"""
        return {name: 0.0 for name in self.class_names}
