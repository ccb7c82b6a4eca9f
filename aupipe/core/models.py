"""
データモデル定義
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple
import numpy as np

# AU名 ("AU01" など) -> 強度 (0-5)
AUResult = Dict[str, float]

NUM_LANDMARKS = 68


@dataclass
class ActionUnitDefinition:
    """Action Unitの定義"""
    au_number: int
    name: str
    description: str
    muscular_basis: str

    @property
    def key(self) -> str:
        """出力辞書のキー (例: AU01)"""
        return f"AU{self.au_number:02d}"


@dataclass
class AUModel:
    """AU_predictors から読み込んだAUモデル"""
    au_number: int
    threshold: float = 0.15  # これ未満の生スコアは非検出 (0.0)
    scale: float = 5.0       # 生スコア (0-1) から強度 (0-5) への倍率

    @property
    def key(self) -> str:
        return f"AU{self.au_number:02d}"


@dataclass
class Frame:
    """カラーフレーム (H x W x 3, uint8)。呼び出し元バッファのコピーを保持する"""
    pixels: np.ndarray
    height: int
    width: int

    @property
    def is_empty(self) -> bool:
        return self.height == 0 or self.width == 0


@dataclass
class GrayFrame:
    """輝度画像 (H x W, uint8)"""
    pixels: np.ndarray

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]


@dataclass
class LandmarkSet:
    """68点ランドマークと検出品質"""
    points: np.ndarray
    success: bool = False
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> "LandmarkSet":
        return cls(points=np.zeros((NUM_LANDMARKS, 2), dtype=np.float64))

    @property
    def is_degenerate(self) -> bool:
        """全点が原点（一度も検出されていない）"""
        return not np.any(self.points)

    def bounding_box(self) -> Tuple[int, int, int, int]:
        """(x, y, w, h)"""
        x_min, y_min = self.points.min(axis=0)
        x_max, y_max = self.points.max(axis=0)
        return int(x_min), int(y_min), int(x_max - x_min), int(y_max - y_min)


@dataclass
class FeatureDescriptor:
    """HOG外観特徴量 (1 x rows*cols*cell_features) と宣言サイズ"""
    values: np.ndarray = field(default_factory=lambda: np.zeros((1, 0), dtype=np.float64))
    num_rows: int = 0
    num_cols: int = 0

    @property
    def is_empty(self) -> bool:
        return self.values.size == 0

    @property
    def cell_features(self) -> int:
        cells = self.num_rows * self.num_cols
        return self.values.size // cells if cells else 0

    def as_grid(self) -> np.ndarray:
        """(rows, cols, cell_features) に整形"""
        return self.values.reshape(self.num_rows, self.num_cols, self.cell_features)


@dataclass
class FramePrediction:
    """1フレーム分のAU予測"""
    timestamp: float
    success: bool
    scores: Dict[str, float] = field(default_factory=dict)
