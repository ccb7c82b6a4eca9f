"""
顔の傾き（回転・スケール）を正規化するモジュール
"""
import numpy as np
import cv2
from typing import Tuple, Optional
from dataclasses import dataclass


@dataclass
class FaceAlignment:
    """顔のアライメント情報"""
    center: Tuple[float, float]  # 顔の中心
    eye_distance: float        # 目の間の距離
    roll: float                # ロール（頭の傾き）


class FaceAligner:
    """顔の傾きを正規化し、相似変換で正面顔画像を切り出すクラス"""

    # 相似変換に使う基準点: 右目中心, 左目中心, 鼻先, 右口角, 左口角
    NOSE_TIP = 30
    MOUTH_RIGHT = 48
    MOUTH_LEFT = 54

    def __init__(self, output_size: int = 112, eye_position: float = 0.35):
        self._output_size = output_size
        self._eye_position = eye_position
        self._template = self._build_template()

    @property
    def output_size(self) -> int:
        return self._output_size

    def _build_template(self) -> np.ndarray:
        """出力画像上の基準点の位置"""
        size = self._output_size
        eye_dist = size * 0.4
        eye_y = size * self._eye_position
        return np.array([
            [size * 0.5 - eye_dist * 0.5, eye_y],   # 右目
            [size * 0.5 + eye_dist * 0.5, eye_y],   # 左目
            [size * 0.5, eye_y + eye_dist * 0.6],   # 鼻先
            [size * 0.5 - eye_dist * 0.4, eye_y + eye_dist * 1.1],  # 右口角
            [size * 0.5 + eye_dist * 0.4, eye_y + eye_dist * 1.1],  # 左口角
        ], dtype=np.float32)

    def _anchor_points(self, landmarks: np.ndarray) -> np.ndarray:
        right_eye = np.mean(landmarks[36:42], axis=0)
        left_eye = np.mean(landmarks[42:48], axis=0)
        return np.array([
            right_eye, left_eye,
            landmarks[self.NOSE_TIP], landmarks[self.MOUTH_RIGHT], landmarks[self.MOUTH_LEFT],
        ], dtype=np.float32)

    def compute_alignment(self, landmarks: np.ndarray) -> FaceAlignment:
        """
        ランドマークから顔のアライメント情報を計算

        Args:
            landmarks: 68点ランドマーク

        Returns:
            FaceAlignment: アライメント情報
        """
        left_eye_center = np.mean(landmarks[42:48], axis=0)
        right_eye_center = np.mean(landmarks[36:42], axis=0)

        eye_distance = float(np.linalg.norm(left_eye_center - right_eye_center))
        face_center = (left_eye_center + right_eye_center) / 2

        # 両目を結ぶ線の角度
        dy = left_eye_center[1] - right_eye_center[1]
        dx = left_eye_center[0] - right_eye_center[0]
        roll_angle = float(np.degrees(np.arctan2(dy, dx)))

        return FaceAlignment(
            center=(float(face_center[0]), float(face_center[1])),
            eye_distance=eye_distance,
            roll=roll_angle,
        )

    def normalize_landmarks(self, landmarks: np.ndarray,
                            alignment: Optional[FaceAlignment] = None) -> np.ndarray:
        """
        ランドマークを正規化（回転・スケール・位置を補正）

        Args:
            landmarks: 元のランドマーク
            alignment: アライメント情報（Noneの場合は自動計算）

        Returns:
            正規化されたランドマーク（目の間の距離が1.0）
        """
        if alignment is None:
            alignment = self.compute_alignment(landmarks)

        centered = landmarks - np.array(alignment.center)

        angle_rad = -np.radians(alignment.roll)
        rotation_matrix = np.array([
            [np.cos(angle_rad), -np.sin(angle_rad)],
            [np.sin(angle_rad), np.cos(angle_rad)]
        ])
        rotated = centered @ rotation_matrix.T

        if alignment.eye_distance > 0:
            return rotated / alignment.eye_distance
        return rotated

    def align_image(self, image: np.ndarray, landmarks: np.ndarray) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        相似変換で顔を正面・正規サイズに整列

        Args:
            image: 入力画像 (BGR)
            landmarks: 68点ランドマーク

        Returns:
            (整列された画像, 変換行列)。変換が求まらない場合は灰色画像と None
        """
        size = (self._output_size, self._output_size)
        M = None
        if np.any(landmarks):
            M, _ = cv2.estimateAffinePartial2D(self._anchor_points(landmarks), self._template,
                                               method=cv2.LMEDS)

        if M is None:
            shape = (self._output_size, self._output_size) + image.shape[2:]
            return np.full(shape, 128, dtype=np.uint8), None

        aligned = cv2.warpAffine(image, M, size,
                                 flags=cv2.INTER_LINEAR,
                                 borderMode=cv2.BORDER_CONSTANT,
                                 borderValue=(128, 128, 128))
        return aligned, M
