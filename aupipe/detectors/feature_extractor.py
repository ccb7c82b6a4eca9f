import numpy as np
import cv2
from typing import Dict, Optional

from ..core.models import FeatureDescriptor
from .face_aligner import FaceAligner, FaceAlignment


class FeatureExtractor:
    """顔の幾何特徴量抽出器（回転補正対応）"""

    def __init__(self, aligner: Optional[FaceAligner] = None):
        self._aligner = aligner or FaceAligner()
        self._last_alignment: Optional[FaceAlignment] = None

    def compute_distances(self, landmarks: np.ndarray) -> Dict[str, float]:
        """距離特徴を計算（回転補正済み）"""
        self._last_alignment = self._aligner.compute_alignment(landmarks)
        normalized = self._aligner.normalize_landmarks(landmarks, self._last_alignment)
        return self._compute_distances_internal(normalized, max(self._last_alignment.eye_distance, 1e-6))

    def _compute_distances_internal(self, landmarks: np.ndarray, scale: float) -> Dict[str, float]:
        """正規化されたランドマークから距離を計算"""
        right_eye = landmarks[36:42]
        left_eye = landmarks[42:48]
        outer_mouth = landmarks[48:60]
        inner_mouth = landmarks[60:68]
        right_eyebrow = landmarks[17:22]
        left_eyebrow = landmarks[22:27]

        # 目のアスペクト比
        right_eye_height = (np.linalg.norm(right_eye[1] - right_eye[5]) +
                            np.linalg.norm(right_eye[2] - right_eye[4])) / 2
        right_eye_width = np.linalg.norm(right_eye[0] - right_eye[3])

        left_eye_height = (np.linalg.norm(left_eye[1] - left_eye[5]) +
                           np.linalg.norm(left_eye[2] - left_eye[4])) / 2
        left_eye_width = np.linalg.norm(left_eye[0] - left_eye[3])

        # 口
        mouth_width = np.linalg.norm(outer_mouth[0] - outer_mouth[6])
        mouth_height_outer = np.linalg.norm(outer_mouth[3] - outer_mouth[9])
        mouth_height_inner = np.linalg.norm(inner_mouth[2] - inner_mouth[6])

        brow_distance = np.linalg.norm(right_eyebrow[4] - left_eyebrow[0])

        return {
            "right_eye_aspect_ratio": float(right_eye_height / max(right_eye_width, 1e-6)),
            "left_eye_aspect_ratio": float(left_eye_height / max(left_eye_width, 1e-6)),
            "mouth_width": float(mouth_width * scale),
            "mouth_height_outer": float(mouth_height_outer * scale),
            "mouth_height_inner": float(mouth_height_inner * scale),
            "mouth_aspect_ratio": float(mouth_height_outer / max(mouth_width, 1e-6)),
            "brow_distance": float(brow_distance * scale),
            "eye_distance": float(scale),
        }

    def compute_angles(self, landmarks: np.ndarray) -> Dict[str, float]:
        """角度特徴を計算（回転補正済み）"""
        if self._last_alignment is None:
            self._last_alignment = self._aligner.compute_alignment(landmarks)
        normalized = self._aligner.normalize_landmarks(landmarks, self._last_alignment)

        right_eyebrow = normalized[17:22]
        left_eyebrow = normalized[22:27]
        outer_mouth = normalized[48:60]

        right_brow_angle = np.degrees(np.arctan2(
            right_eyebrow[0][1] - right_eyebrow[4][1],
            right_eyebrow[0][0] - right_eyebrow[4][0]
        ))
        left_brow_angle = np.degrees(np.arctan2(
            left_eyebrow[4][1] - left_eyebrow[0][1],
            left_eyebrow[4][0] - left_eyebrow[0][0]
        ))

        mouth_center_y = (outer_mouth[3][1] + outer_mouth[9][1]) / 2
        right_mouth_angle = np.degrees(np.arctan2(
            outer_mouth[0][1] - mouth_center_y,
            outer_mouth[0][0] - outer_mouth[3][0]
        ))
        left_mouth_angle = np.degrees(np.arctan2(
            outer_mouth[6][1] - mouth_center_y,
            outer_mouth[6][0] - outer_mouth[3][0]
        ))

        return {
            'right_brow_angle': float(right_brow_angle),
            'left_brow_angle': float(left_brow_angle),
            'right_mouth_angle': float(right_mouth_angle),
            'left_mouth_angle': float(left_mouth_angle),
            'face_roll': self._last_alignment.roll,
        }


class HOGExtractor:
    """整列済み顔画像から HOG 外観特徴量を計算"""

    NBINS = 9

    def __init__(self, face_size: int = 112, cell_size: int = 8):
        if face_size < 2 * cell_size:
            raise ValueError(f"face_size は cell_size の2倍以上が必要です: {face_size} < {2 * cell_size}")
        block = 2 * cell_size
        self._face_size = face_size
        self._hog = cv2.HOGDescriptor((face_size, face_size), (block, block),
                                      (cell_size, cell_size), (cell_size, cell_size), self.NBINS)
        self._grid = (face_size - block) // cell_size + 1

    @property
    def grid_size(self) -> int:
        """ブロック格子の一辺の数"""
        return self._grid

    def compute(self, aligned_face: np.ndarray) -> FeatureDescriptor:
        gray = aligned_face
        if gray.ndim == 3:
            gray = cv2.cvtColor(aligned_face, cv2.COLOR_BGR2GRAY)
        if gray.shape[:2] != (self._face_size, self._face_size):
            gray = cv2.resize(gray, (self._face_size, self._face_size))

        values = self._hog.compute(np.ascontiguousarray(gray))
        return FeatureDescriptor(
            values=np.asarray(values, dtype=np.float64).reshape(1, -1),
            num_rows=self._grid,
            num_cols=self._grid,
        )
