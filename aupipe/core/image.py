"""
画像アダプタとグレースケール変換
"""
import logging

import numpy as np
import cv2

from .errors import InvalidShapeError, EmptyFrameError
from .models import Frame, GrayFrame

logger = logging.getLogger(__name__)


def to_frame(buffer) -> Frame:
    """
    外部バッファを Frame に変換する

    H x W x 3 以外の形状は InvalidShapeError。呼び出し元バッファの寿命は
    保証されないため常にコピーする。

    Args:
        buffer: BGR順の画素配列（array-like）

    Returns:
        Frame
    """
    try:
        array = np.asarray(buffer)
    except (ValueError, TypeError) as e:
        # 不揃いなネストしたリストなど
        raise InvalidShapeError(f"画素配列に変換できません: {e}") from e

    if array.ndim != 3:
        raise InvalidShapeError(f"3チャンネル画像は3次元である必要があります: ndim={array.ndim}")
    if array.shape[2] != 3:
        raise InvalidShapeError(f"チャンネル数は3である必要があります: shape={array.shape}")
    if array.dtype.kind not in "iuf":
        raise InvalidShapeError(f"数値型の画素配列が必要です: dtype={array.dtype}")

    if array.dtype == np.uint8:
        pixels = np.array(array, dtype=np.uint8, order="C", copy=True)
    else:
        pixels = np.ascontiguousarray(np.clip(array, 0, 255).astype(np.uint8))

    return Frame(pixels=pixels, height=pixels.shape[0], width=pixels.shape[1])


def to_gray(frame: Frame) -> GrayFrame:
    """固定の輝度式 (BT.601) で GrayFrame を計算する"""
    if frame.is_empty:
        raise EmptyFrameError(f"空のフレームは変換できません: {frame.height}x{frame.width}")
    return GrayFrame(pixels=cv2.cvtColor(frame.pixels, cv2.COLOR_BGR2GRAY))
