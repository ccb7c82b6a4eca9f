"""画像アダプタ・グレースケール変換のテスト"""
import pytest
import numpy as np

from aupipe.core import to_frame, to_gray, InvalidShapeError, EmptyFrameError


class TestToFrame:
    """画像アダプタのテスト"""

    def test_valid_image(self, dummy_image):
        frame = to_frame(dummy_image)
        assert frame.height == 480
        assert frame.width == 640
        assert frame.pixels.shape == (480, 640, 3)
        assert frame.pixels.dtype == np.uint8

    def test_copies_buffer(self, dummy_image):
        """呼び出し元バッファを変更してもフレームに影響しない"""
        frame = to_frame(dummy_image)
        dummy_image[:] = 255
        assert not np.any(frame.pixels)

    @pytest.mark.parametrize("shape", [(100, 100), (100, 100, 4), (100, 100, 1), (1, 100, 100, 3), (300,)])
    def test_invalid_shape(self, shape):
        with pytest.raises(InvalidShapeError):
            to_frame(np.zeros(shape, dtype=np.uint8))

    def test_invalid_dtype(self):
        with pytest.raises(InvalidShapeError):
            to_frame(np.full((4, 4, 3), "a"))

    def test_ragged_list(self):
        """要素数の揃わないネストしたリスト"""
        with pytest.raises(InvalidShapeError):
            to_frame([[[0, 0, 0]], [[0, 0, 0], [1, 1, 1]]])

    def test_bool_buffer(self):
        with pytest.raises(InvalidShapeError):
            to_frame(np.ones((4, 4, 3), dtype=bool))

    def test_nested_list(self):
        frame = to_frame([[[0, 0, 0], [255, 255, 255]]])
        assert frame.pixels.shape == (1, 2, 3)
        assert frame.pixels.dtype == np.uint8

    def test_float_buffer_is_clipped(self):
        buffer = np.full((4, 4, 3), 300.0)
        buffer[0, 0] = -5.0
        frame = to_frame(buffer)
        assert frame.pixels.dtype == np.uint8
        assert frame.pixels[1, 1, 0] == 255
        assert frame.pixels[0, 0, 0] == 0

    def test_invalid_shape_is_value_error(self):
        """呼び出し元は ValueError としても捕捉できる"""
        with pytest.raises(ValueError):
            to_frame(np.zeros((10, 10), dtype=np.uint8))

    def test_empty_frame(self):
        frame = to_frame(np.zeros((0, 10, 3), dtype=np.uint8))
        assert frame.is_empty


class TestToGray:
    """グレースケール変換のテスト"""

    def test_same_dimensions(self, dummy_image):
        gray = to_gray(to_frame(dummy_image))
        assert gray.pixels.shape == (480, 640)
        assert gray.height == 480
        assert gray.width == 640

    def test_idempotent(self):
        rng = np.random.default_rng(0)
        frame = to_frame(rng.integers(0, 256, (32, 48, 3), dtype=np.uint8))
        assert np.array_equal(to_gray(frame).pixels, to_gray(frame).pixels)

    def test_luminance_formula(self):
        """BT.601: B=255 のみなら約29"""
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        image[..., 0] = 255
        gray = to_gray(to_frame(image))
        assert abs(int(gray.pixels[0, 0]) - 29) <= 1

    def test_empty_frame_raises(self):
        with pytest.raises(EmptyFrameError):
            to_gray(to_frame(np.zeros((0, 0, 3), dtype=np.uint8)))
