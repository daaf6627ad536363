#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Тесты оператора Шарра на упакованных буферах.
"""

import math
import tracemalloc

import numpy as np
import pytest

from models.scharr_filter import (
    BufferTooSmall,
    InvalidGeometry,
    ScharrFilterError,
    compute_edges,
    grayscale_plane,
    scharr_magnitude,
)

GX = [[-3, 0, 3], [-10, 0, 10], [-3, 0, 3]]
GY = [[-3, -10, -3], [0, 0, 0], [3, 10, 3]]


def pack(pixels: np.ndarray, stride: int = None, fill: int = 0) -> bytearray:
    """Упаковывает (h, w, 3) в bytearray со строками по stride байт."""
    height, width = pixels.shape[:2]
    stride = stride or width * 3
    buffer = bytearray([fill]) * (height * stride)
    for y in range(height):
        buffer[y * stride:y * stride + width * 3] = pixels[y].tobytes()
    return buffer


def pixel(buffer, x: int, y: int, stride: int) -> tuple:
    offset = y * stride + x * 3
    return tuple(buffer[offset:offset + 3])


def reference_edges(buffer, width, height, stride, normalize):
    """Попиксельная реализация по определению."""
    out = bytearray(len(buffer))
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            sum_x = sum_y = 0
            for i in range(3):
                for j in range(3):
                    offset = (y + i - 1) * stride + (x + j - 1) * 3
                    gray = (buffer[offset] + buffer[offset + 1] + buffer[offset + 2]) // 3
                    sum_x += gray * GX[i][j]
                    sum_y += gray * GY[i][j]
            magnitude = int(math.sqrt(sum_x * sum_x + sum_y * sum_y))
            if normalize:
                magnitude //= 8
            magnitude = max(0, min(255, magnitude))
            offset = y * stride + x * 3
            out[offset:offset + 3] = bytes((magnitude,) * 3)
    return out


def random_image(height, width, seed=0):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def step_image(right_value, left_value=0, size=5):
    """Левые два столбца left_value, остальные right_value."""
    pixels = np.full((size, size, 3), right_value, dtype=np.uint8)
    pixels[:, :2] = left_value
    return pixels


def test_uniform_image_gives_zero_interior():
    source = pack(np.full((5, 5, 3), 128, dtype=np.uint8))
    destination = bytearray(len(source))

    compute_edges(source, destination, 5, 5, 15, normalize=False)

    for y in range(1, 4):
        for x in range(1, 4):
            assert pixel(destination, x, y, 15) == (0, 0, 0)


def test_black_white_step_saturates_in_both_modes():
    # В столбце x=2 (и x=1) sumX = 16 * 255 = 4080, sumY = 0
    source = pack(step_image(255))
    for normalize in (False, True):
        destination = bytearray(len(source))
        compute_edges(source, destination, 5, 5, 15, normalize=normalize)

        assert pixel(destination, 2, 2, 15) == (255, 255, 255)
        for y in range(1, 4):
            assert pixel(destination, 1, y, 15) == (255, 255, 255)
            assert pixel(destination, 3, y, 15) == (0, 0, 0)


@pytest.mark.parametrize("normalize, expected", [(False, 160), (True, 20)])
def test_weak_step_distinguishes_normalize(normalize, expected):
    # sumX = 16 * 10 = 160
    source = pack(step_image(10))
    destination = bytearray(len(source))

    compute_edges(source, destination, 5, 5, 15, normalize=normalize)

    assert pixel(destination, 2, 2, 15) == (expected,) * 3
    assert pixel(destination, 3, 2, 15) == (0, 0, 0)


@pytest.mark.parametrize("normalize, expected", [(False, 42), (True, 5)])
def test_magnitude_is_truncated_before_division(normalize, expected):
    # Единственный ненулевой пиксель в углу: sumX = sumY = -30, sqrt(1800) = 42.43
    pixels = np.zeros((5, 5, 3), dtype=np.uint8)
    pixels[0, 0] = 10
    source = pack(pixels)
    destination = bytearray(len(source))

    compute_edges(source, destination, 5, 5, 15, normalize=normalize)

    assert pixel(destination, 1, 1, 15) == (expected,) * 3
    assert pixel(destination, 2, 1, 15) == (0, 0, 0)
    assert pixel(destination, 1, 2, 15) == (0, 0, 0)


def test_grayscale_uses_floor_average():
    # (0 + 1 + 2) // 3 = 1, (0 + 0 + 2) // 3 = 0
    pixels = step_image(0)
    pixels[:, 2:] = (0, 1, 2)
    destination = bytearray(75)
    compute_edges(pack(pixels), destination, 5, 5, 15)
    assert pixel(destination, 2, 2, 15) == (16, 16, 16)

    pixels[:, 2:] = (0, 0, 2)
    destination = bytearray(75)
    compute_edges(pack(pixels), destination, 5, 5, 15)
    assert pixel(destination, 2, 2, 15) == (0, 0, 0)


def test_borders_untouched_in_fresh_destination():
    source = pack(random_image(6, 7, seed=1))
    destination = bytearray(len(source))

    compute_edges(source, destination, 7, 6, 21)

    out = np.frombuffer(bytes(destination), dtype=np.uint8).reshape(6, 7, 3)
    assert not out[0].any()
    assert not out[-1].any()
    assert not out[:, 0].any()
    assert not out[:, -1].any()


def test_row_padding_is_not_written():
    width, height, stride = 5, 4, 20
    source = pack(random_image(height, width, seed=2), stride=stride)
    destination = bytearray([0xAB]) * (height * stride)

    compute_edges(source, destination, width, height, stride)

    for y in range(height):
        assert destination[y * stride + width * 3:(y + 1) * stride] == bytearray([0xAB]) * 5


@pytest.mark.parametrize("normalize", [False, True])
def test_matches_per_pixel_reference(normalize):
    width, height, stride = 9, 7, 32
    source = pack(random_image(height, width, seed=3), stride=stride)
    destination = bytearray(len(source))

    compute_edges(source, destination, width, height, stride, normalize=normalize)

    assert destination == reference_edges(source, width, height, stride, normalize)


@pytest.mark.parametrize("normalize", [False, True])
def test_in_place_matches_copy_mode(normalize):
    width, height, stride = 12, 10, 36
    original = pack(random_image(height, width, seed=4), stride=stride)

    copied = bytearray(len(original))
    compute_edges(original, copied, width, height, stride, normalize=normalize)

    shared = bytearray(original)
    compute_edges(shared, shared, width, height, stride, normalize=normalize)

    shared_px = np.frombuffer(bytes(shared), dtype=np.uint8).reshape(height, stride)[:, :width * 3]
    copied_px = np.frombuffer(bytes(copied), dtype=np.uint8).reshape(height, stride)[:, :width * 3]
    original_px = np.frombuffer(bytes(original), dtype=np.uint8).reshape(height, stride)[:, :width * 3]

    shared_px = shared_px.reshape(height, width, 3)
    copied_px = copied_px.reshape(height, width, 3)
    original_px = original_px.reshape(height, width, 3)

    np.testing.assert_array_equal(shared_px[1:-1, 1:-1], copied_px[1:-1, 1:-1])
    # В режиме in-place граница сохраняет исходные пиксели
    np.testing.assert_array_equal(shared_px[0], original_px[0])
    np.testing.assert_array_equal(shared_px[-1], original_px[-1])
    np.testing.assert_array_equal(shared_px[:, 0], original_px[:, 0])
    np.testing.assert_array_equal(shared_px[:, -1], original_px[:, -1])


@pytest.mark.parametrize("workers", [2, 3, 8, 64])
def test_parallel_rows_match_single_thread(workers):
    width, height = 23, 17
    source = pack(random_image(height, width, seed=5))
    expected = bytearray(len(source))
    compute_edges(source, expected, width, height, width * 3, workers=1)

    destination = bytearray(len(source))
    compute_edges(source, destination, width, height, width * 3, workers=workers)
    assert destination == expected

    shared = bytearray(source)
    compute_edges(shared, shared, width, height, width * 3, workers=workers)
    shared_px = np.frombuffer(bytes(shared), dtype=np.uint8).reshape(height, width, 3)
    expected_px = np.frombuffer(bytes(expected), dtype=np.uint8).reshape(height, width, 3)
    np.testing.assert_array_equal(shared_px[1:-1, 1:-1], expected_px[1:-1, 1:-1])


def test_checkerboard_stays_in_byte_range():
    pixels = np.zeros((8, 8, 3), dtype=np.uint8)
    pixels[::2, ::2] = 255
    pixels[1::2, 1::2] = 255
    source = pack(pixels)
    destination = bytearray(len(source))

    compute_edges(source, destination, 8, 8, 24)

    assert destination == reference_edges(source, 8, 8, 24, False)
    out = np.frombuffer(bytes(destination), dtype=np.uint8).reshape(8, 8, 3)
    assert out[1:-1, 1:-1].min() >= 0
    assert out[1:-1, 1:-1].max() <= 255


def test_repeated_runs_are_identical():
    source = pack(random_image(9, 11, seed=6))
    first = bytearray(len(source))
    second = bytearray(len(source))

    compute_edges(source, first, 11, 9, 33, normalize=True)
    compute_edges(source, second, 11, 9, 33, normalize=True)

    assert first == second


def test_accepts_numpy_arrays_and_memoryviews():
    pixels = random_image(6, 6, seed=7)
    expected = bytearray(108)
    compute_edges(bytes(pack(pixels)), expected, 6, 6, 18)

    destination = np.zeros((6, 6, 3), dtype=np.uint8)
    compute_edges(pixels, destination, 6, 6, 18)
    assert destination.tobytes() == bytes(expected)

    view_destination = bytearray(108)
    compute_edges(memoryview(pack(pixels)), memoryview(view_destination), 6, 6, 18)
    assert view_destination == expected


def test_buffers_may_be_longer_than_needed():
    source = pack(step_image(255)) + bytearray(10)
    destination = bytearray(len(source))
    compute_edges(source, destination, 5, 5, 15)
    assert pixel(destination, 2, 2, 15) == (255, 255, 255)
    assert destination[75:] == bytearray(10)


@pytest.mark.parametrize("width, height, stride", [
    (2, 5, 6),
    (5, 2, 15),
    (1, 1, 3),
    (5, 5, 14),
])
def test_invalid_geometry(width, height, stride):
    source = bytearray(max(height * stride, 1))
    destination = bytearray(b"\x07") * len(source)

    with pytest.raises(InvalidGeometry):
        compute_edges(source, destination, width, height, stride)

    assert destination == bytearray(b"\x07") * len(source)


def test_source_one_byte_short():
    source = pack(step_image(255))[:-1]
    destination = bytearray(b"\x07") * 75

    with pytest.raises(BufferTooSmall):
        compute_edges(source, destination, 5, 5, 15)

    assert destination == bytearray(b"\x07") * 75


def test_destination_one_byte_short():
    source = pack(step_image(255))
    destination = bytearray(74)

    with pytest.raises(BufferTooSmall):
        compute_edges(source, destination, 5, 5, 15)

    assert destination == bytearray(74)


def test_errors_share_base_class():
    assert issubclass(InvalidGeometry, ScharrFilterError)
    assert issubclass(BufferTooSmall, ScharrFilterError)
    assert issubclass(ScharrFilterError, ValueError)


def test_read_only_destination_is_rejected():
    source = pack(step_image(255))
    with pytest.raises(TypeError):
        compute_edges(source, bytes(75), 5, 5, 15)


def test_workers_must_be_positive():
    source = pack(step_image(255))
    with pytest.raises(ValueError):
        compute_edges(source, bytearray(75), 5, 5, 15, workers=0)


def test_magnitude_plane_shape_and_values():
    gray = grayscale_plane(step_image(255))
    assert gray.shape == (5, 5)
    assert gray[0, 4] == 255

    magnitude = scharr_magnitude(gray)
    assert magnitude.shape == (3, 3)
    assert magnitude.dtype == np.uint8
    np.testing.assert_array_equal(magnitude[:, 0], [255, 255, 255])
    np.testing.assert_array_equal(magnitude[:, 2], [0, 0, 0])


def test_grayscale_plane_floors_channel_average():
    pixels = np.array([[[0, 1, 2], [255, 255, 254]]], dtype=np.uint8)
    np.testing.assert_array_equal(grayscale_plane(pixels), [[1, 254]])


def test_peak_memory_stays_proportional_to_buffer():
    width, height = 1200, 900
    source = pack(random_image(height, width, seed=8))
    destination = bytearray(len(source))

    tracemalloc.start()
    try:
        compute_edges(source, destination, width, height, width * 3)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert peak < 4 * len(source)
    assert destination[(height // 2) * width * 3:(height // 2 + 1) * width * 3].strip(b"\x00")
