#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Оператор Шарра для выделения границ на упакованном 24-битном изображении.

Буфер изображения - непрерывная последовательность байт: строки по `stride`
байт, в каждой строке `width` пикселей по 3 байта. Каналы считаются
равноправными носителями яркости. Граничные пиксели не записываются.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from config.settings import (
    BAND_ROWS,
    BYTES_PER_PIXEL,
    MAX_PIXEL_VALUE,
    MIN_PIXEL_VALUE,
    NORMALIZE_DIVISOR,
    SCHARR_GX,
    SCHARR_GY,
)


KERNEL_X = np.array(SCHARR_GX, dtype=np.int32)
KERNEL_Y = np.array(SCHARR_GY, dtype=np.int32)
KERNEL_X.flags.writeable = False
KERNEL_Y.flags.writeable = False


class ScharrFilterError(ValueError):
    """Базовая ошибка фильтра: нарушено предусловие вызова."""


class InvalidGeometry(ScharrFilterError):
    """Ширина, высота или stride не описывают изображение с внутренними пикселями."""


class BufferTooSmall(ScharrFilterError):
    """Буфер короче, чем height * stride."""


def validate_geometry(width: int, height: int, stride: int) -> None:
    """
    Проверяет геометрию изображения.

    Изображения уже 3x3 не имеют внутренних пикселей и считаются ошибкой.

    Raises:
        InvalidGeometry: если width < 3, height < 3 или stride < width * 3
    """
    if width < 3 or height < 3:
        raise InvalidGeometry(
            f"image must be at least 3x3 pixels, got {width}x{height}"
        )
    if stride < width * BYTES_PER_PIXEL:
        raise InvalidGeometry(
            f"stride {stride} is smaller than row size {width * BYTES_PER_PIXEL}"
        )


def _as_byte_array(buffer, name: str, writable: bool = False) -> np.ndarray:
    """Возвращает плоское uint8-представление буфера без копирования."""
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise TypeError(f"{name} must have dtype uint8, got {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise TypeError(f"{name} must be C-contiguous")
        flat = buffer.reshape(-1)
    else:
        try:
            view = memoryview(buffer)
        except TypeError:
            raise TypeError(f"{name} must be a bytes-like object") from None
        if not view.c_contiguous:
            raise TypeError(f"{name} must be C-contiguous")
        flat = np.frombuffer(view.cast("B"), dtype=np.uint8)

    if writable and not flat.flags.writeable:
        raise TypeError(f"{name} is read-only")
    return flat


def grayscale_plane(pixels: np.ndarray) -> np.ndarray:
    """
    Переводит пиксели в серое как (c0 + c1 + c2) // 3.

    Args:
        pixels: Массив (h, w, 3) uint8

    Returns:
        Массив (h, w) uint16
    """
    # Сумма трёх каналов не превышает 765 и помещается в uint16
    gray = pixels[..., 0].astype(np.uint16)
    gray += pixels[..., 1]
    gray += pixels[..., 2]
    gray //= 3
    return gray


def scharr_magnitude(gray: np.ndarray, normalize: bool = False) -> np.ndarray:
    """
    Вычисляет модуль градиента Шарра для внутренних пикселей плоскости.

    Свёртка собирается из девяти сдвинутых срезов плоскости, без
    материализации окон 3x3.

    Args:
        gray: Целочисленная плоскость яркости (h, w), h >= 3, w >= 3
        normalize: Делить усечённый модуль на NORMALIZE_DIVISOR

    Returns:
        Массив (h - 2, w - 2) uint8
    """
    gray = np.asarray(gray, dtype=np.int32)
    h, w = gray.shape

    # |sum| <= 16 * 255, квадраты и их сумма помещаются в int32
    sum_x = np.zeros((h - 2, w - 2), dtype=np.int32)
    sum_y = np.zeros_like(sum_x)
    for i in range(3):
        for j in range(3):
            window = gray[i:i + h - 2, j:j + w - 2]
            if KERNEL_X[i, j]:
                sum_x += int(KERNEL_X[i, j]) * window
            if KERNEL_Y[i, j]:
                sum_y += int(KERNEL_Y[i, j]) * window

    sum_x *= sum_x
    sum_y *= sum_y
    sum_x += sum_y
    magnitude = np.sqrt(sum_x).astype(np.int32)
    del sum_x, sum_y
    if normalize:
        magnitude //= NORMALIZE_DIVISOR

    return np.clip(magnitude, MIN_PIXEL_VALUE, MAX_PIXEL_VALUE).astype(np.uint8)


def _row_ranges(height: int, workers: int) -> List[Tuple[int, int]]:
    """Делит внутренние строки [1, height - 1) на непрерывные диапазоны."""
    interior = height - 2
    count = max(1, min(workers, interior))
    chunk = (interior + count - 1) // count
    return [(lo, min(lo + chunk, height - 1)) for lo in range(1, height - 1, chunk)]


def compute_edges(
    source,
    destination,
    width: int,
    height: int,
    stride: int,
    normalize: bool = False,
    workers: int = 1,
) -> None:
    """
    Записывает карту границ Шарра во внутренние пиксели destination.

    Для каждого внутреннего пикселя (1 <= x < width-1, 1 <= y < height-1)
    модуль градиента записывается во все три канала. Граничные пиксели и байты
    выравнивания в конце строк не изменяются.

    destination может быть тем же буфером, что и source. Плоскость яркости
    всего изображения строится до первой записи, и все вычисления читают
    только её, поэтому результат совпадает с режимом отдельного буфера.

    Args:
        source: Буфер для чтения (bytes, bytearray, memoryview, uint8 ndarray)
        destination: Буфер для записи того же формата
        width: Ширина в пикселях
        height: Высота в пикселях
        stride: Длина строки в байтах
        normalize: Делить модуль на 8 перед насыщением
        workers: Число потоков; строки делятся между ними

    Raises:
        InvalidGeometry: Вырожденная геометрия
        BufferTooSmall: Любой из буферов короче height * stride
    """
    validate_geometry(width, height, stride)
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    src = _as_byte_array(source, "source")
    dst = _as_byte_array(destination, "destination", writable=True)

    required = height * stride
    for name, buf in (("source", src), ("destination", dst)):
        if buf.size < required:
            raise BufferTooSmall(
                f"{name} has {buf.size} bytes, {required} required "
                f"({height} rows x {stride} stride)"
            )

    row_bytes = width * BYTES_PER_PIXEL
    src_rows = src[:required].reshape(height, stride)
    dst_rows = dst[:required].reshape(height, stride)

    # Снимок яркости до любой записи в destination
    gray = grayscale_plane(src_rows[:, :row_bytes].reshape(height, width, BYTES_PER_PIXEL))

    out_lo = BYTES_PER_PIXEL
    out_hi = (width - 1) * BYTES_PER_PIXEL

    def _process_rows(lo: int, hi: int) -> None:
        # Полосами по BAND_ROWS строк, чтобы временные массивы не росли с высотой
        for band_lo in range(lo, hi, BAND_ROWS):
            band_hi = min(band_lo + BAND_ROWS, hi)
            magnitude = scharr_magnitude(gray[band_lo - 1:band_hi + 1], normalize)
            dst_rows[band_lo:band_hi, out_lo:out_hi] = np.repeat(magnitude, BYTES_PER_PIXEL, axis=1)

    ranges = _row_ranges(height, workers)
    if len(ranges) == 1:
        _process_rows(*ranges[0])
        return

    # Каждый поток пишет только свои строки
    with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
        futures: List[Future] = [pool.submit(_process_rows, lo, hi) for lo, hi in ranges]
        for future in futures:
            future.result()
