#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Модель для обработки изображений.
Готовит буферы Bgr24, вызывает оператор Шарра и измеряет время выполнения.
"""

import time
from typing import Any, Optional, Tuple
import cv2
import numpy as np
from config.settings import *
from models.scharr_filter import compute_edges
from utils.logging_utils import setup_logger

logger = setup_logger("processor")


def compute_stride(width: int) -> int:
    """
    Вычисляет длину строки Bgr24 с выравниванием.

    Args:
        width: Ширина изображения в пикселях

    Returns:
        Длина строки в байтах, кратная STRIDE_ALIGNMENT
    """
    row_bytes = width * BYTES_PER_PIXEL
    return (row_bytes + STRIDE_ALIGNMENT - 1) // STRIDE_ALIGNMENT * STRIDE_ALIGNMENT


def pack_image(bgr: np.ndarray) -> Tuple[bytearray, int]:
    """
    Упаковывает изображение (h, w, 3) в буфер со строками по stride байт.

    Args:
        bgr: Изображение в формате BGR, uint8

    Returns:
        Кортеж (буфер, stride)
    """
    height, width = bgr.shape[:2]
    stride = compute_stride(width)
    buffer = bytearray(height * stride)
    rows = np.frombuffer(buffer, dtype=np.uint8).reshape(height, stride)
    rows[:, :width * BYTES_PER_PIXEL] = bgr.reshape(height, width * BYTES_PER_PIXEL)
    return buffer, stride


def unpack_image(buffer, width: int, height: int, stride: int) -> np.ndarray:
    """
    Извлекает пиксели из буфера в массив (h, w, 3), отбрасывая выравнивание.

    Returns:
        Копия пикселей в формате uint8
    """
    rows = np.frombuffer(buffer, dtype=np.uint8, count=height * stride).reshape(height, stride)
    return rows[:, :width * BYTES_PER_PIXEL].reshape(height, width, BYTES_PER_PIXEL).copy()


class ImageProcessor:
    """
    Класс для выделения границ оператором Шарра.
    """

    def __init__(self):
        """Инициализация процессора изображений."""
        self.original_image = None
        self.processed_image = None
        self.params_dirty = True
        self.last_elapsed_ms = 0.0

        # Параметры обработки
        self.params = {
            "normalize": False,     # делить модуль на 8
            "in_place": False,      # результат пишется в исходный буфер
            "workers": 0,           # 0 = автоматически
        }

    def load_image(self, path: str) -> bool:
        """
        Загружает изображение из файла.

        Args:
            path: Путь к файлу изображения

        Returns:
            True если изображение успешно загружено, False иначе
        """
        img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
        if img is None:
            logger.error(f"Не удалось прочитать изображение: {path}")
            return False

        if img.dtype == np.uint16:
            # 16-битные PNG/TIFF -> 8 бит на канал
            img = cv2.convertScaleAbs(img, alpha=MAX_PIXEL_VALUE / 65535.0)
        elif img.dtype != np.uint8:
            logger.error(f"Неподдерживаемый тип пикселей {img.dtype}: {path}")
            return False
        if img.ndim == 2:
            # Серое изображение -> в 3 канала
            img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
        elif img.shape[2] == 4:
            # Отбрасываем альфа-канал
            img = np.ascontiguousarray(img[:, :, :3])

        self.set_image(img)
        logger.info(f"Загружено {path}: {img.shape[1]}x{img.shape[0]}")
        return True

    def set_image(self, bgr: np.ndarray) -> None:
        """
        Устанавливает исходное изображение напрямую.

        Args:
            bgr: Изображение (h, w, 3) uint8

        Raises:
            TypeError: Тип пикселей не uint8
        """
        if bgr.dtype != np.uint8:
            raise TypeError(f"expected uint8 pixels, got {bgr.dtype}")
        self.original_image = np.ascontiguousarray(bgr)
        self.processed_image = None
        self.params_dirty = True

    def set_parameter(self, param_name: str, value: Any) -> None:
        """
        Устанавливает параметр обработки.

        Args:
            param_name: Имя параметра
            value: Значение параметра
        """
        if param_name in self.params and self.params[param_name] != value:
            self.params[param_name] = value
            self.params_dirty = True

    def get_parameter(self, param_name: str) -> Any:
        """
        Получает значение параметра.

        Args:
            param_name: Имя параметра

        Returns:
            Значение параметра
        """
        return self.params.get(param_name, None)

    def resolve_workers(self, width: int, height: int) -> int:
        """Выбирает число потоков: явно заданное или по размеру изображения."""
        workers = int(self.params.get("workers", 0))
        if workers > 0:
            return workers
        if width * height < PARALLEL_MIN_PIXELS:
            return 1
        return min(MAX_WORKERS, height - 2)

    def process_image(self) -> Optional[np.ndarray]:
        """
        Выделяет границы согласно текущим параметрам.

        Буферы выделяет вызывающая сторона: исходный упакованный буфер и
        обнулённый буфер результата (или тот же буфер в режиме in_place).

        Returns:
            Карта границ (h, w, 3) или None, если изображение не загружено

        Raises:
            ScharrFilterError: Изображение меньше 3x3
        """
        if self.original_image is None:
            return None
        if not self.params_dirty and self.processed_image is not None:
            return self.processed_image

        height, width = self.original_image.shape[:2]
        normalize = bool(self.params["normalize"])
        in_place = bool(self.params["in_place"])
        workers = self.resolve_workers(width, height)

        source, stride = pack_image(self.original_image)
        destination = source if in_place else bytearray(len(source))
        logger.debug(
            f"Буферы: {width}x{height}, stride={stride}, "
            f"in_place={in_place}, normalize={normalize}, workers={workers}"
        )

        start = time.perf_counter()
        compute_edges(source, destination, width, height, stride,
                      normalize=normalize, workers=workers)
        self.last_elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(f"Оператор Шарра: {width}x{height} за {self.last_elapsed_ms:.2f} мс")

        self.processed_image = unpack_image(destination, width, height, stride)
        self.params_dirty = False
        return self.processed_image

    def save_image(self, path: str) -> bool:
        """
        Сохраняет карту границ в файл.

        Args:
            path: Путь к выходному файлу

        Returns:
            True если файл записан
        """
        if self.processed_image is None:
            logger.warning("Нечего сохранять: изображение не обработано")
            return False
        ok = bool(cv2.imwrite(path, self.processed_image))
        if ok:
            logger.info(f"Сохранено: {path}")
        else:
            logger.error(f"Не удалось сохранить: {path}")
        return ok
