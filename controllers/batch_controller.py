#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Контроллер для запуска без интерфейса.
Загружает изображение, выделяет границы и сохраняет результат.
"""

from typing import Optional
import cv2
from models.image_processor import ImageProcessor
from models.image_analyzer import ImageAnalyzer
from models.scharr_filter import ScharrFilterError
from utils.file_utils import validate_image_path, get_output_path, get_supported_formats_string
from utils.logging_utils import setup_logger

logger = setup_logger("batch")


class BatchController:
    """
    Контроллер пакетной обработки одного изображения.
    """

    def __init__(self, normalize: bool = False, in_place: bool = False, workers: int = 0):
        """
        Инициализация контроллера.

        Args:
            normalize: Делить модуль градиента на 8
            in_place: Писать результат в исходный буфер
            workers: Число потоков (0 = автоматически)
        """
        self.processor = ImageProcessor()
        self.analyzer = ImageAnalyzer()
        self.processor.set_parameter("normalize", normalize)
        self.processor.set_parameter("in_place", in_place)
        self.processor.set_parameter("workers", workers)

    def run(self, image_path: str, output_path: Optional[str] = None,
            comparison_path: Optional[str] = None) -> bool:
        """
        Обрабатывает одно изображение.

        Args:
            image_path: Путь к исходному изображению
            output_path: Путь для результата; по умолчанию рядом с исходным
            comparison_path: Путь для сравнительного вида (исходное | границы)

        Returns:
            True если результат сохранен
        """
        if not validate_image_path(image_path):
            logger.error(
                f"Неверный файл: {image_path} (поддерживаются: {get_supported_formats_string()})"
            )
            return False

        if not self.processor.load_image(image_path):
            return False

        try:
            edges = self.processor.process_image()
        except ScharrFilterError as exc:
            logger.error(f"Ошибка фильтра: {exc}")
            return False

        stats = self.analyzer.edge_statistics(edges)
        logger.info(
            f"Время: {self.processor.last_elapsed_ms:.2f} мс, "
            f"средний |G|={stats['mean']:.2f}, max={stats['max']:.0f}, "
            f"доля границ={stats['edge_ratio']:.3f}"
        )

        if output_path is None:
            output_path = get_output_path(image_path, bool(self.processor.get_parameter("normalize")))
        if not self.processor.save_image(output_path):
            return False

        if comparison_path:
            return self.save_comparison(comparison_path)
        return True

    def save_comparison(self, path: str) -> bool:
        """
        Сохраняет исходное изображение и карту границ рядом на одном полотне.

        Args:
            path: Путь к выходному файлу

        Returns:
            True если файл записан
        """
        canvas = self.analyzer.create_comparison_view(
            self.processor.original_image, self.processor.processed_image
        )
        if not cv2.imwrite(path, canvas):
            logger.error(f"Не удалось сохранить сравнение: {path}")
            return False
        logger.info(f"Сравнение сохранено: {path}")
        return True
