#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Модель для анализа карты границ.
Содержит статистики, гистограмму модуля градиента и сравнительный вид.
"""

import cv2
import numpy as np
from typing import Dict
from config.settings import *


class ImageAnalyzer:
    """
    Класс для анализа карты границ и создания визуальных представлений.
    """

    def edge_statistics(self, edges: np.ndarray, threshold: int = EDGE_THRESHOLD) -> Dict[str, float]:
        """
        Вычисляет статистики модуля градиента по внутренним пикселям.

        Граничные пиксели не обрабатываются фильтром и не учитываются.

        Args:
            edges: Карта границ (h, w, 3)
            threshold: Порог, начиная с которого пиксель считается границей

        Returns:
            Словарь с ключами mean, max, edge_ratio
        """
        magnitude = edges[1:-1, 1:-1, 0]
        if magnitude.size == 0:
            return {"mean": 0.0, "max": 0.0, "edge_ratio": 0.0}

        return {
            "mean": float(magnitude.mean()),
            "max": float(magnitude.max()),
            "edge_ratio": float(np.count_nonzero(magnitude >= threshold)) / magnitude.size,
        }

    def make_histogram_image(self, edges: np.ndarray) -> np.ndarray:
        """
        Создает изображение с гистограммой модуля градиента.

        Нулевой столбец (однородные области) не учитывается при нормировке,
        иначе он подавляет остальные значения.

        Args:
            edges: Карта границ (h, w, 3)

        Returns:
            Изображение размером HISTOGRAM_HEIGHT x HISTOGRAM_WIDTH
        """
        canvas = np.zeros((HISTOGRAM_HEIGHT, HISTOGRAM_WIDTH, 3), dtype=np.uint8)

        magnitude = edges[1:-1, 1:-1, 0]
        histogram = np.bincount(magnitude.ravel(), minlength=HISTOGRAM_BINS).astype(np.float32)

        peak = float(histogram[1:].max()) if histogram[1:].size else 0.0
        if peak < 1e-9:
            peak = max(float(histogram.max()), 1.0)
        normalized = np.minimum(histogram / peak, 1.0) * (HISTOGRAM_HEIGHT - 20)

        cv2.rectangle(canvas, (0, 0), (HISTOGRAM_WIDTH - 1, HISTOGRAM_HEIGHT - 1), COLOR_GRAY, 1)

        points = []
        for i in range(HISTOGRAM_BINS):
            x_coord = int(i * (HISTOGRAM_WIDTH - 1) / (HISTOGRAM_BINS - 1))
            y_coord = HISTOGRAM_HEIGHT - 10 - int(normalized[i])
            points.append((x_coord, y_coord))

        for i in range(1, len(points)):
            cv2.line(canvas, points[i - 1], points[i], COLOR_WHITE, 1, cv2.LINE_AA)

        cv2.putText(canvas, "|G|", (5, 15), cv2.FONT_HERSHEY_SIMPLEX, 0.5, COLOR_TEXT, 1, cv2.LINE_AA)
        return canvas

    def create_comparison_view(self, original: np.ndarray, edges: np.ndarray) -> np.ndarray:
        """
        Создает полотно: исходное изображение слева, карта границ справа.

        Args:
            original: Исходное изображение BGR
            edges: Карта границ того же размера

        Returns:
            Полотно COMPARISON_TILE_SIZE x 2*COMPARISON_TILE_SIZE
        """
        canvas = np.zeros((COMPARISON_TILE_SIZE, 2 * COMPARISON_TILE_SIZE, 3), dtype=np.uint8)

        def scale_image_to_tile(image: np.ndarray) -> np.ndarray:
            """Масштабирует изображение до размера тайла."""
            height, width = image.shape[:2]
            scale_factor = COMPARISON_TILE_SIZE / max(height, width)
            new_width = max(1, int(width * scale_factor))
            new_height = max(1, int(height * scale_factor))
            return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_NEAREST)

        for col, (image, label) in enumerate(((original, "Source"), (edges, "Scharr"))):
            tile = scale_image_to_tile(image)
            height, width = tile.shape[:2]
            x_start = col * COMPARISON_TILE_SIZE
            canvas[:height, x_start:x_start + width] = tile
            # Текст с тенью для читаемости
            cv2.putText(canvas, label, (x_start + 8, 20), cv2.FONT_HERSHEY_SIMPLEX,
                        0.6, COLOR_BLACK, 3, cv2.LINE_AA)
            cv2.putText(canvas, label, (x_start + 8, 20), cv2.FONT_HERSHEY_SIMPLEX,
                        0.6, COLOR_YELLOW, 1, cv2.LINE_AA)

        return canvas
